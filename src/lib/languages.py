"""
Language registry for csprender

Maps block tags to immutable LanguageSpec descriptors. The registry is built
once at startup and handed to the renderer; it is never mutated while a
document is being rendered.
"""

from typing import List, Optional

from ..models.language import LanguageSpec, ModeHook


class UnknownLanguageError(LookupError):
    """Raised when a block tag has no registered language"""

    def __init__(self, tag: str) -> None:
        super().__init__(f"Unrecognized language tag {tag}")
        self.tag = tag


C_MAIN = ModeHook(opening="int main() {\n", closing="\n}\n")
RS_MAIN = ModeHook(opening="fn main() {\n", closing="\n}\n")


class LanguageRegistry:
    """
    Registry of language specifications

    Lookup is a linear scan with exact tag equality; the set of languages is
    small and fixed for the lifetime of a run.
    """

    def __init__(self, specs: Optional[List[LanguageSpec]] = None) -> None:
        """Initialize the registry, optionally with an initial list of specs"""
        self.specs: List[LanguageSpec] = []
        for spec in specs or []:
            self.register(spec)

    def register(self, spec: LanguageSpec) -> None:
        """
        Register a language specification

        Raises:
            ValueError: if a language with the same tag is already registered
        """
        if any(existing.tag == spec.tag for existing in self.specs):
            raise ValueError(f"Language tag already registered: {spec.tag}")
        self.specs.append(spec)

    def resolve(self, tag: str) -> LanguageSpec:
        """
        Get the language specification for a block tag

        Args:
            tag: Tag as written in the document

        Returns:
            The matching LanguageSpec

        Raises:
            UnknownLanguageError: if no language uses this tag
        """
        for spec in self.specs:
            if spec.tag == tag:
                return spec
        raise UnknownLanguageError(tag)

    def tags_list(self) -> List[str]:
        """Get all registered tags in registration order"""
        return [spec.tag for spec in self.specs]

    def __len__(self) -> int:
        return len(self.specs)


def builtinLanguages_make(python_executable: str) -> List[LanguageSpec]:
    """
    Build the built-in language specifications

    Compiled languages produce "<source>.out" next to the generated source
    and execute it directly. Python runs the generated source as-is, so its
    artifact is the source file itself.

    Args:
        python_executable: Interpreter used for "py" blocks
    """
    return [
        LanguageSpec(
            tag="c",
            compile=("gcc", "-include", "stdio.h", "-o", "{artifact}", "{source}"),
            execute=("{artifact}", "{params}"),
            output_extension=".out",
            modes={"main": C_MAIN},
        ),
        LanguageSpec(
            tag="cpp",
            compile=(
                "g++", "-include", "stdio.h", "-include", "iostream",
                "-o", "{artifact}", "{source}",
            ),
            execute=("{artifact}", "{params}"),
            output_extension=".out",
            modes={"main": C_MAIN},
        ),
        LanguageSpec(
            tag="py",
            execute=(python_executable, "{source}", "{params}"),
            output_extension="",
        ),
        LanguageSpec(
            tag="rs",
            compile=("rustc", "-o", "{artifact}", "--crate-name", "csp_rs", "{source}"),
            execute=("{artifact}", "{params}"),
            output_extension=".out",
            modes={"main": RS_MAIN},
        ),
    ]


def default_registry(settings=None) -> LanguageRegistry:
    """
    Build the process-wide registry of built-in languages

    Args:
        settings: AppSettings instance (defaults to the global appsettings)
    """
    if settings is None:
        from ..config import appsettings
        settings = appsettings
    return LanguageRegistry(builtinLanguages_make(settings.python_executable))
