"""
Language descriptor and mode hook models

Defines the immutable structures the language registry hands out: one
LanguageSpec per tag, each carrying its boilerplate, toolchain command
templates and a table of ModeHooks keyed by mode name.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterable, Mapping, Optional, Tuple


@dataclass(frozen=True)
class ModeHook:
    """
    Extra source emitted around a block body for one named mode

    Attributes:
        opening: Text written after the language boilerplate, before the body
        closing: Text written after the body, before the closing boilerplate

    Example:
        ModeHook(opening="int main() {\\n", closing="\\n}\\n")
    """
    opening: str = ""
    closing: str = ""


# Hook used for any mode name a language does not recognize
NO_MODE = ModeHook()


@dataclass(frozen=True)
class LanguageSpec:
    """
    Specification for an embeddable language

    Command templates are argv tuples. Each element is formatted on its own
    with the placeholders {source} (generated source file), {artifact}
    (source path + output_extension) and {params} (serialized query string).
    No shell is involved.

    Attributes:
        tag: Tag used in the document, usually the file extension ("c", "py")
        execute: argv template that runs the artifact
        compile: Optional argv template run once before execution
        output_extension: Suffix of the file that is executed and cached
        opening: Boilerplate written at the top of every generated source
        closing: Boilerplate written at the bottom of every generated source
        modes: Mode name -> ModeHook
    """
    tag: str
    execute: Tuple[str, ...]
    compile: Optional[Tuple[str, ...]] = None
    output_extension: str = ""
    opening: str = ""
    closing: str = ""
    modes: Mapping[str, ModeHook] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        # Freeze the hook table so descriptors stay read-only once registered
        object.__setattr__(self, "modes", MappingProxyType(dict(self.modes)))

    def mode_get(self, name: str) -> ModeHook:
        """Get the hook for a mode name, or the no-op hook if unrecognized"""
        return self.modes.get(name, NO_MODE)

    def source_generate(self, body: bytes, modes: Iterable[str]) -> bytes:
        """
        Build the generated source file for one block

        Layout: opening boilerplate, mode openings, body, mode closings,
        closing boilerplate. Hooks fire in the order the modes were given
        in the block tag, for both the openings and the closings.

        Args:
            body: Raw block body as read from the document
            modes: Mode identifiers from the block tag

        Returns:
            Complete source file contents
        """
        hooks = [self.mode_get(mode) for mode in modes]
        preamble = self.opening + "".join(hook.opening for hook in hooks)
        postamble = "".join(hook.closing for hook in hooks) + self.closing
        return preamble.encode("utf-8") + body + postamble.encode("utf-8")
