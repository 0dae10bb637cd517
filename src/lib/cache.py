"""
Artifact cache policies

The cache is the artifact directory itself: a block is a cache hit when the
file it would execute already exists. There is no index and no metadata.

Two policies decide where a block's generated source lives:

- PositionCache names artifacts after the input stem and the block's order
  of appearance. Editing a block without deleting its artifact keeps
  executing the old artifact.
- ContentCache names artifacts after a hash of the generated source, so a
  block with an edited body or edited modes gets a fresh artifact.
"""

import hashlib
from pathlib import Path
from typing import Dict, Sequence, Type

from ..models.language import LanguageSpec


def artifact_of(source: Path, spec: LanguageSpec) -> Path:
    """
    Path of the file that is executed (and checked) for a generated source

    For "c" (output extension ".out"), bin/page0.c -> bin/page0.c.out.
    For "py" (no extension) the source itself is the artifact.
    """
    return source.with_name(source.name + spec.output_extension)


class CachePolicy:
    """
    Base cache policy

    Subclasses only decide how a block's source path is derived; the hit
    test is the same presence check for every policy.
    """

    name = "base"

    def __init__(self, outdir: Path) -> None:
        # Absolute so compiled artifacts are launched by path, not looked up on PATH
        self.outdir = Path(outdir).resolve()

    def artifact_path(
        self, stem: str, index: int, spec: LanguageSpec, body: bytes, modes: Sequence[str] = ()
    ) -> Path:
        """
        Path of the generated source file for a block

        Args:
            stem: Input document file name without extension
            index: Block's zero-based order of appearance
            spec: Language of the block
            body: Raw block body
            modes: Mode identifiers from the block tag
        """
        raise NotImplementedError

    def hit(self, source: Path, spec: LanguageSpec) -> bool:
        """True if the artifact for `source` already exists"""
        return artifact_of(source, spec).exists()


class PositionCache(CachePolicy):
    """Artifacts keyed by input stem and block position: bin/page0.c"""

    name = "position"

    def artifact_path(
        self, stem: str, index: int, spec: LanguageSpec, body: bytes, modes: Sequence[str] = ()
    ) -> Path:
        return self.outdir / f"{stem}{index}.{spec.tag}"


class ContentCache(CachePolicy):
    """
    Artifacts keyed by input stem and generated-source hash: bin/page-3f2a9c0d1b7e4a55.c

    The hash covers everything written to the source file, so a change to
    the body, the modes or the language boilerplate gives a new artifact.
    """

    name = "content"
    digest_length = 16

    def artifact_path(
        self, stem: str, index: int, spec: LanguageSpec, body: bytes, modes: Sequence[str] = ()
    ) -> Path:
        digest = hashlib.sha256(spec.source_generate(body, modes)).hexdigest()[: self.digest_length]
        return self.outdir / f"{stem}-{digest}.{spec.tag}"


POLICIES: Dict[str, Type[CachePolicy]] = {
    PositionCache.name: PositionCache,
    ContentCache.name: ContentCache,
}


def policy_get(name: str, outdir: Path) -> CachePolicy:
    """
    Instantiate a cache policy by name

    Raises:
        ValueError: if no policy has this name
    """
    try:
        policy_class = POLICIES[name]
    except KeyError:
        raise ValueError(
            f"Unknown cache policy '{name}' (expected one of: {', '.join(POLICIES)})"
        ) from None
    return policy_class(outdir)
