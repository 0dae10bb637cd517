"""
Block-specific data models

Type-safe structures for the values passed between the scanner, the tag
parser, the cache policy and the renderer.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List


@dataclass
class BlockTag:
    """
    Result of parsing the tag section of a block

    Returned by tag_parse() after consuming everything between the
    block-open marker and the '>' that starts the body.

    Attributes:
        tag: Language tag (e.g., "c", "py")
        modes: Mode identifiers in the order they appeared

    Example:
        For "<?c main>":
        BlockTag(tag="c", modes=["main"])
    """
    tag: str
    modes: List[str] = field(default_factory=list)


@dataclass
class Block:
    """
    One embedded code block

    Attributes:
        tag: Language tag
        modes: Ordered mode identifiers
        body: Raw bytes between the tag section and the block-close marker
        index: Zero-based order of appearance within the document
        source: Path of the generated source file for this block
    """
    tag: str
    modes: List[str]
    body: bytes
    index: int
    source: Path


@dataclass
class RenderResult:
    """
    Statistics for one render pass

    Attributes:
        blocks: Number of blocks executed
        cache_hits: Blocks whose artifact already existed
        compiled: Blocks for which a compile command was run
        failed: Blocks whose execute command could not be launched
    """
    blocks: int = 0
    cache_hits: int = 0
    compiled: int = 0
    failed: int = 0
