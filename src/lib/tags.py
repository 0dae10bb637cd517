"""
Block tag/mode parser

Reads the tag section that follows a block-open marker:

    <?tag mode1 mode2>body<?>
      ^^^^^^^^^^^^^^^^

The first space- or '>'-terminated token is the language tag. While tokens
keep ending in a space, further tokens are read as mode identifiers. The
section ends at the first token terminated by anything other than a space.
"""

from ..models.block import BlockTag
from .scanner import DocumentScanner


TAG_DELIMS = b" >"
SPACE = ord(" ")


def _decode(token: bytes) -> str:
    return token.decode("utf-8", errors="surrogateescape")


def tag_parse(scanner: DocumentScanner) -> BlockTag:
    """
    Parse the language tag and modes of a block

    Must be called with the scanner positioned immediately after the
    block-open marker. Leaves the scanner on the first byte of the body.

    Args:
        scanner: Document scanner

    Returns:
        BlockTag with the tag and the modes in order of appearance

    Example:
        >>> scanner = DocumentScanner(b"c main>return 0;<?>")
        >>> tag_parse(scanner)
        BlockTag(tag='c', modes=['main'])
        >>> scanner.position
        7
    """
    token, terminator = scanner.token_read(TAG_DELIMS)
    result = BlockTag(tag=_decode(token))

    while terminator == SPACE:
        token, terminator = scanner.token_read(TAG_DELIMS)
        result.modes.append(_decode(token))

    return result
