"""
Custom Pygments lexer for csprender documents

Highlights the block markup and delegates each block body to the Pygments
lexer named by the block's tag (c, cpp, py, rs all have Pygments aliases).
Text outside blocks is passed through as plain text.

Token types:
- Comment.Preproc: Block markers (<?, >, <?>)
- Name.Tag: Language tag
- Name.Attribute: Mode identifiers
- (delegated): Block body, highlighted as its own language
"""

import re
from typing import Iterator, TextIO, Tuple

from pygments import highlight
from pygments.formatters import TerminalFormatter
from pygments.lexer import Lexer, RegexLexer
from pygments.lexers import get_lexer_by_name, TextLexer
from pygments.token import Comment, Name, Text, _TokenType
from pygments.util import ClassNotFound


def block_callback(lexer: "CspLexer", match: "re.Match[str]") -> Iterator[Tuple[int, _TokenType, str]]:
    """Emit tokens for one <?tag modes>body<?> block"""
    yield match.start("open"), Comment.Preproc, match.group("open")
    if match.group("tag"):
        yield match.start("tag"), Name.Tag, match.group("tag")
    if match.group("modes"):
        yield match.start("modes"), Name.Attribute, match.group("modes")
    if match.group("gt"):
        yield match.start("gt"), Comment.Preproc, match.group("gt")

    body_start = match.start("body")
    body_lexer = lexer.bodyLexer_get(match.group("tag"))
    for index, token, value in body_lexer.get_tokens_unprocessed(match.group("body")):
        yield body_start + index, token, value

    if match.group("close"):
        yield match.start("close"), Comment.Preproc, match.group("close")


class CspLexer(RegexLexer):
    """
    Lexer for csprender documents

    Example:
        <p><?py>print("hi")<?></p>

    Tokens:
        <?           → Comment.Preproc
        py           → Name.Tag
        >            → Comment.Preproc
        print("hi")  → Python tokens
        <?>          → Comment.Preproc
    """

    name = 'csprender'
    aliases = ['csp', 'csprender']
    filenames = ['*.csp']

    flags = re.DOTALL

    tokens = {
        'root': [
            (
                r'(?P<open><\?)(?P<tag>[^ >]*)(?P<modes>(?: [^ >]*)*)(?P<gt>>?)'
                r'(?P<body>.*?)(?P<close><\?>|\Z)',
                block_callback,
            ),
            (r'[^<]+', Text),
            (r'<', Text),
        ],
    }

    def bodyLexer_get(self, tag: str) -> Lexer:
        """
        Get the lexer for a block body

        Falls back to plain text when Pygments does not know the tag.
        """
        try:
            return get_lexer_by_name(tag)
        except ClassNotFound:
            return TextLexer()


def listing_write(source: bytes, stream: TextIO) -> None:
    """
    Write a terminal-highlighted listing of a document

    Nothing is compiled or executed.

    Args:
        source: Raw document
        stream: Text stream to write the listing to
    """
    text = source.decode("utf-8", errors="replace")
    highlight(text, CspLexer(), TerminalFormatter(), outfile=stream)
