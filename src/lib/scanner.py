"""
Byte-level document scanner

The scanner walks an input document left to right exactly once. It never
looks further ahead than the length of the marker it is trying to match,
and never moves backwards past the current read position.

Example:
    >>> scanner = DocumentScanner(b"hi <?py>print(1)<?> bye")
    >>> scanner.literal_read(b"<?")
    b'hi '
    >>> scanner.marker_match(b"<?")
    True
"""

from typing import Tuple


EOF = -1


class DocumentScanner:
    """
    Read cursor over an in-memory document

    Attributes:
        data: Complete document contents
        position: Offset of the next unread byte
    """

    def __init__(self, data: bytes) -> None:
        self.data = data
        self.position = 0

    def at_end(self) -> bool:
        """True once every byte has been consumed"""
        return self.position >= len(self.data)

    def byte_read(self) -> int:
        """
        Consume one byte

        Returns:
            The byte value, or EOF when the document is exhausted
        """
        if self.at_end():
            return EOF
        value = self.data[self.position]
        self.position += 1
        return value

    def marker_match(self, marker: bytes) -> bool:
        """
        Consume `marker` if it is the next sequence in the document

        On a mismatch (including a partial match cut short by end of input)
        the read position is left unchanged.

        Returns:
            True if the marker was found and passed over
        """
        if self.data.startswith(marker, self.position):
            self.position += len(marker)
            return True
        return False

    def literal_read(self, marker: bytes) -> bytes:
        """
        Consume everything up to the next occurrence of `marker`

        The marker itself is not consumed. If the marker never occurs, the
        rest of the document is returned.

        Returns:
            The bytes before the marker (possibly empty)
        """
        end = self.data.find(marker, self.position)
        if end == -1:
            end = len(self.data)
        chunk = self.data[self.position:end]
        self.position = end
        return chunk

    def body_read(self, close: bytes) -> bytes:
        """
        Consume a block body and its closing marker

        End of input before the closing marker truncates the body there;
        this is not an error.

        Returns:
            The body bytes, without the closing marker
        """
        body = self.literal_read(close)
        self.marker_match(close)
        return body

    def token_read(self, delims: bytes) -> Tuple[bytes, int]:
        """
        Consume bytes up to and including the first delimiter

        Args:
            delims: Set of single-byte delimiters

        Returns:
            (token, terminator) where terminator is the delimiter byte value
            that ended the token, or EOF
        """
        start = self.position
        while True:
            value = self.byte_read()
            if value == EOF:
                return self.data[start:], EOF
            if value in delims:
                return self.data[start:self.position - 1], value
