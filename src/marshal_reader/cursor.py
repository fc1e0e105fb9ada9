"""
Sequential byte reader with a small look-ahead buffer.
"""
import io
import os

from .errors import UnexpectedEndOfInput


class ByteCursor:
    """
    Reads a binary stream front to back.

    Bytes returned by peek() stay buffered until a read() consumes them.
    """
    def __init__(self, source):
        if isinstance(source, (bytes, bytearray, memoryview)):
            source = io.BytesIO(bytes(source))
        self.stream = source
        self.offset = 0  # bytes consumed so far
        self._lookahead = b""

    def _fill(self, n: int) -> None:
        while len(self._lookahead) < n:
            chunk = self.stream.read(n - len(self._lookahead))
            if not chunk:
                return
            self._lookahead += chunk

    def peek(self, n: int = 1) -> bytes:
        """Returns up to n upcoming bytes without consuming them."""
        self._fill(n)
        return self._lookahead[:n]

    def read(self, n: int) -> bytes:
        """Consumes exactly n bytes."""
        self._fill(n)
        if len(self._lookahead) < n:
            raise UnexpectedEndOfInput(
                f"Unexpected end of input at offset {self.offset + len(self._lookahead)}: "
                f"wanted {n} bytes, got {len(self._lookahead)}"
            )
        chunk = self._lookahead[:n]
        self._lookahead = self._lookahead[n:]
        self.offset += n
        return chunk

    def read_byte(self) -> int:
        return self.read(1)[0]

    def release(self) -> None:
        """Hands peeked-but-unconsumed bytes back to a seekable stream."""
        if not self._lookahead:
            return
        seekable = getattr(self.stream, "seekable", None)
        if seekable is not None and seekable():
            self.stream.seek(-len(self._lookahead), os.SEEK_CUR)
            self._lookahead = b""

    def __repr__(self):
        return f"ByteCursor(offset={self.offset}, buffered={len(self._lookahead)})"
