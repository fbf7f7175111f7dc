"""Magic byte signature matching over a peekable stream."""

from typing import BinaryIO, Union

WILDCARD = ord("?")


def match(prefix: bytes, pattern: bytes) -> bool:
    """Return True if ``prefix`` matches ``pattern`` byte for byte.

    ``?`` in the pattern matches any byte. Lengths must be equal, so a short
    read never matches.
    """
    if len(prefix) != len(pattern):
        return False
    for have, want in zip(prefix, pattern):
        if have != want and want != WILDCARD:
            return False
    return True


class PeekableReader:
    """Binary reader with look-ahead of arbitrary length.

    ``io.BufferedReader.peek`` may return fewer bytes than asked for, so the
    registry always wraps the caller's stream in one of these.
    """

    def __init__(self, stream: BinaryIO) -> None:
        self._stream = stream
        self._buffer = b""

    def peek(self, size: int) -> bytes:
        while len(self._buffer) < size:
            chunk = self._stream.read(size - len(self._buffer))
            if not chunk:
                break
            self._buffer += chunk
        return self._buffer[:size]

    def read(self, size: int = -1) -> bytes:
        if size is None or size < 0:
            data = self._buffer + self._stream.read()
            self._buffer = b""
            return data
        if len(self._buffer) < size:
            self._buffer += self._stream.read(size - len(self._buffer))
        data, self._buffer = self._buffer[:size], self._buffer[size:]
        return data


def peekable(stream: Union[BinaryIO, PeekableReader]) -> PeekableReader:
    if isinstance(stream, PeekableReader):
        return stream
    return PeekableReader(stream)
