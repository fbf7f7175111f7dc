"""Error types raised by the codec registry and the text chunk protocol."""


class TransmuteError(Exception):
    """Base class for recoverable conversion errors."""


class CodecNotFoundError(TransmuteError, LookupError):
    """No codec is registered under a name, or no signature matched."""

    def __init__(self, name: str) -> None:
        super().__init__(f"no such codec: {name}")
        self.name = name


class ChunkFormatError(TransmuteError, ValueError):
    """A chunk, or the chunk stream around it, is structurally malformed."""


class ChunkUnsupportedError(TransmuteError):
    """A chunk is well-formed but cannot be handled."""
