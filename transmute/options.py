"""Options passed to codecs on decode and encode."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from .metadata import Metadata

DEFAULT_COMPRESSION = -1


@dataclass
class DecodeOptions:
    # Set to a Metadata instance to collect text and comments.
    metadata: Optional[Metadata] = None
    # Fail on malformed non-critical metadata instead of dropping it.
    strict: bool = False
    decoder_specific: Any = None


@dataclass
class EncodeOptions:
    # -1 selects the codec default; 0 is no compression (or best quality)
    # and 100 is maximum compression. Each codec maps the scale itself.
    compression_level: int = DEFAULT_COMPRESSION
    metadata: Optional[Metadata] = None
    encoder_specific: Any = None

    def __post_init__(self) -> None:
        validate_compression_level(self.compression_level)


def validate_compression_level(level: int) -> int:
    if level != DEFAULT_COMPRESSION and not 0 <= level <= 100:
        raise ValueError(f"Compression level must be -1 or 0-100, got {level}")
    return level
