"""Image format conversion: codec registry, PNG text metadata, and the Wand facade."""

from .errors import ChunkFormatError, ChunkUnsupportedError, CodecNotFoundError, TransmuteError
from .geometry import BILINEAR, NEAREST, area_fit
from .metadata import Metadata, TextData, TextEntry
from .options import DecodeOptions, EncodeOptions
from .registry import CodecRegistry, default_registry
from .wand import Wand

__version__ = "0.3.0"

__all__ = [
    "BILINEAR",
    "ChunkFormatError",
    "ChunkUnsupportedError",
    "CodecNotFoundError",
    "CodecRegistry",
    "DecodeOptions",
    "EncodeOptions",
    "Metadata",
    "NEAREST",
    "TextData",
    "TextEntry",
    "TransmuteError",
    "Wand",
    "area_fit",
    "default_registry",
]
