"""Wand: one image plus its metadata through decode, transforms and encode."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import BinaryIO, List, Optional, Tuple

import numpy as np
from PIL import Image

from .dhash import HASH_HEIGHT, HASH_WIDTH, diff_hash
from .geometry import NEAREST, ResizeStrategy, area_fit
from .metadata import Metadata
from .options import DecodeOptions, EncodeOptions, validate_compression_level
from .registry import CodecRegistry, default_registry
from .template import fmt_expand

logger = logging.getLogger(__name__)

DEFAULT_CODEC = "png"
# Encoders cannot write a 0x0 image, so an empty Wand writes this instead.
PLACEHOLDER_SIZE = (1, 1)


def placeholder_image() -> Image.Image:
    return Image.new("RGBA", PLACEHOLDER_SIZE, (0, 0, 0, 0))


def blank_image(width: int, height: int) -> Image.Image:
    return Image.new("RGBA", (width, height), (0, 0, 0, 0))


class Wand:
    """
    Holds one image (or none), its Metadata, and the decode/encode options
    that point at that Metadata.

    Not safe for concurrent use; create one Wand per unit of work.
    """

    def __init__(self, registry: Optional[CodecRegistry] = None) -> None:
        self.registry = registry or default_registry()
        self._image: Optional[Image.Image] = None
        self._metadata = Metadata()
        self.source_format = ""
        self.decode_options = DecodeOptions(metadata=self._metadata)
        self.encode_options = EncodeOptions(metadata=self._metadata)

    # -- image state ---------------------------------------------------

    @property
    def image(self) -> Optional[Image.Image]:
        return self._image

    def set_image(self, image: Optional[Image.Image]) -> None:
        self._image = image

    def new_image(self, width: int, height: int) -> None:
        self._image = blank_image(width, height)

    @property
    def width(self) -> int:
        return self._image.width if self._image is not None else 0

    @property
    def height(self) -> int:
        return self._image.height if self._image is not None else 0

    @property
    def size(self) -> Tuple[int, int]:
        return self.width, self.height

    def is_empty(self) -> bool:
        return self.width == 0 or self.height == 0

    # -- I/O -----------------------------------------------------------

    def decode_image(self, stream: BinaryIO) -> None:
        image, codec_name = self.registry.decode(stream, self.decode_options)
        self._image = image
        self.source_format = codec_name

    def encode_image(self, stream: BinaryIO, codec: str) -> None:
        image = placeholder_image() if self.is_empty() else self._image
        self.registry.encode(codec, stream, image, self.encode_options)

    def read_image(self, path: str) -> None:
        if path == "-":
            self.decode_image(sys.stdin.buffer)
            return
        with open(path, "rb") as f:
            self.decode_image(f)

    def output_codec(self, path: str) -> Tuple[str, str]:
        """Pick the codec for ``path`` and strip any ``codec:`` prefix.

        Falls back to PNG when neither prefix nor extension names a codec.
        """
        if ":" in path:
            prefix, rest = path.split(":", 1)
            if prefix in self.registry:
                return prefix, rest
        ext = Path(path).suffix[1:].lower()
        if ext and ext in self.registry:
            return ext, path
        return DEFAULT_CODEC, path

    def write_image(self, path: str) -> None:
        codec, path = self.output_codec(path)
        logger.debug(f"Writing {path} as {codec}")
        if path == "-":
            self.encode_image(sys.stdout.buffer, codec)
            return
        with open(path, "wb") as f:
            self.encode_image(f, codec)

    # -- metadata ------------------------------------------------------

    @property
    def metadata(self) -> Metadata:
        return self._metadata

    @property
    def comments(self) -> List[str]:
        return self._metadata.comments

    def add_comment(self, comment: str) -> None:
        self._metadata.comments.append(comment)

    def set_comments(self, comments: List[str]) -> None:
        self._metadata.comments = list(comments)

    def strip(self) -> None:
        # Cleared in place; the option records keep pointing at it.
        self._metadata.clear()

    # -- transforms ----------------------------------------------------

    def resize(self, width: int, height: int, strategy: ResizeStrategy) -> None:
        if self.size == (width, height):
            return
        if self.is_empty() or width == 0 or height == 0:
            self._image = blank_image(width, height)
            return
        self._image = self._image.convert("RGBA").resize((width, height), strategy)

    def resize_max_area(self, area: int, strategy: ResizeStrategy) -> None:
        width, height = area_fit(self.width, self.height, area)
        self.resize(width, height, strategy)

    def crop(self, width: int, height: int, x_offset: int, y_offset: int) -> None:
        """Cut a ``width`` x ``height`` window at the given offset.

        Parts of the window outside the image stay transparent black.
        """
        if self.size == (width, height) and x_offset == 0 and y_offset == 0:
            return
        if self.is_empty() or width == 0 or height == 0:
            self._image = blank_image(width, height)
            return

        # Pillow zero-fills the parts of the box outside the source.
        self._image = self._image.convert("RGBA").crop(
            (x_offset, y_offset, x_offset + width, y_offset + height)
        )

    def force_rgba(self) -> None:
        if self._image is not None and self._image.mode != "RGBA":
            self._image = self._image.convert("RGBA")

    def clone(self) -> "Wand":
        other = Wand(self.registry)
        if self._image is not None:
            other._image = self._image.copy()
        other._metadata = self._metadata.clone()
        other.source_format = self.source_format
        other.decode_options = DecodeOptions(
            metadata=other._metadata, strict=self.decode_options.strict
        )
        other.encode_options = EncodeOptions(
            compression_level=self.encode_options.compression_level,
            metadata=other._metadata,
        )
        return other

    # -- derived properties --------------------------------------------

    def compute_hash(self) -> int:
        if self.is_empty():
            return 0
        small = self._image.convert("RGBA").resize((HASH_WIDTH, HASH_HEIGHT), NEAREST)
        # Transparent areas hash as black.
        backdrop = Image.new("RGBA", small.size, (0, 0, 0, 255))
        flat = Image.alpha_composite(backdrop, small)
        gray = np.asarray(flat.convert("L"), dtype=np.uint8)
        return diff_hash(gray)

    def set_strict(self, strict: bool) -> None:
        self.decode_options.strict = strict

    def set_compression_quality(self, quality: int) -> None:
        self.set_compression_level(100 - quality)

    def set_compression_level(self, level: int) -> None:
        self.encode_options.compression_level = validate_compression_level(level)

    def image_property(self, key: str) -> Optional[str]:
        if key in ("w", "width"):
            return str(self.width)
        if key in ("h", "height"):
            return str(self.height)
        if key in ("H", "hash"):
            return str(self.compute_hash())
        if key in ("J", "json"):
            return json.dumps(
                {"width": self.width, "height": self.height, "hash": self.compute_hash()},
                separators=(",", ":"),
            )
        if key in ("c", "comment"):
            return "; ".join(self.comments)
        if key in ("f", "format"):
            return self.source_format
        return None

    def format_string(self, template: str) -> str:
        return fmt_expand(template, self.image_property)
