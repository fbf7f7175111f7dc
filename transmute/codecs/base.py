"""Codec capability model.

A codec is anything with a name. It gains the decode facet by subclassing
``Decoder`` and the encode facet by subclassing ``Encoder``; the registry
records which facets a codec has when it is registered.
"""

from __future__ import annotations

import abc
import copy
import io
from dataclasses import dataclass
from typing import BinaryIO, Optional, Tuple

from PIL import Image

from ..options import DecodeOptions, EncodeOptions


@dataclass(frozen=True)
class ImageConfig:
    width: int
    height: int
    color_model: str


class Codec:
    name: str = ""
    aliases: Tuple[str, ...] = ()

    def new(self) -> "Codec":
        """Fresh instance for a single decode or encode."""
        return copy.copy(self)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"


class Decoder(Codec):
    # Fixed-length patterns; "?" matches any byte.
    signatures: Tuple[bytes, ...] = ()
    # Pillow plugin that reads this format.
    pil_format: str = ""

    def _formats(self) -> Optional[Tuple[str, ...]]:
        return (self.pil_format,) if self.pil_format else None

    def decode(self, stream: BinaryIO, options: Optional[DecodeOptions] = None) -> Image.Image:
        return open_image(stream.read(), self._formats())

    def decode_config(self, stream: BinaryIO, options: Optional[DecodeOptions] = None) -> ImageConfig:
        # Image.open only parses the header.
        img = Image.open(io.BytesIO(stream.read()), formats=self._formats())
        return ImageConfig(width=img.width, height=img.height, color_model=img.mode)


class Encoder(Codec, abc.ABC):
    @abc.abstractmethod
    def encode(
        self, stream: BinaryIO, image: Image.Image, options: Optional[EncodeOptions] = None
    ) -> None:
        raise NotImplementedError


def open_image(data: bytes, formats: Optional[Tuple[str, ...]] = None) -> Image.Image:
    """Open and fully load an image from bytes."""
    img = Image.open(io.BytesIO(data), formats=formats)
    img.load()
    return img


def quality_from_level(level: int, default: int = 75) -> int:
    """Map a 0-100 compression level onto a lossy quality setting."""
    if level < 0:
        return default
    return max(1, 100 - level)


def save_image(stream: BinaryIO, image: Image.Image, pil_format: str, **params) -> bytes:
    """Encode with Pillow into memory, then write to ``stream``.

    Some Pillow writers seek, so they never see the caller's stream directly.
    """
    buf = io.BytesIO()
    image.save(buf, format=pil_format, **params)
    data = buf.getvalue()
    stream.write(data)
    return data
