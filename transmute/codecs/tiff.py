"""TIFF codec."""

from typing import BinaryIO, Optional

from PIL import Image

from ..options import EncodeOptions
from .base import Decoder, Encoder, save_image


class TIFFCodec(Decoder, Encoder):
    name = "tiff"
    aliases = ("tif",)
    signatures = (b"II\x2a\x00", b"MM\x00\x2a")
    pil_format = "TIFF"

    def encode(
        self, stream: BinaryIO, image: Image.Image, options: Optional[EncodeOptions] = None
    ) -> None:
        save_image(stream, image, self.pil_format)
