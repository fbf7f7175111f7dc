"""BMP codec."""

from typing import BinaryIO, Optional

from PIL import Image

from ..options import EncodeOptions
from .base import Decoder, Encoder, save_image


class BMPCodec(Decoder, Encoder):
    name = "bmp"
    aliases = ("dib",)
    signatures = (b"BM????\x00\x00\x00\x00",)
    pil_format = "BMP"

    def encode(
        self, stream: BinaryIO, image: Image.Image, options: Optional[EncodeOptions] = None
    ) -> None:
        if image.mode not in {"1", "L", "P", "RGB", "RGBA"}:
            image = image.convert("RGBA")
        save_image(stream, image, self.pil_format)
