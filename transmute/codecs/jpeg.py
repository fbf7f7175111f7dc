"""JPEG codec."""

from typing import BinaryIO, Optional

from PIL import Image

from ..options import EncodeOptions
from .base import Decoder, Encoder, quality_from_level, save_image


class JPEGCodec(Decoder, Encoder):
    name = "jpeg"
    aliases = ("jpg", "jfif", "jpi")
    signatures = (b"\xff\xd8",)
    pil_format = "JPEG"

    def encode(
        self, stream: BinaryIO, image: Image.Image, options: Optional[EncodeOptions] = None
    ) -> None:
        options = options or EncodeOptions()
        if image.mode not in {"L", "RGB", "CMYK"}:
            # No alpha in JPEG.
            image = image.convert("RGB")
        save_image(
            stream, image, self.pil_format, quality=quality_from_level(options.compression_level)
        )
