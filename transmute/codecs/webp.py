"""WebP codec."""

from typing import BinaryIO, Optional

from PIL import Image

from ..options import EncodeOptions
from .base import Decoder, Encoder, quality_from_level, save_image


class WEBPCodec(Decoder, Encoder):
    name = "webp"
    signatures = (b"RIFF????WEBPVP8",)
    pil_format = "WEBP"

    def encode(
        self, stream: BinaryIO, image: Image.Image, options: Optional[EncodeOptions] = None
    ) -> None:
        options = options or EncodeOptions()
        params = {"quality": quality_from_level(options.compression_level, default=80)}
        if options.compression_level == 0:
            params["lossless"] = True
        if image.mode not in {"RGB", "RGBA"}:
            image = image.convert("RGBA")
        save_image(stream, image, self.pil_format, **params)
