"""GIF codec."""

from typing import BinaryIO, Optional

from PIL import Image

from ..options import EncodeOptions
from .base import Decoder, Encoder, save_image


class GIFCodec(Decoder, Encoder):
    name = "gif"
    signatures = (b"GIF89a", b"GIF87a")
    pil_format = "GIF"

    def encode(
        self, stream: BinaryIO, image: Image.Image, options: Optional[EncodeOptions] = None
    ) -> None:
        save_image(stream, image, self.pil_format)
