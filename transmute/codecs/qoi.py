"""QOI codec, decode only."""

from .base import Decoder


class QOICodec(Decoder):
    name = "qoi"
    signatures = (b"qoif",)
    pil_format = "QOI"
