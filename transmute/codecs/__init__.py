"""Built-in codecs backed by Pillow."""

from typing import List

from .base import Codec, Decoder, Encoder, ImageConfig
from .bmp import BMPCodec
from .gif import GIFCodec
from .jpeg import JPEGCodec
from .netpbm import NetpbmCodec
from .png import PNGCodec
from .qoi import QOICodec
from .tiff import TIFFCodec
from .webp import WEBPCodec


def builtin_codecs() -> List[Codec]:
    # Detection follows this order; pnm comes before the other Netpbm
    # variants that share its signatures.
    return [
        BMPCodec(),
        GIFCodec(),
        JPEGCodec(),
        PNGCodec(),
        NetpbmCodec("pnm"),
        NetpbmCodec("pbm"),
        NetpbmCodec("pgm"),
        NetpbmCodec("ppm"),
        QOICodec(),
        TIFFCodec(),
        WEBPCodec(),
    ]


__all__ = [
    "BMPCodec",
    "Codec",
    "Decoder",
    "Encoder",
    "GIFCodec",
    "ImageConfig",
    "JPEGCodec",
    "NetpbmCodec",
    "PNGCodec",
    "QOICodec",
    "TIFFCodec",
    "WEBPCodec",
    "builtin_codecs",
]
