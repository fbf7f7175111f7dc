"""Netpbm family codecs (PNM, PBM, PGM, PPM).

Pillow reads and writes the pixel data; header comments are handled here so
they round-trip through ``Metadata.comments``.
"""

from __future__ import annotations

import io
from typing import BinaryIO, List, Optional

from PIL import Image

from ..options import DecodeOptions, EncodeOptions
from .base import Decoder, Encoder, open_image, save_image

# Target mode per format; pnm keeps whatever the file holds.
FORMAT_MODES = {
    "pnm": "",
    "pbm": "1",
    "pgm": "L",
    "ppm": "RGB",
}

NETPBM_SIGNATURES = (b"P1", b"P2", b"P3", b"P4", b"P5", b"P6")

_WHITESPACE = b" \t\r\n\v\f"


def read_header_comments(data: bytes) -> List[str]:
    """Collect ``#`` comments from a Netpbm header.

    Scanning stops once width, height and (except for bitmaps) maxval have
    been read.
    """
    magic = data[:2]
    wanted = 2 if magic in (b"P1", b"P4") else 3
    comments: List[str] = []
    fields = 0
    pos = 2
    while pos < len(data) and fields < wanted:
        byte = data[pos : pos + 1]
        if byte == b"#":
            end = data.find(b"\n", pos)
            if end == -1:
                end = len(data)
            text = data[pos + 1 : end].rstrip(b"\r")
            if text.startswith(b" "):
                text = text[1:]
            comments.append(text.decode("latin-1"))
            pos = end + 1
        elif byte in _WHITESPACE:
            pos += 1
        else:
            while pos < len(data) and data[pos : pos + 1] not in _WHITESPACE + b"#":
                pos += 1
            fields += 1
    return comments


def insert_header_comments(data: bytes, comments: List[str]) -> bytes:
    """Insert comment lines right after the magic number line."""
    if not comments:
        return data
    lines = []
    for comment in comments:
        for line in comment.splitlines() or [""]:
            lines.append(b"# " + line.encode("latin-1", "replace") + b"\n")
    magic_end = data.index(b"\n") + 1
    return data[:magic_end] + b"".join(lines) + data[magic_end:]


class NetpbmCodec(Decoder, Encoder):
    signatures = NETPBM_SIGNATURES
    pil_format = "PPM"

    def __init__(self, fmt: str = "pnm") -> None:
        if fmt not in FORMAT_MODES:
            raise ValueError(f"Unknown Netpbm format '{fmt}'")
        self.fmt = fmt

    @property
    def name(self) -> str:
        return self.fmt

    @property
    def target_mode(self) -> str:
        return FORMAT_MODES[self.fmt]

    def decode(self, stream: BinaryIO, options: Optional[DecodeOptions] = None) -> Image.Image:
        options = options or DecodeOptions()
        data = stream.read()
        img = open_image(data, self._formats())

        if options.metadata is not None:
            options.metadata.comments = read_header_comments(data)

        if self.target_mode and img.mode != self.target_mode:
            img = img.convert(self.target_mode)
        return img

    def encode(
        self, stream: BinaryIO, image: Image.Image, options: Optional[EncodeOptions] = None
    ) -> None:
        options = options or EncodeOptions()
        mode = self.target_mode
        if not mode:
            mode = image.mode if image.mode in {"1", "L"} else "RGB"
        if image.mode != mode:
            image = image.convert(mode)

        comments = options.metadata.comments if options.metadata is not None else []
        data = save_image(io.BytesIO(), image, self.pil_format)
        stream.write(insert_header_comments(data, comments))
