"""PNG codec with ``tEXt`` / ``iTXt`` metadata support."""

from __future__ import annotations

from typing import BinaryIO, Callable, Iterator, Optional

from PIL import Image, PngImagePlugin

from ..errors import ChunkFormatError
from ..options import DEFAULT_COMPRESSION, DecodeOptions, EncodeOptions
from ..text_chunks import Chunk, TextChunkCollector, metadata_to_chunks
from .base import Decoder, Encoder, open_image, save_image

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"

# Chunks the pixel decoder consumes; everything else goes to the chunk visitor.
PIXEL_CHUNKS = {
    "IHDR",
    "PLTE",
    "IDAT",
    "IEND",
    "tRNS",
    "gAMA",
    "cHRM",
    "sRGB",
    "iCCP",
    "sBIT",
    "bKGD",
    "pHYs",
    "acTL",
    "fcTL",
    "fdAT",
}

ChunkVisitor = Callable[[Chunk], None]


def _skip_chunk(chunk: Chunk) -> None:
    pass


def iter_png_chunks(data: bytes) -> Iterator[Chunk]:
    """Walk the chunk stream of a PNG file up to and including IEND.

    Raises ChunkFormatError if the signature is wrong or a chunk runs past
    the end of the data. CRCs are not checked here; Pillow checks them when
    decoding pixels.
    """
    if not data.startswith(PNG_SIGNATURE):
        raise ChunkFormatError("invalid PNG signature")

    offset = len(PNG_SIGNATURE)
    while offset < len(data):
        if offset + 8 > len(data):
            raise ChunkFormatError("truncated PNG chunk header")
        length = int.from_bytes(data[offset : offset + 4], "big")
        ctype = data[offset + 4 : offset + 8].decode("latin-1")
        start = offset + 8
        end = start + length
        if end + 4 > len(data):
            raise ChunkFormatError(f"truncated PNG chunk: {ctype}")
        yield Chunk(ctype, data[start:end])
        offset = end + 4
        if ctype == "IEND":
            break


def zlib_level(level: int) -> int:
    if level == DEFAULT_COMPRESSION:
        return 6
    if level == 0:
        return 0
    if level < 50:
        return 1
    if level < 75:
        return 6
    return 9


class PNGCodec(Decoder, Encoder):
    name = "png"
    signatures = (PNG_SIGNATURE,)
    pil_format = "PNG"

    def decode(self, stream: BinaryIO, options: Optional[DecodeOptions] = None) -> Image.Image:
        options = options or DecodeOptions()
        data = stream.read()

        # The chunk stream is walked with or without a metadata sink.
        visitor: ChunkVisitor = _skip_chunk
        if options.metadata is not None:
            visitor = TextChunkCollector(options.metadata, strict=options.strict)
        self.visit_chunks(data, visitor)

        return open_image(data, self._formats())

    def visit_chunks(self, data: bytes, visitor: ChunkVisitor) -> None:
        for chunk in iter_png_chunks(data):
            if chunk.name not in PIXEL_CHUNKS:
                visitor(chunk)

    def encode(
        self, stream: BinaryIO, image: Image.Image, options: Optional[EncodeOptions] = None
    ) -> None:
        options = options or EncodeOptions()

        pnginfo = PngImagePlugin.PngInfo()
        for chunk in metadata_to_chunks(options.metadata):
            pnginfo.add(chunk.name.encode("latin-1"), chunk.data)

        if image.mode not in {"1", "L", "LA", "I", "I;16", "P", "RGB", "RGBA"}:
            image = image.convert("RGBA")

        save_image(
            stream,
            image,
            self.pil_format,
            pnginfo=pnginfo,
            compress_level=zlib_level(options.compression_level),
        )
