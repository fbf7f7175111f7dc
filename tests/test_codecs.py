import io
import struct
import zlib

import numpy as np
import pytest
from PIL import Image

from transmute.codecs.netpbm import insert_header_comments, read_header_comments
from transmute.codecs.png import iter_png_chunks, zlib_level
from transmute.errors import ChunkFormatError
from transmute.metadata import Metadata, TextEntry
from transmute.options import DecodeOptions, EncodeOptions
from transmute.registry import build_registry


def gradient(width=16, height=12, mode="RGBA"):
    xs = np.linspace(0, 255, width, dtype=np.uint8)
    ys = np.linspace(0, 255, height, dtype=np.uint8)
    arr = np.zeros((height, width, 4), dtype=np.uint8)
    arr[..., 0] = xs[None, :]
    arr[..., 1] = ys[:, None]
    arr[..., 2] = 128
    arr[..., 3] = 255
    return Image.fromarray(arr, "RGBA").convert(mode)


def encode(name, image, options=None):
    out = io.BytesIO()
    build_registry().encode(name, out, image, options)
    return out.getvalue()


def png_chunk(name: bytes, data: bytes) -> bytes:
    crc = zlib.crc32(name + data) & 0xFFFFFFFF
    return struct.pack(">I", len(data)) + name + data + struct.pack(">I", crc)


def insert_before_iend(png_bytes: bytes, extra: bytes) -> bytes:
    idx = png_bytes.rindex(b"IEND") - 4
    return png_bytes[:idx] + extra + png_bytes[idx:]


@pytest.mark.parametrize("name", ["png", "bmp", "gif", "jpeg", "tiff", "webp", "ppm", "pnm"])
def test_encode_then_detect(name):
    data = encode(name, gradient())
    registry = build_registry()
    image, detected = registry.decode(io.BytesIO(data))
    assert registry.canonical_name(detected) == registry.canonical_name(name) or (
        name == "ppm" and detected == "pnm"
    )
    assert image.size == (16, 12)


def test_png_pixels_are_lossless():
    original = gradient()
    image, _ = build_registry().decode(io.BytesIO(encode("png", original)))
    assert np.array_equal(np.asarray(image.convert("RGBA")), np.asarray(original))


def test_png_metadata_round_trip():
    md = Metadata()
    md.text.add(TextEntry(key="simple", value="this is some text"))
    md.text.add(TextEntry(key="spaces and NUL", value="this is some text\x00with an embedded NUL"))
    md.text.add(TextEntry(key="kitchen sink", utf8_key="utf8-y", value="\x00here", language="en_US"))
    md.comments.extend(["first comment", "last one"])

    data = encode("png", gradient(), EncodeOptions(metadata=md))

    decoded = Metadata()
    build_registry().decode(io.BytesIO(data), DecodeOptions(metadata=decoded))
    assert [(e.key, e.value) for e in decoded.text] == [(e.key, e.value) for e in md.text]
    assert decoded.text[2].language == "en_US"
    assert decoded.text[2].utf8_key == "utf8-y"
    assert decoded.comments == md.comments


def test_png_chunk_walk_sees_text_chunks():
    md = Metadata()
    md.text.add_string("Author", "me")
    data = encode("png", gradient(), EncodeOptions(metadata=md))
    names = [chunk.name for chunk in iter_png_chunks(data)]
    assert names[0] == "IHDR"
    assert names[-1] == "IEND"
    assert "tEXt" in names


def test_png_malformed_text_dropped_unless_strict():
    data = insert_before_iend(encode("png", gradient()), png_chunk(b"tEXt", b"no-separator"))
    registry = build_registry()

    lenient = Metadata()
    image, _ = registry.decode(io.BytesIO(data), DecodeOptions(metadata=lenient))
    assert image.size == (16, 12)
    assert len(lenient.text) == 0

    with pytest.raises(ChunkFormatError):
        registry.decode(io.BytesIO(data), DecodeOptions(metadata=Metadata(), strict=True))


def test_png_decode_without_metadata_sink():
    data = insert_before_iend(encode("png", gradient()), png_chunk(b"tEXt", b"no-separator"))
    image, _ = build_registry().decode(io.BytesIO(data), DecodeOptions(strict=True))
    assert image.size == (16, 12)


@pytest.mark.parametrize("options", [None, DecodeOptions(), DecodeOptions(metadata=Metadata())])
def test_png_truncation_fails_the_same_with_or_without_metadata(options):
    data = encode("png", gradient())
    registry = build_registry()
    for cut in (20, 6):
        with pytest.raises(ChunkFormatError):
            registry.decode(io.BytesIO(data[:-cut]), options)


def test_png_chunk_walk_rejects_bad_signature():
    with pytest.raises(ChunkFormatError):
        list(iter_png_chunks(b"not a png at all"))


def test_png_compression_levels():
    assert zlib_level(-1) == 6
    assert zlib_level(0) == 0
    assert zlib_level(10) == 1
    assert zlib_level(60) == 6
    assert zlib_level(100) == 9
    noisy = Image.fromarray(np.zeros((64, 64, 3), dtype=np.uint8), "RGB")
    stored = encode("png", noisy, EncodeOptions(compression_level=0))
    packed = encode("png", noisy, EncodeOptions(compression_level=100))
    assert len(packed) < len(stored)


def test_jpeg_quality_follows_compression_level():
    image = gradient(64, 64)
    best = encode("jpeg", image, EncodeOptions(compression_level=0))
    worst = encode("jpeg", image, EncodeOptions(compression_level=95))
    assert len(worst) < len(best)


def test_jpeg_drops_alpha():
    image, _ = build_registry().decode(io.BytesIO(encode("jpg", gradient())))
    assert image.mode == "RGB"


def test_decode_config_reads_header_only():
    config = build_registry().decode_config(io.BytesIO(encode("png", gradient(30, 20))))
    assert (config.width, config.height) == (30, 20)
    assert config.color_model == "RGBA"


def test_netpbm_target_modes():
    registry = build_registry()
    pgm = encode("pgm", gradient())
    assert pgm.startswith(b"P5")
    pbm = encode("pbm", gradient())
    assert pbm.startswith(b"P4")
    decoded = registry.resolve("pgm").decode(io.BytesIO(encode("ppm", gradient())))
    assert decoded.mode == "L"


def test_netpbm_comments_round_trip():
    md = Metadata(comments=["made by hand", "second line"])
    data = encode("ppm", gradient(), EncodeOptions(metadata=md))
    assert data.startswith(b"P6\n# made by hand\n# second line\n")

    decoded = Metadata()
    image, _ = build_registry().decode(io.BytesIO(data), DecodeOptions(metadata=decoded))
    assert decoded.comments == ["made by hand", "second line"]
    assert image.size == (16, 12)


def test_read_header_comments_stops_at_pixels():
    data = b"P5\n#one\n4 # two\n2\n255\n#notacomment"
    assert read_header_comments(data) == ["one", "two"]


def test_insert_header_comments_without_comments():
    assert insert_header_comments(b"P6\n1 1\n255\n", []) == b"P6\n1 1\n255\n"


def test_qoi_decode():
    # 1x1 RGBA image: QOI_OP_RGB 0xfe, then the end marker.
    data = (
        b"qoif"
        + struct.pack(">II", 1, 1)
        + bytes([4, 0])
        + bytes([0xFE, 10, 20, 30])
        + b"\x00" * 7
        + b"\x01"
    )
    image, name = build_registry().decode(io.BytesIO(data))
    assert name == "qoi"
    assert image.size == (1, 1)
    assert image.convert("RGBA").getpixel((0, 0)) == (10, 20, 30, 255)
