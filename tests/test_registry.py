import io

import pytest
from PIL import Image

from transmute.codecs import Codec, Decoder, Encoder
from transmute.errors import CodecNotFoundError
from transmute.registry import CodecRegistry, build_registry, default_registry


class FakeDecoder(Decoder):
    name = "fake"
    aliases = ("fk", "phony")
    signatures = (b"FAKE?!",)

    def decode(self, stream, options=None):
        stream.read()
        return Image.new("RGBA", (2, 2))


class OtherFake(Decoder, Encoder):
    name = "fake"
    signatures = (b"OTHER",)

    def encode(self, stream, image, options=None):
        stream.write(b"OTHER")


class NameOnly(Codec):
    name = "bare"


def test_resolve_by_name_and_alias():
    registry = CodecRegistry()
    registry.register(FakeDecoder())
    assert type(registry.resolve("fake")) is FakeDecoder
    assert type(registry.resolve("fk")) is type(registry.resolve("fake"))
    assert registry.canonical_name("phony") == "fake"


def test_resolve_returns_fresh_instance():
    registry = CodecRegistry()
    codec = FakeDecoder()
    registry.register(codec)
    assert registry.resolve("fake") is not codec
    assert registry.resolve("fake") is not registry.resolve("fake")


def test_unknown_name_raises():
    registry = CodecRegistry()
    with pytest.raises(CodecNotFoundError) as excinfo:
        registry.resolve("nope")
    assert excinfo.value.name == "nope"


def test_last_registration_wins():
    registry = CodecRegistry()
    registry.register(FakeDecoder())
    entry = registry.register(OtherFake())
    assert type(registry.resolve("fake")) is OtherFake
    assert entry.can_encode
    assert len(registry.codecs()) == 1


def test_capabilities_recorded_at_registration():
    registry = CodecRegistry()
    registry.register(FakeDecoder())
    registry.register(NameOnly())
    by_name = {entry.name: entry for entry in registry.codecs()}
    assert by_name["fake"].can_decode and not by_name["fake"].can_encode
    assert not by_name["bare"].can_decode and not by_name["bare"].can_encode
    assert by_name["bare"].signatures == ()


def test_alias_colliding_with_canonical_name_is_rejected():
    registry = CodecRegistry()
    registry.register(NameOnly())

    class Clash(Codec):
        name = "clash"
        aliases = ("bare",)

    with pytest.raises(ValueError):
        registry.register(Clash())


def test_name_colliding_with_alias_is_rejected():
    registry = CodecRegistry()
    registry.register(FakeDecoder())

    class Phony(Codec):
        name = "phony"

    with pytest.raises(ValueError):
        registry.register(Phony())


def test_codecs_sorted_by_name():
    names = [entry.name for entry in default_registry().codecs()]
    assert names == sorted(names)
    assert {"bmp", "gif", "jpeg", "png", "pnm", "qoi", "tiff", "webp"} <= set(names)


def test_builtin_aliases_resolve_to_canonical():
    registry = build_registry()
    for entry in registry.codecs():
        for alias in entry.aliases:
            assert type(registry.resolve(alias)) is type(registry.resolve(entry.name))
            assert registry.canonical_name(alias) == entry.name


def test_detect_wildcard_signature():
    registry = CodecRegistry()
    registry.register(FakeDecoder())
    decoded, name = registry.decode(io.BytesIO(b"FAKE\x00!rest of file"))
    assert name == "fake"
    assert decoded.size == (2, 2)


def test_detect_unknown_stream():
    registry = build_registry()
    with pytest.raises(CodecNotFoundError) as excinfo:
        registry.decode(io.BytesIO(b"definitely not an image"))
    assert excinfo.value.name == "unknown"


def test_detect_empty_stream():
    with pytest.raises(CodecNotFoundError):
        build_registry().decode(io.BytesIO(b""))


@pytest.mark.parametrize(
    "prefix, expected",
    [
        (b"\x89PNG\r\n\x1a\n\x00\x00", "png"),
        (b"\xff\xd8\xff\xe0", "jpeg"),
        (b"GIF87a....", "gif"),
        (b"BM\x10\x00\x00\x00\x00\x00\x00\x00", "bmp"),
        (b"II*\x00\x08\x00", "tiff"),
        (b"MM\x00*\x00\x08", "tiff"),
        (b"RIFF\x10\x00\x00\x00WEBPVP8L", "webp"),
        (b"qoif\x00\x00", "qoi"),
        (b"P6\n1 1\n255\n", "pnm"),
    ],
)
def test_detect_builtin_signatures(prefix, expected):
    from transmute.signatures import PeekableReader

    reader = PeekableReader(io.BytesIO(prefix))
    assert build_registry().detect(reader).name == expected
    # Detection never consumes input.
    assert reader.read() == prefix


def test_encode_with_decode_only_codec_raises():
    registry = build_registry()
    with pytest.raises(CodecNotFoundError):
        registry.encode("qoi", io.BytesIO(), Image.new("RGB", (1, 1)))


def test_encoder_without_encode_cannot_be_created():
    class Broken(Decoder, Encoder):
        name = "broken"

    with pytest.raises(TypeError):
        Broken()


def test_encode_unknown_format_raises():
    with pytest.raises(CodecNotFoundError):
        build_registry().encode("xyz", io.BytesIO(), Image.new("RGB", (1, 1)))
