import io

from transmute.signatures import PeekableReader, match, peekable


def test_exact_match():
    assert match(b"GIF89a", b"GIF89a")
    assert not match(b"GIF89b", b"GIF89a")


def test_wildcard_matches_any_byte():
    pattern = b"RIFF????WEBPVP8"
    assert match(b"RIFF\x00\x01\x02\x03WEBPVP8", pattern)
    assert match(b"RIFF????WEBPVP8", pattern)
    assert not match(b"RIFX\x00\x01\x02\x03WEBPVP8", pattern)


def test_short_prefix_never_matches():
    assert not match(b"\x89PN", b"\x89PNG")
    assert not match(b"", b"?")


def test_peek_does_not_consume():
    reader = PeekableReader(io.BytesIO(b"abcdefgh"))
    assert reader.peek(3) == b"abc"
    assert reader.peek(6) == b"abcdef"
    assert reader.read(2) == b"ab"
    assert reader.peek(2) == b"cd"
    assert reader.read() == b"cdefgh"


def test_peek_past_end_returns_what_exists():
    reader = PeekableReader(io.BytesIO(b"ab"))
    assert reader.peek(10) == b"ab"
    assert reader.read() == b"ab"
    assert reader.read() == b""


def test_peekable_does_not_double_wrap():
    reader = PeekableReader(io.BytesIO(b"x"))
    assert peekable(reader) is reader
