"""PNG ``tEXt`` / ``iTXt`` chunk encoding for text metadata.

Plain entries become ``tEXt``::

    key NUL value

Anything with a language, a translated key, or flagged UTF-8 becomes
``iTXt``::

    key NUL flag(0) method(0) language NUL translated-key NUL value

Values are written verbatim; an embedded NUL is bounded by the chunk length,
not escaped. Compressed ``iTXt`` is not supported in either direction.

Every text field is written as UTF-8. Fields the PNG format declares
latin-1 (keys, language tags, ``tEXt`` values) are read back as UTF-8 when
they decode cleanly and as latin-1 otherwise.

Comments travel as ``iTXt`` entries keyed ``__COMMENT__`` and are routed
back into ``Metadata.comments`` on decode.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

from .errors import ChunkFormatError, ChunkUnsupportedError, TransmuteError
from .metadata import Metadata, TextEntry

logger = logging.getLogger(__name__)

TEXT_CHUNK = "tEXt"
ITXT_CHUNK = "iTXt"
TEXT_CHUNK_TYPES = (TEXT_CHUNK, ITXT_CHUNK)

# Reserved; a user entry with this key is read back as a comment.
COMMENT_KEY = "__COMMENT__"


@dataclass(frozen=True)
class Chunk:
    name: str
    data: bytes


def _encode(value: str, field_name: str) -> bytes:
    try:
        return value.encode("utf-8")
    except UnicodeEncodeError as e:
        raise ChunkFormatError(f"Text {field_name} cannot be written: {str(e)}")


def _decode(raw: bytes, chunk_name: str) -> str:
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise ChunkFormatError(f"invalid utf-8 in {chunk_name} chunk: {str(e)}")


def _decode_text(raw: bytes) -> str:
    # Fields we write as UTF-8; files from other writers may hold latin-1.
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError:
        return raw.decode("latin-1")


def text_entry_to_chunk(entry: TextEntry) -> Chunk:
    """Serialize one entry into a ``tEXt`` or ``iTXt`` chunk."""
    parts = [_encode(entry.key, "key"), b"\x00"]

    if entry.is_plain:
        parts.append(_encode(entry.value, "value"))
        return Chunk(TEXT_CHUNK, b"".join(parts))

    parts.append(b"\x00\x00")
    parts.append(_encode(entry.language, "language"))
    parts.append(b"\x00")
    parts.append(_encode(entry.utf8_key, "translated key"))
    parts.append(b"\x00")
    parts.append(_encode(entry.value, "value"))
    return Chunk(ITXT_CHUNK, b"".join(parts))


def chunk_to_text_entry(chunk: Chunk) -> TextEntry:
    """Parse a ``tEXt`` or ``iTXt`` chunk.

    Raises ChunkFormatError for malformed data and ChunkUnsupportedError for
    compressed ``iTXt`` or any other chunk type.
    """
    data = chunk.data
    key_nul = data.find(b"\x00")
    if key_nul == -1:
        raise ChunkFormatError(f"invalid text-type chunk: {chunk.name}")
    if key_nul == len(data) - 1:
        raise ChunkFormatError(f"truncated text-type chunk: {chunk.name}")
    key = _decode_text(data[:key_nul])

    if chunk.name == TEXT_CHUNK:
        return TextEntry(key=key, value=_decode_text(data[key_nul + 1 :]))

    if chunk.name != ITXT_CHUNK:
        raise ChunkUnsupportedError(f"text-type chunk: {chunk.name}")

    rest = data[key_nul + 1 :]
    if rest[0] != 0:
        raise ChunkUnsupportedError("compressed iTXt chunks")
    if len(rest) < 4:
        raise ChunkFormatError("truncated iTXt chunk")
    rest = rest[2:]

    nul = rest.find(b"\x00")
    if nul == -1:
        raise ChunkFormatError("truncated iTXt chunk: missing language")
    if nul == len(rest) - 1:
        raise ChunkFormatError("truncated iTXt chunk after language")
    language = _decode_text(rest[:nul])
    rest = rest[nul + 1 :]

    nul = rest.find(b"\x00")
    if nul == -1:
        raise ChunkFormatError("truncated iTXt chunk: missing utf-8 key")
    if nul == len(rest) - 1:
        raise ChunkFormatError("truncated iTXt chunk after utf-8 key")
    utf8_key = _decode(rest[:nul], chunk.name)

    return TextEntry(
        key=key,
        value=_decode(rest[nul + 1 :], chunk.name),
        language=language,
        utf8_key=utf8_key,
        is_utf8=True,
    )


def comment_to_chunk(comment: str) -> Chunk:
    return text_entry_to_chunk(TextEntry(key=COMMENT_KEY, value=comment, is_utf8=True))


def metadata_to_chunks(metadata: Optional[Metadata]) -> List[Chunk]:
    """All text entries in order, then all comments in order."""
    if metadata is None:
        return []
    chunks = [text_entry_to_chunk(entry) for entry in metadata.text]
    chunks.extend(comment_to_chunk(comment) for comment in metadata.comments)
    return chunks


class TextChunkCollector:
    """Visitor that lifts text chunks into a Metadata during decode.

    Codecs call ``visit`` once per ancillary chunk they do not handle
    themselves. Chunks that are not text are ignored.
    """

    def __init__(self, metadata: Optional[Metadata] = None, strict: bool = False) -> None:
        self.metadata = metadata if metadata is not None else Metadata()
        self.strict = strict
        self.dropped = 0

    def visit(self, chunk: Chunk) -> None:
        if chunk.name not in TEXT_CHUNK_TYPES:
            return

        try:
            entry = chunk_to_text_entry(chunk)
        except TransmuteError as exc:
            if self.strict:
                raise
            self.dropped += 1
            logger.debug(f"Dropping malformed {chunk.name} chunk: {exc}")
            return

        if entry.key == COMMENT_KEY:
            self.metadata.comments.append(entry.value)
        else:
            self.metadata.text.add(entry)

    __call__ = visit
