"""Codec registry: lookup by name or alias, and format detection by signature."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import BinaryIO, Dict, List, Optional, Tuple

from PIL import Image

from .codecs import Codec, Decoder, Encoder, ImageConfig, builtin_codecs
from .errors import CodecNotFoundError
from .options import DecodeOptions, EncodeOptions
from .signatures import PeekableReader, match, peekable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CodecEntry:
    codec: Codec
    can_decode: bool
    can_encode: bool

    @property
    def name(self) -> str:
        return self.codec.name

    @property
    def aliases(self) -> Tuple[str, ...]:
        return tuple(self.codec.aliases)

    @property
    def signatures(self) -> Tuple[bytes, ...]:
        if not self.can_decode:
            return ()
        return tuple(self.codec.signatures)


class CodecRegistry:
    """
    Name -> codec mapping. Populate it once at start-up; after that it is
    only read, so one registry can serve any number of Wands.
    """

    def __init__(self) -> None:
        self._entries: Dict[str, CodecEntry] = {}
        self._aliases: Dict[str, str] = {}

    def register(self, codec: Codec) -> CodecEntry:
        """Add ``codec``. A later codec with the same name replaces the earlier one."""
        name = codec.name
        if not name:
            raise ValueError("Codec name cannot be empty")
        if name in self._aliases and self._aliases[name] != name:
            raise ValueError(f"Codec name '{name}' is already an alias of '{self._aliases[name]}'")
        for alias in codec.aliases:
            if alias in self._entries and alias != name:
                raise ValueError(f"Alias '{alias}' collides with registered codec '{alias}'")

        entry = CodecEntry(
            codec=codec,
            can_decode=isinstance(codec, Decoder),
            can_encode=isinstance(codec, Encoder),
        )
        if name in self._entries:
            logger.debug(f"Replacing codec registration for '{name}'")
        self._entries[name] = entry
        for alias in codec.aliases:
            self._aliases[alias] = name
        return entry

    def canonical_name(self, name: str) -> str:
        name = self._aliases.get(name, name)
        if name not in self._entries:
            raise CodecNotFoundError(name)
        return name

    def entry(self, name: str) -> CodecEntry:
        return self._entries[self.canonical_name(name)]

    def resolve(self, name: str) -> Codec:
        """Fresh instance of the codec registered as ``name`` or an alias of it."""
        return self.entry(name).codec.new()

    def __contains__(self, name: str) -> bool:
        return self._aliases.get(name, name) in self._entries

    def codecs(self) -> List[CodecEntry]:
        return sorted(self._entries.values(), key=lambda entry: entry.name)

    def detect(self, stream: PeekableReader) -> Decoder:
        """
        Return a fresh decoder whose signature matches the start of ``stream``.

        Nothing is consumed. Decoders are tried in registration order and the
        first match wins.
        """
        for entry in self._entries.values():
            if not entry.can_decode:
                continue
            for signature in entry.signatures:
                if match(stream.peek(len(signature)), signature):
                    return entry.codec.new()
        raise CodecNotFoundError("unknown")

    def decode(self, stream: BinaryIO, options: Optional[DecodeOptions] = None) -> Tuple[Image.Image, str]:
        """Detect the format of ``stream`` and decode it.

        Returns the image and the name of the codec that decoded it.
        """
        reader = peekable(stream)
        decoder = self.detect(reader)
        logger.debug(f"Detected format '{decoder.name}'")
        return decoder.decode(reader, options), decoder.name

    def decode_config(self, stream: BinaryIO, options: Optional[DecodeOptions] = None) -> ImageConfig:
        reader = peekable(stream)
        return self.detect(reader).decode_config(reader, options)

    def encode(
        self,
        name: str,
        stream: BinaryIO,
        image: Image.Image,
        options: Optional[EncodeOptions] = None,
    ) -> None:
        codec = self.resolve(name)
        if not isinstance(codec, Encoder):
            raise CodecNotFoundError(name)
        codec.encode(stream, image, options)


def build_registry() -> CodecRegistry:
    registry = CodecRegistry()
    for codec in builtin_codecs():
        registry.register(codec)
    return registry


@lru_cache(maxsize=None)
def default_registry() -> CodecRegistry:
    """Process-wide registry with the built-in codecs, built on first use."""
    return build_registry()
