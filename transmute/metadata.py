"""Text metadata and comments carried alongside an image."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional


@dataclass(frozen=True)
class TextEntry:
    key: str
    value: str
    language: str = ""
    utf8_key: str = ""
    is_utf8: bool = False
    compress: bool = False

    def __post_init__(self) -> None:
        if "\x00" in self.key:
            raise ValueError(f"Text key must not contain NUL: {self.key!r}")

    @property
    def is_plain(self) -> bool:
        """True when the entry fits a ``tEXt`` chunk."""
        return not (self.language or self.utf8_key or self.is_utf8)


def _fits_latin1(value: str) -> bool:
    try:
        value.encode("latin-1")
    except UnicodeEncodeError:
        return False
    return True


class TextData(List[TextEntry]):
    """Ordered text entries. Keys are not required to be unique."""

    @classmethod
    def from_dict(cls, mapping: Dict[str, str]) -> "TextData":
        td = cls()
        for key, value in mapping.items():
            td.add_string(key, value)
        return td

    def add(self, entry: TextEntry) -> None:
        self.append(entry)

    def add_string(self, key: str, value: str) -> None:
        self.add(TextEntry(key=key, value=value, is_utf8=not _fits_latin1(value)))

    def get(self, key: str) -> Optional[TextEntry]:
        for entry in self:
            if entry.key == key:
                return entry
        return None

    def get_string(self, key: str) -> Optional[str]:
        entry = self.get(key)
        return entry.value if entry is not None else None

    def set(self, entry: TextEntry) -> bool:
        """Replace the first entry with the same key, or append.

        Returns True if an entry was replaced.
        """
        for idx, existing in enumerate(self):
            if existing.key == entry.key:
                self[idx] = entry
                return True
        self.add(entry)
        return False

    def set_string(self, key: str, value: str) -> bool:
        return self.set(TextEntry(key=key, value=value, is_utf8=not _fits_latin1(value)))

    def to_dict(self) -> Dict[str, str]:
        # Later duplicates win, same as building a dict from pairs.
        return {entry.key: entry.value for entry in self}


@dataclass
class Metadata:
    text: TextData = field(default_factory=TextData)
    comments: List[str] = field(default_factory=list)
    # Codec specific payload, shared by reference on clone.
    specific: Any = None

    def clone(self) -> "Metadata":
        return Metadata(
            text=TextData(self.text),
            comments=list(self.comments),
            specific=self.specific,
        )

    def clear(self) -> None:
        self.text = TextData()
        self.comments = []
        self.specific = None

    def extend_comments(self, comments: Iterable[str]) -> None:
        self.comments.extend(comments)
