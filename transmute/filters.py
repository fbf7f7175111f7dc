"""Filter arguments shared by the CLI and the HTTP API."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .geometry import BILINEAR, ResizeStrategy
from .wand import Wand


def parse_geometry(value: str) -> Tuple[int, int, int, int]:
    # WxH+X+Y
    m = re.fullmatch(r"\s*(\d+)\s*x\s*(\d+)\s*(?:\+\s*(-?\d+)\s*\+\s*(-?\d+))?\s*", value)
    if not m:
        raise ValueError(f"invalid crop geometry: {value!r} (expected WxH+X+Y)")
    w = int(m.group(1))
    h = int(m.group(2))
    x = int(m.group(3) or 0)
    y = int(m.group(4) or 0)
    return (w, h, x, y)


def parse_resize(value: str) -> Tuple[Optional[int], Optional[Tuple[int, int]]]:
    """Parse ``WxH`` or ``@AREA``. Returns (area, None) or (None, (w, h))."""
    value = value.strip()
    if value.startswith("@"):
        try:
            area = int(value[1:])
        except ValueError:
            raise ValueError(f"invalid resize area: {value!r} (expected @AREA)")
        if area < 0:
            raise ValueError(f"invalid resize area: {value!r} (must be >= 0)")
        return area, None

    m = re.fullmatch(r"(\d+)\s*x\s*(\d+)", value)
    if not m:
        raise ValueError(f"invalid resize: {value!r} (expected WxH or @AREA)")
    return None, (int(m.group(1)), int(m.group(2)))


@dataclass
class FilterArgs:
    """Filters, listed in the order they are applied."""

    strip: bool = False
    add_comments: List[str] = field(default_factory=list)
    set_comments: Optional[List[str]] = None
    crop: str = ""
    resize: str = ""
    strategy: ResizeStrategy = BILINEAR
    compression_level: int = -1

    def validate(self) -> None:
        if self.crop:
            parse_geometry(self.crop)
        if self.resize:
            parse_resize(self.resize)


def apply_filters(wand: Wand, fa: FilterArgs) -> None:
    wand.force_rgba()

    if fa.strip:
        wand.strip()

    for comment in fa.add_comments:
        wand.add_comment(comment)

    if fa.set_comments is not None:
        wand.set_comments(fa.set_comments)

    if fa.crop:
        w, h, x, y = parse_geometry(fa.crop)
        wand.crop(w, h, x, y)

    if fa.resize:
        area, size = parse_resize(fa.resize)
        if area is not None:
            wand.resize_max_area(area, fa.strategy)
        else:
            wand.resize(size[0], size[1], fa.strategy)

    if fa.compression_level != -1:
        wand.set_compression_level(fa.compression_level)
