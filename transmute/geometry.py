"""Resize strategies and aspect-preserving area fitting."""

from __future__ import annotations

import math
from typing import Dict, Tuple

from PIL import Image

# Interpolation strategies are Pillow resampling filters.
ResizeStrategy = Image.Resampling

BILINEAR = Image.Resampling.BILINEAR
NEAREST = Image.Resampling.NEAREST

STRATEGIES: Dict[str, ResizeStrategy] = {
    "bilinear": Image.Resampling.BILINEAR,
    "nearest": Image.Resampling.NEAREST,
    "bicubic": Image.Resampling.BICUBIC,
    "lanczos": Image.Resampling.LANCZOS,
}


def strategy_by_name(name: str) -> ResizeStrategy:
    key = (name or "").strip().lower()
    if key not in STRATEGIES:
        raise ValueError(
            f"Unknown resize strategy '{name}'. Use one of: {', '.join(sorted(STRATEGIES))}."
        )
    return STRATEGIES[key]


def area_fit(width: int, height: int, max_area: int) -> Tuple[int, int]:
    """
    Largest (width, height) with the original aspect ratio whose product does
    not exceed ``max_area``. Dimensions are truncated toward zero.

    The smaller side is the largest ``h <= isqrt(max_area)`` satisfying
    ``long * h**2 <= max_area * short``, which is exactly where a downward
    search from ``isqrt(max_area)`` stops. Integer arithmetic only, so the
    budget is never overshot by rounding.
    """
    if width == 0 or height == 0 or max_area <= 0:
        return 0, 0

    if width == height:
        side = math.isqrt(max_area)
        return side, side

    if width < height:
        new_height, new_width = area_fit(height, width, max_area)
        return new_width, new_height

    new_height = min(math.isqrt(max_area), math.isqrt(max_area * height // width))
    while new_height > 0 and width * new_height * new_height > max_area * height:
        new_height -= 1
    new_width = width * new_height // height
    return new_width, new_height
