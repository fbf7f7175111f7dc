#!/usr/bin/env python3
"""Quick smoke test: import the package, check Pillow plugins, and round-trip every writable codec."""

import io
import os
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
try:
    import transmute  # type: ignore  # noqa: F401
except ModuleNotFoundError:
    sys.path.insert(0, str(ROOT))
    import transmute  # type: ignore  # noqa: F401

from PIL import Image, features

from transmute.registry import default_registry
from transmute.wand import Wand

# Pillow features the built-in codecs lean on.
CORE_FEATURES = ["zlib", "jpg"]
OPTIONAL = ["webp", "libtiff"]


def round_trip(codec: str) -> Wand:
    wand = Wand()
    wand.set_image(Image.new("RGBA", (48, 32), (200, 120, 40, 255)))
    wand.add_comment(f"smoke {codec}")
    buf = io.BytesIO()
    wand.encode_image(buf, codec)

    out = Wand()
    out.decode_image(io.BytesIO(buf.getvalue()))
    return out


def main() -> int:
    allow_missing = os.getenv("ALLOW_MISSING_FEATURES", "").lower() in {"1", "true", "yes"}
    print("Pillow features:")
    missing = []
    for name in CORE_FEATURES + OPTIONAL:
        available = features.check(name)
        mark = "✅" if available else "❌"
        print(f"  {mark} {name}")
        if name in CORE_FEATURES and not available:
            missing.append(name)

    if missing:
        msg = f"Missing required features: {', '.join(missing)}"
        if allow_missing:
            print(f"{msg} (continuing because ALLOW_MISSING_FEATURES=1)")
        else:
            print(msg)
            return 1

    skip = {"webp"} if not features.check("webp") else set()
    failures = []
    for entry in default_registry().codecs():
        if not entry.can_encode or entry.name in skip:
            continue
        try:
            out = round_trip(entry.name)
        except Exception as exc:
            failures.append(entry.name)
            print(f"  ❌ {entry.name}: {exc}")
            continue
        print(f"  ✅ {entry.name}: {out.width}x{out.height} as {out.source_format}, comments={out.comments}")

    png = round_trip("png")
    assert png.comments == ["smoke png"]
    print("PNG comment round trip passed.")

    if failures:
        print(f"Round trip failed for: {', '.join(failures)}")
        return 1
    print("Smoke test passed: codecs registered and round trips clean.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
