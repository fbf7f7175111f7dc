"""Difference hash over a 9x8 grayscale grid."""

import numpy as np

HASH_WIDTH = 9
HASH_HEIGHT = 8


def diff_hash(gray: np.ndarray) -> int:
    """
    64-bit difference hash. ``gray`` must be a single-channel array of shape
    (8, 9); anything else is a caller bug.

    Bit ``row * 8 + col`` is set when a pixel is brighter than its right-hand
    neighbour. Bit 0 is the least significant.
    """
    if gray.ndim != 2 or gray.shape != (HASH_HEIGHT, HASH_WIDTH):
        raise ValueError(f"diff_hash requires a 9x8 grayscale grid, got shape {gray.shape}")

    values = gray.astype(np.int32)
    bits = (values[:, :-1] > values[:, 1:]).reshape(-1).astype(np.uint8)
    packed = np.packbits(bits, bitorder="little")
    return int.from_bytes(packed.tobytes(), "little")
