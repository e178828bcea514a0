from __future__ import annotations

"""
Core type aliases, small value objects, and lightweight helpers.
"""

from dataclasses import dataclass
from typing import Any, Callable, Iterator, Optional, Tuple

import numpy as np
from numpy.typing import NDArray

from .constants import MAX_COL, RGB_MASK, TRANS_THRESH

# Basic aliases

ColorKey = int  # 0..0xffffff for RGB, MAX_COL for TRANSPARENT
HexStr = str

ARGB32 = NDArray[np.uint32]  # (H, W) packed 0xAARRGGBB
ColorKeys = NDArray[np.uint32]  # (H, W) palette keys
IndexImage = NDArray[np.uint32]  # (H, W) 0-based palette indices
U8Image = NDArray[np.uint8]  # (H, W, 3|4)

# Sentinel key for every pixel below the transparency threshold.
TRANSPARENT: ColorKey = MAX_COL

# Value objects


@dataclass(frozen=True, eq=False)
class Palette:
    """
    Deduplicated colour table of one image.

    keys[i] is the colour key with palette index i + 1, so keys are stored in
    first-occurrence order. pixel_indices holds the 0-based index of every
    pixel, row-major, ready for symbol encoding.
    """

    keys: NDArray[np.uint32]  # shape (N,)
    pixel_indices: IndexImage  # shape (H, W)
    threshold: int = TRANS_THRESH

    @property
    def size(self) -> int:
        return int(self.keys.shape[0])

    @property
    def has_transparent(self) -> bool:
        return bool(np.any(self.keys == TRANSPARENT))

    def index_of(self, key: ColorKey) -> int:
        """1-based palette index of key; KeyError if the colour is absent."""
        hits = np.flatnonzero(self.keys == np.uint32(key))
        if hits.size == 0:
            raise KeyError(key)
        return int(hits[0]) + 1

    def items(self) -> Iterator[Tuple[int, ColorKey]]:
        """Yield (index, key) in ascending index order."""
        for i, key in enumerate(self.keys.tolist(), start=1):
            yield i, int(key)

    def __len__(self) -> int:
        return self.size


# Small helpers


def is_transparent_key(key: ColorKey) -> bool:
    return key == TRANSPARENT


def key_of_pixel(pixel: int, threshold: int = TRANS_THRESH) -> ColorKey:
    """Palette key of one packed ARGB pixel."""
    if ((pixel >> 24) & 0xFF) < threshold:
        return TRANSPARENT
    return pixel & RGB_MASK


# Callable signatures

# (closure, data) -> bytes written; None means the whole buffer was taken.
WriteFunc = Callable[[Any, bytes], Optional[int]]

__all__ = [
    # aliases / types
    "ColorKey",
    "HexStr",
    "ARGB32",
    "ColorKeys",
    "IndexImage",
    "U8Image",
    "TRANSPARENT",
    # value objects
    "Palette",
    # helpers
    "is_transparent_key",
    "key_of_pixel",
    # callable signatures
    "WriteFunc",
]
