from __future__ import annotations

"""
Palette builder.

Every pixel is turned into a colour key (24-bit RGB, or TRANSPARENT when
alpha is below the threshold) in one vectorised step. np.unique gives the
distinct keys with the flat position where each first appears; sorting by that
position numbers them 1..N in order of first appearance. The index of every
pixel is then read back through a direct-addressed table with one slot per
possible key, allocated per call.
"""

from typing import Any

import numpy as np

from .constants import MAX_COL, RGB_MASK, TABLE_SIZE, TRANS_THRESH
from .core_types import ARGB32, ColorKeys, Palette
from .errors import OutOfMemoryError
from .image_io import as_surface


def check_threshold(threshold: int) -> int:
    """Validate an alpha threshold; 0 keeps every pixel, 256 drops every pixel."""
    t = int(threshold)
    if not 0 <= t <= 0x100:
        raise ValueError(f"threshold must be in 0..256, got {threshold}")
    return t


def color_keys(pixels: ARGB32, threshold: int = TRANS_THRESH) -> ColorKeys:
    """Colour key per pixel: TRANSPARENT (MAX_COL) below threshold, else RGB bits."""
    px = np.asarray(pixels, dtype=np.uint32)
    alpha = px >> np.uint32(24)
    return np.where(
        alpha < np.uint32(check_threshold(threshold)),
        np.uint32(MAX_COL),
        px & np.uint32(RGB_MASK),
    ).astype(np.uint32, copy=False)


def _allocate_table() -> np.ndarray:
    try:
        return np.zeros(TABLE_SIZE, dtype=np.int32)
    except MemoryError as e:
        raise OutOfMemoryError(f"cannot allocate palette table ({TABLE_SIZE} slots)") from e


def build_palette(source: Any, threshold: int = TRANS_THRESH) -> Palette:
    """
    Build the palette of a pixel source.

    Args:
      source: ArgbSurface or anything as_surface() accepts
      threshold: alpha cut-off for the transparent colour
    Returns:
      Palette with keys in index order and the 0-based index of every pixel
    """
    surface = as_surface(source)
    keys = color_keys(surface.pixels(), threshold).reshape(-1)
    height, width = surface.height, surface.width

    if keys.size == 0:
        return Palette(
            keys=np.zeros((0,), dtype=np.uint32),
            pixel_indices=np.zeros((height, width), dtype=np.uint32),
            threshold=threshold,
        )

    # First-occurrence order: sort the distinct keys by where they first appear.
    uniq, first_at = np.unique(keys, return_index=True)
    ordered = uniq[np.argsort(first_at, kind="stable")].astype(np.uint32)

    table = _allocate_table()
    table[ordered] = np.arange(1, ordered.shape[0] + 1, dtype=np.int32)
    try:
        pixel_indices = (table[keys] - 1).astype(np.uint32).reshape(height, width)
    except MemoryError as e:
        raise OutOfMemoryError("cannot allocate index image") from e

    return Palette(keys=ordered, pixel_indices=pixel_indices, threshold=threshold)


def palette_counts(palette: Palette) -> np.ndarray:
    """Pixel count per palette entry, in index order."""
    return np.bincount(
        palette.pixel_indices.reshape(-1), minlength=palette.size
    ).astype(np.int64, copy=False)


__all__ = [
    "check_threshold",
    "color_keys",
    "build_palette",
    "palette_counts",
]
