from __future__ import annotations

"""
Symbol width and symbol encoding.

Palette indices are written as fixed-width base-64 strings, most significant
symbol first, using SYMBOL_ALPHABET. Every index in a document uses the same
width so pixel rows can be split back into fields.
"""

import numpy as np
from numpy.typing import NDArray

from .constants import (
    NONE_KEYWORD,
    RGB_MASK,
    SYMBOL_ALPHABET,
    SYMBOL_BITS,
    SYMBOL_MASK,
)
from .core_types import ColorKey, HexStr, is_transparent_key

_ALPHABET_CODES = np.frombuffer(SYMBOL_ALPHABET.encode("ascii"), dtype=np.uint8)


def symbol_width(palette_size: int) -> int:
    """
    Symbols per index for a palette of `palette_size` entries.

    ceil(bit_length(palette_size) / 6); 0 for an empty palette.
    """
    if palette_size < 0:
        raise ValueError(f"palette size must be >= 0, got {palette_size}")
    bits = int(palette_size).bit_length()
    return -(-bits // SYMBOL_BITS)


def encode_symbol(index: int, width: int) -> str:
    """Encode index as exactly `width` symbols, most significant first."""
    if width < 0 or not 0 <= index < (1 << (SYMBOL_BITS * width)):
        raise ValueError(f"index {index} does not fit in {width} symbols")
    return "".join(
        SYMBOL_ALPHABET[(index >> (shift * SYMBOL_BITS)) & SYMBOL_MASK]
        for shift in range(width - 1, -1, -1)
    )


def encode_symbols(indices: NDArray[np.integer], width: int) -> NDArray[np.uint8]:
    """
    Vectorised encode_symbol.

    Returns ASCII codes with shape indices.shape + (width,); callers take
    .tobytes() per row. Range is checked the same way as encode_symbol.
    """
    idx = np.asarray(indices).astype(np.int64, copy=False)
    if width < 0:
        raise ValueError(f"width must be >= 0, got {width}")
    if idx.size and (idx.min() < 0 or idx.max() >= (1 << (SYMBOL_BITS * width))):
        raise ValueError(f"indices do not fit in {width} symbols")
    shifts = np.arange(width - 1, -1, -1, dtype=np.int64) * SYMBOL_BITS
    digits = (idx[..., None] >> shifts) & SYMBOL_MASK
    return _ALPHABET_CODES[digits]


def encode_color_hex(key: ColorKey) -> HexStr:
    """Colour table value: '#rrggbb', or 'None' for the transparent key."""
    if is_transparent_key(key):
        return NONE_KEYWORD
    return f"#{key & RGB_MASK:06x}"


__all__ = [
    "symbol_width",
    "encode_symbol",
    "encode_symbols",
    "encode_color_hex",
]
