"""Shared fixtures and helpers for the xpm_writer test suite."""
import re

import numpy as np
import pytest

from xpm_writer.constants import SYMBOL_ALPHABET
from xpm_writer.image_io import ArgbSurface, surface_from_argb_array

OPAQUE = 0xFF000000

_QUOTED = re.compile(rb'"([^"]*)"')


def make_surface(rows):
    """Surface from a list of rows of packed ARGB ints."""
    arr = np.array(rows, dtype=np.uint32)
    if arr.ndim == 1:
        arr = arr.reshape(1, -1)
    return surface_from_argb_array(arr)


def quoted_strings(document: bytes):
    """All quoted string literals of a document, in order."""
    return [m.decode("ascii") for m in _QUOTED.findall(document)]


def split_document(document: bytes):
    """Return (header fields, colour lines, pixel rows)."""
    strings = quoted_strings(document)
    width, height, ncols, cpp = (int(v) for v in strings[0].split())
    colours = strings[1 : 1 + ncols]
    rows = strings[1 + ncols :]
    return (width, height, ncols, cpp), colours, rows


def decode_row(row: str, cpp: int):
    """Inverse of the symbol encoding for one pixel row."""
    out = []
    for i in range(0, len(row), cpp):
        value = 0
        for ch in row[i : i + cpp]:
            value = (value << 6) | SYMBOL_ALPHABET.index(ch)
        out.append(value)
    return out


@pytest.fixture
def red_pixel() -> ArgbSurface:
    return make_surface([[0xFFFF0000]])


@pytest.fixture
def blue_and_clear() -> ArgbSurface:
    return make_surface([[0xFF0000FF, 0x10ABCDEF]])


@pytest.fixture
def random_surface() -> ArgbSurface:
    """16x9 image over a small colour set with random alpha."""
    rng = np.random.default_rng(1234)
    colours = np.array(
        [0x000000, 0xFFFFFF, 0xFF0000, 0x00FF00, 0x0000FF, 0x123456],
        dtype=np.uint32,
    )
    rgb = colours[rng.integers(0, colours.size, size=(9, 16))]
    alpha = rng.integers(0, 256, size=(9, 16)).astype(np.uint32)
    return surface_from_argb_array(((alpha << 24) | rgb).astype(np.uint32))


def distinct_colours(n: int) -> ArgbSurface:
    """n x 1 image of n distinct opaque colours."""
    return make_surface([[OPAQUE | i for i in range(n)]])
