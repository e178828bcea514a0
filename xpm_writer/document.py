from __future__ import annotations

"""
XPM document writer.

Formats header, colour table and pixel rows into one in-memory buffer whose
capacity is estimated up front from the geometry and palette size. No I/O
happens here; sinks decide where the bytes go.

Layout produced:

  /* XPM */
  static char *xpm_c2_[] = {
  "2 1 2 1",
  "A c #0000ff",
  "B c None",
  "AB"
  };
"""

from typing import Any, Optional, Union

from .constants import (
    COLOR_LINE_OVERHEAD,
    DEFAULT_NAME_TEMPLATE,
    HEADER_ALLOWANCE,
    ROW_OVERHEAD,
    TRANS_THRESH,
    XPM_MAGIC,
)
from .core_types import Palette
from .errors import OutOfMemoryError
from .image_io import as_surface
from .palette import build_palette
from .symbols import encode_color_hex, encode_symbol, encode_symbols, symbol_width
from .utils import debug_log, key_value_pairs_to_string


def estimate_size(
    width: int, height: int, palette_size: int, cpp: int, extra: int = 0
) -> int:
    """
    Upper bound of the document length in bytes.

    extra is added on top of the fixed header allowance, for long array names.
    """
    if min(width, height, palette_size, cpp, extra) < 0:
        raise ValueError("sizes must be >= 0")
    color_table = (cpp + COLOR_LINE_OVERHEAD) * palette_size
    pixel_table = (width * cpp + ROW_OVERHEAD) * height
    return color_table + pixel_table + HEADER_ALLOWANCE + extra


class XpmBuffer:
    """
    Append-only byte buffer pre-sized to a capacity hint.

    Writing past the hint grows the buffer instead of failing; `overflowed`
    reports whether that happened.
    """

    def __init__(self, capacity: int = 0):
        self.capacity = int(capacity)
        try:
            self._buf = bytearray(self.capacity)
        except MemoryError as e:
            raise OutOfMemoryError(f"cannot allocate {self.capacity} byte buffer") from e
        self._pos = 0

    def write(self, data: Union[bytes, bytearray, memoryview, str]) -> int:
        if isinstance(data, str):
            data = data.encode("ascii")
        end = self._pos + len(data)
        if end > len(self._buf):
            self._buf.extend(bytes(end - len(self._buf)))
        self._buf[self._pos : end] = data
        self._pos = end
        return len(data)

    def tell(self) -> int:
        return self._pos

    def __len__(self) -> int:
        return self._pos

    @property
    def overflowed(self) -> bool:
        return self._pos > self.capacity

    def getvalue(self) -> bytes:
        try:
            return bytes(memoryview(self._buf)[: self._pos])
        except MemoryError as e:
            raise OutOfMemoryError(f"cannot copy {self._pos} byte document") from e


def default_name(palette_size: int) -> str:
    return DEFAULT_NAME_TEMPLATE.format(ncols=palette_size)


def check_name(name: str) -> str:
    """Array name must be a plain C identifier."""
    if not (name.isascii() and name.isidentifier()):
        raise ValueError(f"not a valid C identifier: {name!r}")
    return name


def format_xpm(
    source: Any,
    palette: Optional[Palette] = None,
    *,
    name: Optional[str] = None,
    threshold: int = TRANS_THRESH,
    debug: bool = False,
) -> bytes:
    """
    Render a pixel source as an XPM3 document.

    Args:
      source: ArgbSurface or anything as_surface() accepts
      palette: palette of the same source; built here when omitted
      name: C array name, defaults to xpm_c<ncols>_
      threshold: alpha cut-off, only used when building the palette
      debug: log sizing details
    Returns:
      complete document as ASCII bytes
    """
    surface = as_surface(source)
    if palette is None:
        palette = build_palette(surface, threshold)
    if palette.pixel_indices.shape != (surface.height, surface.width):
        raise ValueError(
            f"palette built for {palette.pixel_indices.shape[::-1]}, "
            f"surface is {surface.width}x{surface.height}"
        )

    ncols = palette.size
    cpp = symbol_width(ncols)
    array_name = check_name(name) if name is not None else default_name(ncols)
    capacity = estimate_size(
        surface.width, surface.height, ncols, cpp, extra=len(array_name)
    )
    out = XpmBuffer(capacity)

    # header
    out.write(f"{XPM_MAGIC}\nstatic char *{array_name}[] = {{\n")
    out.write(f'"{surface.width} {surface.height} {ncols} {cpp}"')

    # colour table, ascending index
    for index, key in palette.items():
        out.write(f',\n"{encode_symbol(index - 1, cpp)} c {encode_color_hex(key)}"')

    # pixel table, one row of symbol codes at a time
    for y in range(surface.height):
        try:
            codes = encode_symbols(palette.pixel_indices[y], cpp)
        except MemoryError as e:
            raise OutOfMemoryError(f"cannot encode row {y}") from e
        out.write(b',\n"')
        out.write(codes.tobytes())
        out.write(b'"')

    out.write(b"\n};\n")

    if debug:
        debug_log(
            key_value_pairs_to_string(
                [
                    ("Size", f"{surface.width}x{surface.height}"),
                    ("Colours", ncols),
                    ("Transparent", palette.has_transparent),
                    ("Chars/pixel", cpp),
                    ("Bytes", len(out)),
                    ("Estimate", capacity),
                ]
            )
        )
        if out.overflowed:
            debug_log(f"size estimate exceeded by {len(out) - capacity} bytes")
    return out.getvalue()


__all__ = [
    "estimate_size",
    "XpmBuffer",
    "default_name",
    "check_name",
    "format_xpm",
]
