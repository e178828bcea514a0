"""
xpm_writer package.

Purpose:
  Encode 32-bit ARGB images as colour XPM3 text. See to_xpm.py for CLI.

Public API:
  write_to_xpm_mem    : encode to (bytes, length).
  write_to_xpm_stream : encode and hand the document to a write callback.
  write_to_xpm        : encode into a file.
  build_palette       : first-occurrence palette of a pixel source.
  symbol_width        : symbols per index for a palette size.
  encode_symbol       : fixed-width base-64 index encoding.
  image_io            : pixel source adapters (ArgbSurface, Pillow, numpy).
  errors              : XpmStatus and the XpmError family.

Quick start:
  from PIL import Image
  from xpm_writer import write_to_xpm
  write_to_xpm(Image.open("icon.png"), "icon.xpm")
"""

__version__ = "0.1.0"

# Re-export namespaces for convenience.
from . import constants
from . import core_types
from . import errors
from . import image_io
from . import palette
from . import symbols
from . import document
from . import utils

from .constants import TRANS_THRESH, MAX_COL  # noqa: E402,F401
from .core_types import TRANSPARENT, Palette  # noqa: E402,F401
from .errors import (  # noqa: E402,F401
    XpmStatus,
    XpmError,
    InvalidFormatError,
    OutOfMemoryError,
    WriteError,
    DeviceError,
)
from .image_io import ArgbSurface, as_surface, load_surface  # noqa: E402,F401
from .palette import build_palette  # noqa: E402,F401
from .symbols import (  # noqa: E402,F401
    symbol_width,
    encode_symbol,
    encode_color_hex,
)
from .document import format_xpm, estimate_size  # noqa: E402,F401
from .sinks import (  # noqa: E402,F401
    write_to_xpm_mem,
    write_to_xpm_stream,
    write_to_xpm,
    write_to_file_object,
)

__all__ = [
    "__version__",
    "constants",
    "core_types",
    "errors",
    "image_io",
    "palette",
    "symbols",
    "document",
    "utils",
    "TRANS_THRESH",
    "MAX_COL",
    "TRANSPARENT",
    "Palette",
    "XpmStatus",
    "XpmError",
    "InvalidFormatError",
    "OutOfMemoryError",
    "WriteError",
    "DeviceError",
    "ArgbSurface",
    "as_surface",
    "load_surface",
    "build_palette",
    "symbol_width",
    "encode_symbol",
    "encode_color_hex",
    "format_xpm",
    "estimate_size",
    "write_to_xpm_mem",
    "write_to_xpm_stream",
    "write_to_xpm",
    "write_to_file_object",
]
