# xpm_writer/constants.py
"""
Policy and format constants used across the project.

- Transparency threshold and palette table bounds
- Symbol alphabet used to encode palette indices
- Size-estimate overheads for the document writer
"""
from __future__ import annotations

# ==================
# Palette (policy)
# ==================
# Alpha below this is treated as the single transparent colour (50%).
TRANS_THRESH: int = 0x80
# Number of 24-bit colours; also the table key reserved for TRANSPARENT.
MAX_COL: int = 0x1000000
TABLE_SIZE: int = MAX_COL + 1
RGB_MASK: int = 0x00FFFFFF

# =================
# Symbol encoding
# =================
SYMBOL_ALPHABET: str = (
    "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/"
)
SYMBOL_BITS: int = 6
SYMBOL_MASK: int = (1 << SYMBOL_BITS) - 1

# ============================
# Document layout (XPM3 text)
# ============================
XPM_MAGIC: str = "/* XPM */"
DEFAULT_NAME_TEMPLATE: str = "xpm_c{ncols}_"
NONE_KEYWORD: str = "None"

# 14 = '"' + ' c #xxxxxx' + '",' + newline
COLOR_LINE_OVERHEAD: int = 14
# 4 = '"' + '"' + ',' + newline
ROW_OVERHEAD: int = 4
HEADER_ALLOWANCE: int = 256

__all__ = [
    "TRANS_THRESH",
    "MAX_COL",
    "TABLE_SIZE",
    "RGB_MASK",
    "SYMBOL_ALPHABET",
    "SYMBOL_BITS",
    "SYMBOL_MASK",
    "XPM_MAGIC",
    "DEFAULT_NAME_TEMPLATE",
    "NONE_KEYWORD",
    "COLOR_LINE_OVERHEAD",
    "ROW_OVERHEAD",
    "HEADER_ALLOWANCE",
]
