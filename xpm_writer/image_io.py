from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Tuple, Union

import numpy as np
from PIL import Image, UnidentifiedImageError

from .core_types import ARGB32, U8Image
from .errors import DeviceError, InvalidFormatError

"""
Pixel source adapters.

Everything the encoder reads goes through ArgbSurface: a read-only grid of
packed 0xAARRGGBB pixels with a (possibly padded) row stride. Pillow images
and numpy arrays are normalised into that layout here; alpha and RGB are kept
as-is, except that sources without alpha are forced fully opaque.
"""

BufferLike = Union[bytes, bytearray, memoryview, np.ndarray]

# Pillow modes that carry alpha and must be rendered to straight RGBA.
_ALPHA_MODES = {"RGBA", "RGBa", "LA", "La", "PA"}


@dataclass(frozen=True, eq=False)
class ArgbSurface:
    """Read-only ARGB32 surface. stride is in bytes, data is (H, stride // 4)."""

    width: int
    height: int
    stride: int
    data: ARGB32

    def pixels(self) -> ARGB32:
        """(H, W) view of the visible pixels, padding columns dropped."""
        return self.data[:, : self.width]

    def pixel_at(self, x: int, y: int) -> int:
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"pixel ({x}, {y}) outside {self.width}x{self.height}")
        return int(self.data[y, x])

    @property
    def size(self) -> Tuple[int, int]:
        return self.width, self.height


def _check_geometry(width: int, height: int) -> None:
    if width < 0 or height < 0:
        raise InvalidFormatError(f"negative geometry {width}x{height}")


def _readonly(arr: np.ndarray) -> np.ndarray:
    view = arr.view()
    view.setflags(write=False)
    return view


def surface_from_argb_buffer(
    buf: BufferLike, width: int, height: int, stride: Optional[int] = None
) -> ArgbSurface:
    """
    Wrap a native-endian buffer of packed 32-bit ARGB pixels.

    Rows start every `stride` bytes; bytes past width * 4 in each row are
    padding and never read.
    """
    _check_geometry(width, height)
    if stride is None:
        stride = width * 4
    if stride < width * 4 or stride % 4 != 0:
        raise InvalidFormatError(
            f"stride {stride} invalid for width {width} (need >= {width * 4}, multiple of 4)"
        )

    if height == 0 or stride == 0:
        data = np.zeros((height, stride // 4), dtype=np.uint32)
        return ArgbSurface(width, height, stride, _readonly(data))

    if isinstance(buf, np.ndarray):
        raw = np.ascontiguousarray(buf).reshape(-1).view(np.uint8)
    else:
        raw = np.frombuffer(buf, dtype=np.uint8)

    need = stride * height
    if raw.shape[0] < need:
        raise InvalidFormatError(
            f"buffer holds {raw.shape[0]} bytes, {need} needed for {height} rows"
        )
    data = raw[:need].view(np.uint32).reshape(height, stride // 4)
    return ArgbSurface(width, height, stride, _readonly(data))


def surface_from_argb_array(arr: np.ndarray) -> ArgbSurface:
    """Wrap a (H, W) uint32 array of packed ARGB pixels."""
    if arr.ndim != 2 or arr.dtype != np.uint32:
        raise InvalidFormatError(f"expected uint32 (H,W) array, got {arr.dtype} {arr.shape}")
    height, width = arr.shape
    data = np.ascontiguousarray(arr)
    return ArgbSurface(int(width), int(height), int(width) * 4, _readonly(data))


def surface_from_rgba_array(arr: U8Image) -> ArgbSurface:
    """
    Pack a uint8 (H,W,3) or (H,W,4) array into ARGB32.

    Three-channel input has no alpha and becomes fully opaque.
    """
    if arr.dtype != np.uint8 or arr.ndim != 3 or arr.shape[-1] not in (3, 4):
        raise InvalidFormatError(
            f"expected uint8 (H,W,3/4) image, got {arr.dtype} {arr.shape}"
        )
    px = arr.astype(np.uint32)
    if arr.shape[-1] == 4:
        alpha = px[..., 3]
    else:
        alpha = np.full(arr.shape[:2], 0xFF, dtype=np.uint32)
    packed = (alpha << 24) | (px[..., 0] << 16) | (px[..., 1] << 8) | px[..., 2]
    return surface_from_argb_array(packed.astype(np.uint32, copy=False))


def _has_alpha(im: Image.Image) -> bool:
    if im.mode in _ALPHA_MODES:
        return True
    return "transparency" in im.info


def surface_from_image(im: Image.Image) -> ArgbSurface:
    """Normalise any Pillow image (first frame) to an ARGB32 surface."""
    try:
        if im.mode == "RGBA" or (im.mode == "RGB" and not _has_alpha(im)):
            rgba = im
        elif _has_alpha(im):
            rgba = im.convert("RGBA")
        else:
            rgba = im.convert("RGB")
        arr = np.array(rgba, dtype=np.uint8)
    except (ValueError, OSError) as e:
        raise InvalidFormatError(f"cannot normalise {im.mode} image: {e}") from e
    return surface_from_rgba_array(arr)


def _surface_from_accessor(source: Any) -> ArgbSurface:
    width, height = int(source.width), int(source.height)
    _check_geometry(width, height)
    data = np.zeros((height, width), dtype=np.uint32)
    for y in range(height):
        for x in range(width):
            data[y, x] = int(source.pixel_at(x, y)) & 0xFFFFFFFF
    return surface_from_argb_array(data)


def as_surface(source: Any) -> ArgbSurface:
    """
    Accept an ArgbSurface, a Pillow image, a numpy array, or any object with
    width, height and pixel_at(x, y).
    """
    if isinstance(source, ArgbSurface):
        return source
    if isinstance(source, Image.Image):
        return surface_from_image(source)
    if isinstance(source, np.ndarray):
        if source.ndim == 2:
            return surface_from_argb_array(source)
        return surface_from_rgba_array(source)
    if all(hasattr(source, a) for a in ("width", "height", "pixel_at")):
        return _surface_from_accessor(source)
    raise InvalidFormatError(f"unsupported pixel source: {type(source).__name__}")


def load_surface(path: Path) -> ArgbSurface:
    """Open an image file with Pillow and normalise it."""
    try:
        im = Image.open(path)
    except UnidentifiedImageError as e:
        raise InvalidFormatError(f"not an image: {path}") from e
    except OSError as e:
        raise DeviceError(f"cannot read {path}: {e.strerror or e}", e) from e
    with im:
        try:
            im.load()
        except OSError as e:
            raise InvalidFormatError(f"cannot decode {path}: {e}") from e
        return surface_from_image(im)


__all__ = [
    "ArgbSurface",
    "surface_from_argb_buffer",
    "surface_from_argb_array",
    "surface_from_rgba_array",
    "surface_from_image",
    "as_surface",
    "load_surface",
]
