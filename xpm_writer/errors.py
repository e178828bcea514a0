from __future__ import annotations

"""
Error taxonomy for the encoder.

Every failure of an encode call is raised as an XpmError subclass carrying an
XpmStatus, so callers can either catch by type or branch on the status.
"""

import enum
from typing import Optional


class XpmStatus(enum.Enum):
    SUCCESS = "success"
    INVALID_FORMAT = "invalid format"
    NO_MEMORY = "out of memory"
    WRITE_ERROR = "write error"
    DEVICE_ERROR = "device error"


class XpmError(Exception):
    """Base class for encoder failures."""

    status: XpmStatus = XpmStatus.INVALID_FORMAT


class InvalidFormatError(XpmError):
    """Pixel source is not image data in a supported layout."""

    status = XpmStatus.INVALID_FORMAT


class OutOfMemoryError(XpmError, MemoryError):
    """Palette table or output buffer could not be allocated."""

    status = XpmStatus.NO_MEMORY


class WriteError(XpmError):
    """The sink reported a short or failed write."""

    status = XpmStatus.WRITE_ERROR

    def __init__(self, message: str, written: Optional[int] = None, expected: int = 0):
        super().__init__(message)
        self.written = written
        self.expected = expected


class DeviceError(XpmError):
    """
    The output file could not be opened, created or closed.

    The underlying OSError is kept on .os_error (and chained as __cause__).
    """

    status = XpmStatus.DEVICE_ERROR

    def __init__(self, message: str, os_error: Optional[OSError] = None):
        super().__init__(message)
        self.os_error = os_error

    @property
    def errno(self) -> Optional[int]:
        return None if self.os_error is None else self.os_error.errno

    @property
    def filename(self) -> Optional[str]:
        if self.os_error is None or self.os_error.filename is None:
            return None
        return str(self.os_error.filename)


def status_of(exc: Optional[BaseException]) -> XpmStatus:
    """Map an exception (or None) to a structured status."""
    if exc is None:
        return XpmStatus.SUCCESS
    if isinstance(exc, XpmError):
        return exc.status
    if isinstance(exc, MemoryError):
        return XpmStatus.NO_MEMORY
    raise TypeError(f"not an encoder error: {exc!r}")


__all__ = [
    "XpmStatus",
    "XpmError",
    "InvalidFormatError",
    "OutOfMemoryError",
    "WriteError",
    "DeviceError",
    "status_of",
]
