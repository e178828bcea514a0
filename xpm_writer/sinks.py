from __future__ import annotations

"""
Entry points: encode to memory, to a write callback, or to a file.

All three share format_xpm(); the stream and file variants only add delivery.
The document is fully built before anything is handed to a sink, so a failed
encode never produces partial output.
"""

import contextlib
import os
from pathlib import Path
from typing import Any, BinaryIO, Optional, Tuple, Union

from .constants import TRANS_THRESH
from .core_types import WriteFunc
from .document import format_xpm
from .errors import DeviceError, WriteError, XpmStatus
from .palette import check_threshold
from .utils import debug_log

_OPEN_FLAGS = os.O_WRONLY | os.O_CREAT | getattr(os, "O_BINARY", 0)
_OPEN_MODE = 0o644


def write_to_xpm_mem(
    source: Any,
    *,
    threshold: int = TRANS_THRESH,
    name: Optional[str] = None,
    debug: bool = False,
) -> Tuple[bytes, int]:
    """Encode source and return (document bytes, length)."""
    data = format_xpm(
        source, name=name, threshold=check_threshold(threshold), debug=debug
    )
    return data, len(data)


def _check_written(written: Any, expected: int) -> None:
    if written is None:
        return
    if isinstance(written, XpmStatus):
        if written is not XpmStatus.SUCCESS:
            raise WriteError(f"sink reported {written.value}", None, expected)
        return
    if isinstance(written, bool):
        if not written:
            raise WriteError("sink reported failure", None, expected)
        return
    if int(written) < expected:
        raise WriteError(
            f"short write: {int(written)} of {expected} bytes", int(written), expected
        )


def write_to_xpm_stream(
    source: Any,
    write_func: WriteFunc,
    closure: Any = None,
    *,
    threshold: int = TRANS_THRESH,
    name: Optional[str] = None,
    debug: bool = False,
) -> XpmStatus:
    """
    Encode source and hand the whole document to write_func(closure, data) once.

    write_func may return the number of bytes taken (short count is a
    WriteError), a bool, an XpmStatus, or None for "all written". An OSError
    raised by write_func becomes a WriteError.
    """
    data, length = write_to_xpm_mem(
        source, threshold=threshold, name=name, debug=debug
    )
    try:
        written = write_func(closure, data)
    except OSError as e:
        raise WriteError(f"write failed: {e}", None, length) from e
    _check_written(written, length)
    if debug:
        debug_log(f"wrote {length:,} bytes to stream")
    return XpmStatus.SUCCESS


def _fd_write(fd: int, data: bytes) -> int:
    # Old content is dropped only once a complete document exists.
    os.ftruncate(fd, 0)
    view = memoryview(data)
    total = 0
    while total < len(view):
        n = os.write(fd, view[total:])
        if n == 0:
            break
        total += n
    return total


def write_to_xpm(
    source: Any,
    path: Union[str, os.PathLike],
    *,
    threshold: int = TRANS_THRESH,
    name: Optional[str] = None,
    debug: bool = False,
) -> XpmStatus:
    """
    Encode source into the file at path.

    The file is created if missing. Existing content is replaced only after
    the document has been encoded, so an encode failure leaves it intact.

    Raises DeviceError when the file cannot be opened, WriteError when the
    write comes up short. The descriptor is closed on every path; a close
    failure is reported only when nothing else failed.
    """
    target = Path(path)
    try:
        fd = os.open(target, _OPEN_FLAGS, _OPEN_MODE)
    except OSError as e:
        raise DeviceError(f"cannot open {target}: {e.strerror or e}", e) from e

    try:
        status = write_to_xpm_stream(
            source, _fd_write, fd, threshold=threshold, name=name, debug=debug
        )
    except BaseException:
        with contextlib.suppress(OSError):
            os.close(fd)
        raise

    try:
        os.close(fd)
    except OSError as e:
        raise DeviceError(f"cannot close {target}: {e.strerror or e}", e) from e
    if debug:
        debug_log(f"closed {target}")
    return status


def _file_write(fileobj: BinaryIO, data: bytes) -> Optional[int]:
    return fileobj.write(data)


def write_to_file_object(
    source: Any,
    fileobj: BinaryIO,
    *,
    threshold: int = TRANS_THRESH,
    name: Optional[str] = None,
    debug: bool = False,
) -> XpmStatus:
    """Encode source into an open binary file-like object."""
    return write_to_xpm_stream(
        source, _file_write, fileobj, threshold=threshold, name=name, debug=debug
    )


__all__ = [
    "write_to_xpm_mem",
    "write_to_xpm_stream",
    "write_to_xpm",
    "write_to_file_object",
]
