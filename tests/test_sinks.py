"""Tests for the memory, stream and file entry points."""
import errno
import io
import os

import pytest

import xpm_writer.sinks as sinks
from xpm_writer.document import format_xpm
from xpm_writer.errors import (
    DeviceError,
    InvalidFormatError,
    OutOfMemoryError,
    WriteError,
    XpmError,
    XpmStatus,
    status_of,
)
from xpm_writer.sinks import (
    write_to_file_object,
    write_to_xpm,
    write_to_xpm_mem,
    write_to_xpm_stream,
)


# ============================================================================
# Memory
# ============================================================================


def test_mem_returns_buffer_and_length(red_pixel):
    data, length = write_to_xpm_mem(red_pixel)
    assert data == format_xpm(red_pixel)
    assert length == len(data)


def test_mem_rejects_bad_threshold(red_pixel):
    with pytest.raises(ValueError):
        write_to_xpm_mem(red_pixel, threshold=300)


def test_mem_invalid_source():
    with pytest.raises(InvalidFormatError) as info:
        write_to_xpm_mem(object())
    assert info.value.status is XpmStatus.INVALID_FORMAT


# ============================================================================
# Stream
# ============================================================================


class TestStream:
    def test_single_call_with_whole_document(self, random_surface):
        calls = []

        def write(closure, data):
            calls.append((closure, data))
            return len(data)

        status = write_to_xpm_stream(random_surface, write, "ctx")
        assert status is XpmStatus.SUCCESS
        assert len(calls) == 1
        assert calls[0] == ("ctx", write_to_xpm_mem(random_surface)[0])

    @pytest.mark.parametrize("result", [None, True, XpmStatus.SUCCESS])
    def test_accepted_results(self, red_pixel, result):
        assert write_to_xpm_stream(red_pixel, lambda c, d: result) is XpmStatus.SUCCESS

    def test_short_write(self, red_pixel):
        with pytest.raises(WriteError) as info:
            write_to_xpm_stream(red_pixel, lambda c, d: len(d) - 1)
        err = info.value
        assert err.status is XpmStatus.WRITE_ERROR
        assert err.written == err.expected - 1

    @pytest.mark.parametrize("result", [False, XpmStatus.WRITE_ERROR, 0])
    def test_reported_failure(self, red_pixel, result):
        with pytest.raises(WriteError):
            write_to_xpm_stream(red_pixel, lambda c, d: result)

    def test_callback_oserror_becomes_write_error(self, red_pixel):
        def write(closure, data):
            raise OSError(errno.EPIPE, "broken pipe")

        with pytest.raises(WriteError) as info:
            write_to_xpm_stream(red_pixel, write)
        assert isinstance(info.value.__cause__, OSError)

    def test_no_partial_output_on_encode_failure(self):
        calls = []
        with pytest.raises(InvalidFormatError):
            write_to_xpm_stream(42, lambda c, d: calls.append(d))
        assert calls == []

    def test_file_object(self, red_pixel):
        buf = io.BytesIO()
        assert write_to_file_object(red_pixel, buf) is XpmStatus.SUCCESS
        assert buf.getvalue() == format_xpm(red_pixel)


# ============================================================================
# File
# ============================================================================


class TestFile:
    def test_writes_document(self, random_surface, tmp_path):
        path = tmp_path / "out.xpm"
        assert write_to_xpm(random_surface, path) is XpmStatus.SUCCESS
        assert path.read_bytes() == format_xpm(random_surface)

    def test_accepts_str_path(self, red_pixel, tmp_path):
        path = tmp_path / "out.xpm"
        write_to_xpm(red_pixel, str(path))
        assert path.read_bytes() == format_xpm(red_pixel)

    def test_truncates_existing_file(self, red_pixel, tmp_path):
        path = tmp_path / "out.xpm"
        path.write_bytes(b"x" * 10_000)
        write_to_xpm(red_pixel, path)
        assert path.read_bytes() == format_xpm(red_pixel)

    @pytest.mark.parametrize(
        "source, kwargs",
        [(object(), {}), ("not an image", {}), (None, {"threshold": 300})],
    )
    def test_existing_file_kept_on_encode_failure(
        self, red_pixel, tmp_path, source, kwargs
    ):
        path = tmp_path / "out.xpm"
        path.write_bytes(b"precious")
        with pytest.raises((InvalidFormatError, ValueError)):
            write_to_xpm(red_pixel if source is None else source, path, **kwargs)
        assert path.read_bytes() == b"precious"

    def test_partial_os_writes_are_completed(self, random_surface, tmp_path, monkeypatch):
        real_write = os.write
        calls = []

        def trickle(fd, data):
            calls.append(len(data))
            return real_write(fd, bytes(data[:7]))

        monkeypatch.setattr(sinks.os, "write", trickle)
        path = tmp_path / "out.xpm"
        assert write_to_xpm(random_surface, path) is XpmStatus.SUCCESS
        assert path.read_bytes() == format_xpm(random_surface)
        assert len(calls) > 1

    def test_stalled_os_write_is_write_error(self, red_pixel, tmp_path, monkeypatch):
        monkeypatch.setattr(sinks.os, "write", lambda fd, data: 0)
        with pytest.raises(WriteError) as info:
            write_to_xpm(red_pixel, tmp_path / "out.xpm")
        assert info.value.status is XpmStatus.WRITE_ERROR

    def test_open_failure_is_device_error(self, red_pixel, tmp_path):
        path = tmp_path / "missing" / "out.xpm"
        with pytest.raises(DeviceError) as info:
            write_to_xpm(red_pixel, path)
        err = info.value
        assert err.status is XpmStatus.DEVICE_ERROR
        assert err.errno == errno.ENOENT
        assert isinstance(err.os_error, OSError)
        assert err.filename is not None

    def test_closes_after_short_write(self, red_pixel, tmp_path, monkeypatch):
        closed = []
        real_close = os.close

        def tracking_close(fd):
            closed.append(fd)
            real_close(fd)

        monkeypatch.setattr(sinks, "_fd_write", lambda fd, data: 0)
        monkeypatch.setattr(sinks.os, "close", tracking_close)
        with pytest.raises(WriteError):
            write_to_xpm(red_pixel, tmp_path / "out.xpm")
        assert len(closed) == 1

    def test_closes_after_encode_failure(self, tmp_path, monkeypatch):
        closed = []
        real_close = os.close

        def tracking_close(fd):
            closed.append(fd)
            real_close(fd)

        monkeypatch.setattr(sinks.os, "close", tracking_close)
        with pytest.raises(InvalidFormatError):
            write_to_xpm("not an image", tmp_path / "out.xpm")
        assert len(closed) == 1

    def test_close_failure_reported_alone(self, red_pixel, tmp_path, monkeypatch):
        real_close = os.close

        def failing_close(fd):
            real_close(fd)
            raise OSError(errno.EIO, "I/O error")

        monkeypatch.setattr(sinks.os, "close", failing_close)
        with pytest.raises(DeviceError) as info:
            write_to_xpm(red_pixel, tmp_path / "out.xpm")
        assert info.value.errno == errno.EIO

    def test_write_error_wins_over_close_error(self, red_pixel, tmp_path, monkeypatch):
        real_close = os.close

        def failing_close(fd):
            real_close(fd)
            raise OSError(errno.EIO, "I/O error")

        monkeypatch.setattr(sinks, "_fd_write", lambda fd, data: 1)
        monkeypatch.setattr(sinks.os, "close", failing_close)
        with pytest.raises(WriteError):
            write_to_xpm(red_pixel, tmp_path / "out.xpm")

    def test_debug_logs(self, red_pixel, tmp_path, capsys):
        write_to_xpm(red_pixel, tmp_path / "out.xpm", debug=True)
        out = capsys.readouterr().out
        assert "[debug] wrote" in out
        assert "[debug] closed" in out


# ============================================================================
# Status mapping
# ============================================================================


def test_status_of():
    assert status_of(None) is XpmStatus.SUCCESS
    assert status_of(WriteError("x")) is XpmStatus.WRITE_ERROR
    assert status_of(DeviceError("x")) is XpmStatus.DEVICE_ERROR
    assert status_of(OutOfMemoryError("x")) is XpmStatus.NO_MEMORY
    assert status_of(MemoryError()) is XpmStatus.NO_MEMORY
    with pytest.raises(TypeError):
        status_of(ValueError("x"))


def test_error_hierarchy():
    assert issubclass(OutOfMemoryError, MemoryError)
    for cls in (InvalidFormatError, OutOfMemoryError, WriteError, DeviceError):
        assert issubclass(cls, XpmError)
    assert DeviceError("x").errno is None
