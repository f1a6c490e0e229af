"""测试输入/输出句柄的惰性打开、重命名与清理。"""

from __future__ import annotations

import errno
import io
from pathlib import Path

import pytest

from srcdst.core.exceptions import HandleStateError, UnsupportedOperationError
from srcdst.core.handles import (
    EndpointIO,
    ReadFile,
    ReadStdin,
    WriteFile,
    WriteStdout,
    open_pair,
)
from srcdst.core.models import Dst, Src


def test_read_file_opens_lazily(tmp_path: Path) -> None:
    handle = ReadFile(tmp_path / "missing.bin")

    with pytest.raises(FileNotFoundError):
        handle.reader()


def test_read_file_caches_reader(tmp_path: Path) -> None:
    source = tmp_path / "a.bin"
    source.write_bytes(b"abc")
    handle = ReadFile(source)

    first = handle.reader()
    assert handle.reader() is first
    assert first.read() == b"abc"
    handle.close()
    assert first.closed


def test_write_file_creates_on_first_use(tmp_path: Path) -> None:
    target = tmp_path / "out.png"
    handle = WriteFile(target)

    assert not target.exists()
    assert handle.extension() == "png"

    writer = handle.writer()
    assert target.exists()
    assert handle.writer() is writer
    writer.write(b"payload")
    handle.close()

    assert target.read_bytes() == b"payload"


def test_write_file_truncates(tmp_path: Path) -> None:
    target = tmp_path / "out.bin"
    target.write_bytes(b"old content")
    handle = WriteFile(target)

    handle.writer().write(b"new")
    handle.close()

    assert target.read_bytes() == b"new"


def test_extension_without_suffix_is_empty(tmp_path: Path) -> None:
    assert WriteFile(tmp_path / "README").extension() == ""


def test_rename_before_writer(tmp_path: Path) -> None:
    handle = WriteFile(tmp_path / "out.jpg")

    handle.rename("out.png")
    assert handle.extension() == "png"
    handle.writer().write(b"x")
    handle.close()

    assert (tmp_path / "out.png").read_bytes() == b"x"
    assert not (tmp_path / "out.jpg").exists()


def test_rename_after_writer_rejected(tmp_path: Path) -> None:
    handle = WriteFile(tmp_path / "out.jpg")
    handle.writer()

    with pytest.raises(HandleStateError):
        handle.rename("out.png")
    handle.close()


def test_remove_if_empty_deletes_zero_byte_file(tmp_path: Path) -> None:
    target = tmp_path / "out.bin"
    target.write_bytes(b"")

    assert WriteFile(target).remove_if_empty() is True
    assert not target.exists()


def test_remove_if_empty_keeps_content(tmp_path: Path) -> None:
    target = tmp_path / "out.bin"
    target.write_bytes(b"partial")

    assert WriteFile(target).remove_if_empty() is False
    assert target.read_bytes() == b"partial"


def test_remove_if_empty_sees_buffered_writes(tmp_path: Path) -> None:
    target = tmp_path / "out.bin"
    handle = WriteFile(target)
    handle.writer().write(b"buffered")

    assert handle.remove_if_empty() is False
    handle.close()
    assert target.read_bytes() == b"buffered"


def test_remove_unconditionally_releases_writer(tmp_path: Path) -> None:
    target = tmp_path / "out.bin"
    handle = WriteFile(target)
    writer = handle.writer()
    writer.write(b"content")

    handle.remove_unconditionally()

    assert writer.closed
    assert not target.exists()
    assert handle.created


def test_remove_unconditionally_missing_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        WriteFile(tmp_path / "never.bin").remove_unconditionally()


def test_stdout_capabilities_unsupported() -> None:
    handle = WriteStdout(io.BytesIO())

    assert handle.extension() is None
    with pytest.raises(UnsupportedOperationError):
        handle.rename("x.png")
    with pytest.raises(UnsupportedOperationError):
        handle.remove_if_empty()
    with pytest.raises(UnsupportedOperationError):
        handle.remove_unconditionally()


def test_stdout_close_only_flushes() -> None:
    stream = io.BytesIO()
    handle = WriteStdout(stream)

    handle.writer().write(b"hello")
    handle.close()

    assert not stream.closed
    assert stream.getvalue() == b"hello"


def test_stdin_reader() -> None:
    handle = ReadStdin(io.BytesIO(b"input"))

    assert handle.reader().read() == b"input"


def test_endpoint_io_delegates(tmp_path: Path) -> None:
    source = tmp_path / "in.bin"
    source.write_bytes(b"data")
    target = tmp_path / "out.bin"

    with EndpointIO(ReadFile(source), WriteFile(target)) as handle:
        assert handle.extension() == "bin"
        handle.writer().write(handle.reader().read())

    assert target.read_bytes() == b"data"


def test_endpoint_io_swaps_output(tmp_path: Path) -> None:
    stream = io.BytesIO()
    handle = EndpointIO(ReadStdin(io.BytesIO(b"abc")), WriteFile(tmp_path / "out.bin"))

    handle.with_output(WriteStdout(stream))
    assert handle.extension() is None
    handle.writer().write(handle.reader().read())
    handle.close()

    assert stream.getvalue() == b"abc"
    assert not (tmp_path / "out.bin").exists()


def test_endpoint_io_swaps_input(tmp_path: Path) -> None:
    source = tmp_path / "in.bin"
    source.write_bytes(b"from file")
    handle = EndpointIO(ReadStdin(io.BytesIO(b"from stdin")), WriteStdout(io.BytesIO()))

    handle.with_input(ReadFile(source))

    assert handle.reader().read() == b"from file"
    handle.close()


def test_open_pair_builds_matching_handles(tmp_path: Path) -> None:
    handle = open_pair(Src.file(tmp_path / "a"), Dst.stdout())
    assert isinstance(handle.input, ReadFile)
    assert isinstance(handle.output, WriteStdout)

    handle = open_pair(Src.stdin(), Dst.file(tmp_path / "b.png"))
    assert isinstance(handle.input, ReadStdin)
    assert isinstance(handle.output, WriteFile)
    assert handle.extension() == "png"
    assert not (tmp_path / "b.png").exists()


class _NoSpaceRaw(io.RawIOBase):
    def writable(self) -> bool:
        return True

    def write(self, data) -> int:
        raise OSError(errno.ENOSPC, "No space left on device")


class _NoSpaceFile(WriteFile):
    def writer(self):
        if self._writer is None:
            self.dst.touch()
            self._writer = io.BufferedWriter(_NoSpaceRaw())
        return self._writer


def test_remove_unconditionally_survives_failed_flush(tmp_path: Path) -> None:
    target = tmp_path / "out.bin"
    handle = _NoSpaceFile(target)
    handle.writer().write(b"buffered")

    handle.remove_unconditionally()

    assert not target.exists()
    assert not handle.opened
