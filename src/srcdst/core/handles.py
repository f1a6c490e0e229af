"""按配对打开的输入/输出句柄。

文件句柄在第一次调用 ``reader()`` / ``writer()`` 时才真正打开并缓存；
标准流句柄没有文件系统身份，重命名与删除一律抛出
:class:`UnsupportedOperationError`。
"""

from __future__ import annotations

import logging
import sys
from abc import ABC, abstractmethod
from pathlib import Path
from typing import BinaryIO, Optional

from srcdst.core.exceptions import HandleStateError, UnsupportedOperationError
from srcdst.core.models import Dst, Src

LOGGER = logging.getLogger(__name__)


class Readable(ABC):
    """可读端点。"""

    @abstractmethod
    def reader(self) -> BinaryIO:
        """返回字节读取流，最多打开一次；打开失败抛出 ``OSError``。"""

    def close(self) -> None:
        pass


class Writable(ABC):
    """可写端点。文件系统相关操作默认不支持。"""

    @abstractmethod
    def writer(self) -> BinaryIO:
        """返回字节写入流，最多打开一次。"""

    def extension(self) -> Optional[str]:
        return None

    def rename(self, file_name: str) -> None:
        """在写入器创建之前修改目标文件名。"""

        raise UnsupportedOperationError(f"{type(self).__name__} 不支持重命名")

    def remove_if_empty(self) -> bool:
        """仅当目标文件为空时删除，返回是否删除。"""

        raise UnsupportedOperationError(f"{type(self).__name__} 不支持删除")

    def remove_unconditionally(self) -> None:
        """无论内容如何都删除目标文件。"""

        raise UnsupportedOperationError(f"{type(self).__name__} 不支持删除")

    def close(self) -> None:
        pass


class ReadFile(Readable):
    def __init__(self, src: Path) -> None:
        self.src = Path(src)
        self._reader: Optional[BinaryIO] = None

    def __repr__(self) -> str:
        return f"ReadFile({str(self.src)!r})"

    def reader(self) -> BinaryIO:
        if self._reader is None:
            self._reader = self.src.open("rb")
        return self._reader

    def close(self) -> None:
        if self._reader is not None:
            self._reader.close()
            self._reader = None


class WriteFile(Writable):
    """写入单个文件；打开即创建或截断。"""

    def __init__(self, dst: Path) -> None:
        self.dst = Path(dst)
        self._writer: Optional[BinaryIO] = None
        self._created = False

    def __repr__(self) -> str:
        return f"WriteFile({str(self.dst)!r})"

    @property
    def opened(self) -> bool:
        return self._writer is not None

    @property
    def created(self) -> bool:
        """写入器是否曾被打开（即目标文件已被创建或截断）。"""

        return self._created

    def writer(self) -> BinaryIO:
        if self._writer is None:
            self._writer = self.dst.open("wb")
            self._created = True
        return self._writer

    def extension(self) -> Optional[str]:
        """不带点的扩展名；没有扩展名时为空字符串。"""

        return self.dst.suffix[1:]

    def rename(self, file_name: str) -> None:
        if self._writer is not None:
            raise HandleStateError(f"写入器已打开，无法重命名: {self.dst}")
        renamed = self.dst.with_name(file_name)
        LOGGER.debug("目标重命名：%s -> %s", self.dst.name, renamed.name)
        self.dst = renamed

    def remove_if_empty(self) -> bool:
        if self._writer is not None:
            self._writer.flush()
        if self.dst.stat().st_size != 0:
            return False
        self.remove_unconditionally()
        return True

    def remove_unconditionally(self) -> None:
        # 先释放句柄，部分平台无法删除已打开的文件
        try:
            self.close()
        except OSError as exc:
            # 刷新缓冲失败时底层文件已关闭，照常删除
            LOGGER.warning("关闭目标文件失败：%s", exc)
        self.dst.unlink()
        LOGGER.debug("已删除目标文件：%s", self.dst)

    def close(self) -> None:
        if self._writer is not None:
            writer, self._writer = self._writer, None
            writer.close()


class ReadStdin(Readable):
    def __init__(self, stream: Optional[BinaryIO] = None) -> None:
        self._stream = stream

    def __repr__(self) -> str:
        return "ReadStdin()"

    def reader(self) -> BinaryIO:
        if self._stream is None:
            self._stream = sys.stdin.buffer
        return self._stream


class WriteStdout(Writable):
    def __init__(self, stream: Optional[BinaryIO] = None) -> None:
        self._stream = stream

    def __repr__(self) -> str:
        return "WriteStdout()"

    def writer(self) -> BinaryIO:
        if self._stream is None:
            self._stream = sys.stdout.buffer
        return self._stream

    def close(self) -> None:
        # 进程的标准输出不能关闭，只刷新
        if self._stream is not None:
            self._stream.flush()


class EndpointIO(Readable, Writable):
    """输入与输出的组合，两个槽位都可以在运行时单独替换。"""

    def __init__(self, source: Readable, sink: Writable) -> None:
        self._input = source
        self._output = sink

    def __repr__(self) -> str:
        return f"EndpointIO({self._input!r}, {self._output!r})"

    def __enter__(self) -> "EndpointIO":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @property
    def input(self) -> Readable:
        return self._input

    @property
    def output(self) -> Writable:
        return self._output

    def with_input(self, source: Readable) -> None:
        self._input.close()
        self._input = source

    def with_output(self, sink: Writable) -> None:
        self._output.close()
        self._output = sink

    def reader(self) -> BinaryIO:
        return self._input.reader()

    def writer(self) -> BinaryIO:
        return self._output.writer()

    def extension(self) -> Optional[str]:
        return self._output.extension()

    def rename(self, file_name: str) -> None:
        self._output.rename(file_name)

    def remove_if_empty(self) -> bool:
        return self._output.remove_if_empty()

    def remove_unconditionally(self) -> None:
        self._output.remove_unconditionally()

    def close(self) -> None:
        try:
            self._input.close()
        finally:
            self._output.close()


def open_pair(src: Src, dst: Dst) -> EndpointIO:
    """为一个具体配对构造句柄。此时并不会打开任何文件。"""

    source: Readable = ReadStdin() if src.is_stdio else ReadFile(src.path)
    sink: Writable = WriteStdout() if dst.is_stdio else WriteFile(dst.path)
    return EndpointIO(source, sink)
