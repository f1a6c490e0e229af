"""SRC/DST 配对的惰性序列。"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator, Optional

from srcdst.core.models import (
    DestinationKind,
    Dst,
    PathPair,
    ResolvedDestination,
    ResolvedSource,
    SourceKind,
    Src,
)

LOGGER = logging.getLogger(__name__)


class PairStream:
    """只能向前遍历一次的 (Src, Dst) 序列。

    由 :func:`srcdst.core.resolver.resolve` 创建，调用方独占使用，不可重入。
    若目标目录是自动命名生成的，**必须在取出第一个配对之前调用**
    :meth:`create_destination_directory`。
    """

    def __init__(
        self,
        source: ResolvedSource,
        destination: ResolvedDestination,
        *,
        needs_directory_creation: bool = False,
    ) -> None:
        self._source = source
        self._destination = destination
        self._needs_directory_creation = needs_directory_creation
        self._exhausted = False

    def __repr__(self) -> str:
        return (
            f"PairStream(source={self._source!r}, destination={self._destination!r}, "
            f"needs_directory_creation={self._needs_directory_creation!r}, exhausted={self._exhausted!r})"
        )

    @property
    def exhausted(self) -> bool:
        return self._exhausted

    @property
    def needs_directory_creation(self) -> bool:
        return self._needs_directory_creation

    @property
    def destination(self) -> Optional[Path]:
        """输出路径；批处理时为输出目录，标准输出时为 None。"""

        return self._destination.path

    def is_batch(self) -> bool:
        return self._source.kind is SourceKind.FILE_LIST

    def remaining(self) -> int:
        """尚未产出的配对数量。"""

        if self._exhausted:
            return 0
        if self.is_batch():
            return len(self._source.files)
        return 1

    def create_destination_directory(self) -> None:
        """创建自动命名的输出目录；未走自动命名路径时什么也不做。

        只创建这一层目录：已存在或父目录缺失时抛出 ``OSError``。
        """

        if not self._needs_directory_creation:
            return
        directory = self._destination.path
        assert directory is not None
        directory.mkdir()
        self._needs_directory_creation = False
        LOGGER.info("已创建输出目录：%s", directory)

    def __iter__(self) -> Iterator[PathPair]:
        return self

    def __next__(self) -> PathPair:
        if self._exhausted:
            raise StopIteration

        source = self._source
        destination = self._destination

        if source.kind is SourceKind.FILE_LIST:
            # 目标必然是目录，逐个拼接文件名
            if not source.files:
                self._exhausted = True
                raise StopIteration
            assert destination.path is not None
            path = source.files.popleft()
            if not source.files:
                self._exhausted = True
            return Src.file(path), Dst.file(destination.path / path.name)

        self._exhausted = True
        src = Src.stdin() if source.kind is SourceKind.STDIN else Src.file(source.path)
        if destination.kind is DestinationKind.STDOUT:
            return src, Dst.stdout()
        return src, Dst.file(destination.path)
