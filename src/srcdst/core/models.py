"""核心数据模型定义。"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Deque, Optional, Tuple


class PolicyError(str, Enum):
    """策略拒绝的原因。作为数据返回，而不是抛出异常。"""

    DISALLOW_FROM_STDIN = "disallow-from-stdin"
    DISALLOW_TO_STDOUT = "disallow-to-stdout"
    FORBID_AUTO_NAMED_FILE = "forbid-auto-named-file"
    FORBID_AUTO_NAMED_DIRECTORY = "forbid-auto-named-directory"
    INPLACE = "inplace"
    MANY_TO_ONE = "many-to-one"
    DESTINATION_DIRECTORY_MISSING = "destination-directory-missing"

    @property
    def message(self) -> str:
        return _POLICY_MESSAGES[self]

    def __str__(self) -> str:
        return self.message


_POLICY_MESSAGES = {
    PolicyError.DISALLOW_FROM_STDIN: "不允许从标准输入读取",
    PolicyError.DISALLOW_TO_STDOUT: "不允许写入标准输出",
    PolicyError.FORBID_AUTO_NAMED_FILE: "禁止自动生成基于时间命名的 DST 文件",
    PolicyError.FORBID_AUTO_NAMED_DIRECTORY: "禁止自动生成基于时间命名的 DST 目录",
    PolicyError.INPLACE: "源与目标相同，可能同时打开并截断同一文件",
    PolicyError.MANY_TO_ONE: "无法将多个文件写入同一个文件",
    PolicyError.DESTINATION_DIRECTORY_MISSING: "指定的 DST 目录不存在",
}


@dataclass(frozen=True, slots=True)
class Src:
    """具体的输入端点：标准输入（``path`` 为 None）或单个文件。"""

    path: Optional[Path] = None

    @classmethod
    def stdin(cls) -> "Src":
        return cls()

    @classmethod
    def file(cls, path: Path) -> "Src":
        return cls(Path(path))

    @property
    def is_stdio(self) -> bool:
        return self.path is None

    def __str__(self) -> str:
        return "-" if self.path is None else str(self.path)


@dataclass(frozen=True, slots=True)
class Dst:
    """具体的输出端点：标准输出（``path`` 为 None）或单个文件。"""

    path: Optional[Path] = None

    @classmethod
    def stdout(cls) -> "Dst":
        return cls()

    @classmethod
    def file(cls, path: Path) -> "Dst":
        return cls(Path(path))

    @property
    def is_stdio(self) -> bool:
        return self.path is None

    def __str__(self) -> str:
        return "-" if self.path is None else str(self.path)


PathPair = Tuple[Src, Dst]


class SourceKind(str, Enum):
    STDIN = "stdin"
    FILE = "file"
    FILE_LIST = "file-list"


class DestinationKind(str, Enum):
    STDOUT = "stdout"
    SINGLE = "single"


@dataclass(slots=True)
class ResolvedSource:
    """解析后的输入。

    ``FILE_LIST`` 时 ``files`` 按路径升序排列，由 PairStream 从头部逐个取出。
    """

    kind: SourceKind
    path: Optional[Path] = None
    files: Deque[Path] = field(default_factory=deque)


@dataclass(frozen=True, slots=True)
class ResolvedDestination:
    """解析后的输出。

    源为 ``FILE_LIST`` 时 ``path`` 是目录，各文件名在产出配对时再拼接。
    """

    kind: DestinationKind
    path: Optional[Path] = None


@dataclass(slots=True)
class FileOutcome:
    """记录单个配对的处理结果（用于报告/日志）。"""

    source: Src
    status: str
    destination: Optional[Dst] = None
    message: Optional[str] = None


@dataclass(slots=True)
class BatchResult:
    """批处理的产出。"""

    succeeded: list[FileOutcome]
    failed: list[FileOutcome]

    def all_outcomes(self) -> list[FileOutcome]:
        """返回所有结果记录，方便生成报告。"""

        return [*self.succeeded, *self.failed]


@dataclass(slots=True)
class ProgressUpdate:
    """逐个配对处理时的进度信息。

    ``outcome`` 是刚处理完的配对结果；批处理开始与结束时为 None。
    """

    total: int
    completed: int
    outcome: Optional[FileOutcome] = None
    message: Optional[str] = None

    @property
    def current(self) -> Optional[Src]:
        return self.outcome.source if self.outcome is not None else None

    @property
    def failed(self) -> bool:
        return self.outcome is not None and self.outcome.status != "processed"
