"""源/目标解析策略的配置模型。"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import TYPE_CHECKING, Optional, Union

from srcdst.core.exceptions import InvalidConfigurationError

if TYPE_CHECKING:
    from srcdst.core.models import PolicyError
    from srcdst.core.pairs import PairStream
    from srcdst.core.timestamp import TimestampSource

PathArg = Union[str, os.PathLike]


@dataclass(frozen=True, slots=True)
class Policy:
    """允许哪些输入/输出形态，以及自动命名时使用的默认扩展名。

    - ``allow_from_stdin`` / ``allow_to_stdout``：是否接受 ``-`` 作为路径。
    - ``auto_name_file`` / ``auto_name_dir``：未给出 DST 时是否自动生成基于时间的名称。
    - ``allow_inplace``：默认禁止，源与目标为同一目录时可能同时打开并截断同一文件。
    """

    default_extension: str
    allow_from_stdin: bool = True
    allow_to_stdout: bool = True
    auto_name_file: bool = True
    auto_name_dir: bool = True
    allow_inplace: bool = False

    def __post_init__(self) -> None:
        extension = self.default_extension
        if extension.startswith("."):
            extension = extension[1:]
        if os.sep in extension or (os.altsep and os.altsep in extension):
            raise InvalidConfigurationError(f"默认扩展名不能包含路径分隔符: {self.default_extension!r}")
        object.__setattr__(self, "default_extension", extension)

    def allowing_inplace(self) -> "Policy":
        """返回允许原地处理的副本。"""

        return replace(self, allow_inplace=True)

    def resolve(
        self,
        src: PathArg,
        dst: Optional[PathArg] = None,
        *,
        timestamp: Optional["TimestampSource"] = None,
    ) -> Union["PairStream", "PolicyError"]:
        """按当前策略解析 SRC/DST，参见 :func:`srcdst.core.resolver.resolve`。"""

        from srcdst.core.resolver import resolve

        return resolve(self, src, dst, timestamp=timestamp)


def is_stdio(value: PathArg) -> bool:
    """单个连字符 ``-`` 表示标准输入/输出，在任何文件系统访问之前识别。"""

    return os.fspath(value) == "-"


def as_path(value: PathArg) -> Path:
    return Path(os.fspath(value))
