"""SRC/DST 分类与决策。

可能的组合（行：SRC，列：DST）::

    SRC => DST:   Stdout    File    Dir    NotProvided
    Stdin           1+2       1      1        1+3
    File              2       ✓      ✓          3
    Dir               ×       ×      ✓          4

1. ``allow_from_stdin``
2. ``allow_to_stdout``
3. ``auto_name_file``：未给出 DST 时，以源文件名加时间标记命名输出文件。
4. ``auto_name_dir``：未给出 DST 时，在源目录旁创建带时间标记的目录。
   用户指定名称的目录不会被自动创建（不存在时返回错误）。

文件系统故障以 ``OSError`` 抛出；策略拒绝以 :class:`PolicyError` 返回。
"""

from __future__ import annotations

import errno
import logging
from collections import deque
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from srcdst.core.config import PathArg, Policy, as_path, is_stdio
from srcdst.core.models import (
    DestinationKind,
    PolicyError,
    ResolvedDestination,
    ResolvedSource,
    SourceKind,
)
from srcdst.core.pairs import PairStream
from srcdst.core.scanner import scan_directory
from srcdst.core.timestamp import TimestampSource, default_timestamp

LOGGER = logging.getLogger(__name__)

STDIN_BASENAME = "stdin"


class _Shape(Enum):
    STDIO = "stdio"
    FILE = "file"
    DIR = "dir"
    NOT_EXIST = "not-exist"
    NOT_PROVIDED = "not-provided"


@dataclass(slots=True)
class _Raw:
    """分类阶段的中间结果，不对外暴露。"""

    shape: _Shape
    path: Optional[Path] = None


def _classify_source(src: PathArg) -> _Raw:
    if is_stdio(src):
        return _Raw(_Shape.STDIO)

    path = as_path(src)
    if not path.exists():
        raise FileNotFoundError(errno.ENOENT, f"SRC '{path}' 不存在", str(path))

    canonical = path.resolve(strict=True)
    if canonical.is_dir():
        return _Raw(_Shape.DIR, canonical)
    return _Raw(_Shape.FILE, canonical)


def _classify_destination(dst: Optional[PathArg]) -> _Raw:
    if dst is None:
        return _Raw(_Shape.NOT_PROVIDED)
    if is_stdio(dst):
        return _Raw(_Shape.STDIO)

    path = as_path(dst)
    if not path.exists():
        return _Raw(_Shape.NOT_EXIST, path)

    canonical = path.resolve(strict=True)
    if canonical.is_dir():
        return _Raw(_Shape.DIR, canonical)
    return _Raw(_Shape.FILE, canonical)


def _check_policy(policy: Policy, src: _Raw, dst: _Raw) -> Optional[PolicyError]:
    """规则 1-4 以及源与目标相同的检查。规则 5 会直接修改 ``dst``。"""

    if src.shape is _Shape.STDIO and not policy.allow_from_stdin:
        return PolicyError.DISALLOW_FROM_STDIN
    if dst.shape is _Shape.STDIO and not policy.allow_to_stdout:
        return PolicyError.DISALLOW_TO_STDOUT

    if dst.shape is _Shape.NOT_PROVIDED:
        if src.shape is _Shape.DIR:
            if not policy.auto_name_dir:
                return PolicyError.FORBID_AUTO_NAMED_DIRECTORY
        elif not policy.auto_name_file:
            return PolicyError.FORBID_AUTO_NAMED_FILE

    if dst.shape is _Shape.DIR:
        assert dst.path is not None
        if src.shape is _Shape.FILE and dst.path == src.path.parent:
            # DST 目录就是 SRC 文件所在目录，同名写入会覆盖源文件，改为自动命名
            LOGGER.debug("DST 目录与 SRC 所在目录相同，改为自动命名：%s", dst.path)
            dst.shape = _Shape.NOT_PROVIDED
        elif src.shape is _Shape.DIR and dst.path == src.path and not policy.allow_inplace:
            return PolicyError.INPLACE

    if (
        dst.shape is _Shape.FILE
        and src.shape is _Shape.FILE
        and dst.path == src.path
        and not policy.allow_inplace
    ):
        return PolicyError.INPLACE

    return None


def _auto_named_file(policy: Policy, parent: Path, basename: str, timestamp: TimestampSource) -> Path:
    # input.png => input-<ts>.png
    # input.jpg => input.jpg-<ts>.png
    stem = basename
    suffix = Path(basename).suffix
    if suffix and suffix[1:] == policy.default_extension:
        stem = basename[: -len(suffix)]

    name = f"{stem}-{timestamp()}"
    if policy.default_extension:
        name = f"{name}.{policy.default_extension}"
    return parent / name


def _auto_named_dir(src_dir: Path, timestamp: TimestampSource) -> Path:
    # ./inputs => ./inputs-<ts>
    parent = src_dir.parent
    if parent == src_dir:
        raise OSError(errno.ENOENT, f"无法获取 {src_dir} 的父目录", str(src_dir))
    return parent / f"{src_dir.name}-{timestamp()}"


def _resolve_single(policy: Policy, src: _Raw, dst: _Raw, timestamp: TimestampSource) -> PairStream:
    if src.shape is _Shape.STDIO:
        source = ResolvedSource(SourceKind.STDIN)
        basename = STDIN_BASENAME
    else:
        assert src.path is not None
        source = ResolvedSource(SourceKind.FILE, src.path)
        basename = src.path.name

    if dst.shape is _Shape.STDIO:
        return PairStream(source, ResolvedDestination(DestinationKind.STDOUT))

    if dst.shape in (_Shape.FILE, _Shape.NOT_EXIST):
        target = dst.path
    elif dst.shape is _Shape.DIR:
        target = dst.path / basename
    else:
        if dst.path is not None:
            parent = dst.path
        elif src.path is not None:
            parent = src.path.parent
        else:
            parent = Path.cwd().resolve()
        target = _auto_named_file(policy, parent, basename, timestamp)
        LOGGER.info("自动命名输出文件：%s", target)

    return PairStream(source, ResolvedDestination(DestinationKind.SINGLE, target))


def _resolve_directory(src: _Raw, dst: _Raw, timestamp: TimestampSource) -> Union[PairStream, PolicyError]:
    assert src.path is not None

    if dst.shape in (_Shape.STDIO, _Shape.FILE):
        return PolicyError.MANY_TO_ONE
    if dst.shape is _Shape.NOT_EXIST:
        return PolicyError.DESTINATION_DIRECTORY_MISSING

    needs_directory_creation = False
    if dst.shape is _Shape.DIR:
        target = dst.path
    else:
        target = _auto_named_dir(src.path, timestamp)
        needs_directory_creation = True
        LOGGER.info("自动命名输出目录：%s", target)

    files = scan_directory(src.path)
    LOGGER.debug("在 %s 中发现 %d 个文件", src.path, len(files))
    return PairStream(
        ResolvedSource(SourceKind.FILE_LIST, src.path, deque(files)),
        ResolvedDestination(DestinationKind.SINGLE, target),
        needs_directory_creation=needs_directory_creation,
    )


def resolve(
    policy: Policy,
    src: PathArg,
    dst: Optional[PathArg] = None,
    *,
    timestamp: Optional[TimestampSource] = None,
) -> Union[PairStream, PolicyError]:
    """将原始的 SRC/DST 路径解析为配对序列。

    单个连字符 ``-`` 表示标准输入/输出。返回 :class:`PairStream`，
    或者在组合被策略拒绝时返回 :class:`PolicyError`。
    路径不存在、无法规范化等文件系统故障直接抛出 ``OSError``。
    """

    timestamp = timestamp or default_timestamp

    raw_src = _classify_source(src)
    raw_dst = _classify_destination(dst)
    LOGGER.debug(
        "SRC 分类为 %s，DST 分类为 %s",
        raw_src.shape.value,
        raw_dst.shape.value,
    )

    error = _check_policy(policy, raw_src, raw_dst)
    if error is not None:
        LOGGER.debug("策略拒绝：%s", error.value)
        return error

    if raw_src.shape is _Shape.DIR:
        return _resolve_directory(raw_src, raw_dst, timestamp)
    return _resolve_single(policy, raw_src, raw_dst, timestamp)


__all__ = ["resolve", "STDIN_BASENAME"]
