"""单个配对的处理单元。"""

from __future__ import annotations

import logging
from typing import Optional

from srcdst.core.exceptions import UnsupportedOperationError
from srcdst.core.handles import EndpointIO, WriteFile, open_pair
from srcdst.core.models import Dst, FileOutcome, PathPair
from srcdst.processing.transforms import Transform

LOGGER = logging.getLogger(__name__)


def run_pair(pair: PathPair, transform: Transform, *, keep_partial: bool = False) -> FileOutcome:
    """打开句柄、执行变换并关闭；失败时清理目标文件。

    ``keep_partial`` 为真时只删除空的目标文件，保留已写出的部分结果。
    """

    src, dst = pair
    handle = open_pair(src, dst)

    try:
        transform(handle)
        handle.close()
    except Exception as exc:  # noqa: BLE001
        LOGGER.debug("处理失败 %s -> %s: %s", src, dst, exc)
        note = _cleanup(handle, keep_partial)
        message = str(exc) if note is None else f"{exc}; {note}"
        return FileOutcome(source=src, status=_error_status(exc), destination=dst, message=message)

    final_dst = dst
    if isinstance(handle.output, WriteFile):
        # 变换过程中目标可能被重命名
        final_dst = Dst.file(handle.output.dst)
    return FileOutcome(source=src, status="processed", destination=final_dst)


def _cleanup(handle: EndpointIO, keep_partial: bool) -> Optional[str]:
    try:
        handle.input.close()
    except OSError as exc:
        LOGGER.warning("关闭输入失败：%s", exc)

    output = handle.output
    if isinstance(output, WriteFile) and not output.created:
        # 从未写入，已存在的同名文件不能删除
        return None

    try:
        if keep_partial:
            if handle.remove_if_empty():
                return "已删除空的输出文件"
            handle.close()
            return "保留部分输出"
        handle.remove_unconditionally()
        return "已删除输出文件"
    except UnsupportedOperationError:
        # 标准输出无需清理
        handle.close()
        return None
    except FileNotFoundError:
        # 目标文件已不存在
        handle.close()
        return None
    except OSError as exc:
        LOGGER.error("清理输出失败：%s", exc)
        return f"清理输出失败: {exc}"


def _error_status(exc: BaseException) -> str:
    if isinstance(exc, OSError):
        return "error-io"
    return "error-transform"
