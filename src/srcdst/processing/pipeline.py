"""处理流水线：创建输出目录、逐个取出配对并执行变换。"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from srcdst.core.models import BatchResult, FileOutcome, ProgressUpdate
from srcdst.core.pairs import PairStream
from srcdst.processing.transforms import Transform
from srcdst.processing.worker import run_pair

LOGGER = logging.getLogger(__name__)


ProgressCallback = Optional[Callable[[ProgressUpdate], None]]


def process_pairs(
    pairs: PairStream,
    transform: Transform,
    progress_callback: ProgressCallback = None,
    *,
    keep_partial: bool = False,
    stop_on_error: bool = False,
) -> BatchResult:
    """顺序处理 PairStream 中的所有配对。

    自动命名的输出目录在取出第一个配对之前创建；创建失败直接抛出 ``OSError``。
    """

    pairs.create_destination_directory()

    total = pairs.remaining()
    LOGGER.info("共 %d 个待处理配对", total)

    successes: list[FileOutcome] = []
    failed: list[FileOutcome] = []
    completed = 0
    _emit_progress(progress_callback, completed, total, "开始执行处理任务")

    for pair in pairs:
        src, dst = pair
        outcome = run_pair(pair, transform, keep_partial=keep_partial)
        completed += 1
        if outcome.status == "processed":
            successes.append(outcome)
            _emit_progress(progress_callback, completed, total, f"完成 {src} -> {outcome.destination}", outcome)
            continue

        failed.append(outcome)
        LOGGER.error("处理失败：%s -> %s（%s）", src, dst, outcome.message)
        _emit_progress(progress_callback, completed, total, f"失败 {src}", outcome)
        if stop_on_error:
            break

    _emit_progress(progress_callback, completed, total, "处理完成")
    return BatchResult(succeeded=successes, failed=failed)


def _emit_progress(
    callback: ProgressCallback,
    completed: int,
    total: int,
    message: Optional[str] = None,
    outcome: Optional[FileOutcome] = None,
) -> None:
    if not callback:
        return
    callback(ProgressUpdate(total=total, completed=completed, outcome=outcome, message=message))
