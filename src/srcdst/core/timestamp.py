"""自动命名使用的时间标记。"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Callable, Optional, Protocol

TIMESTAMP_FORMAT = "%Y%m%d-%H%M%S-%f"


class TimestampSource(Protocol):
    """返回一个只包含文件名安全字符、能唯一标识“当前时刻”的字符串。"""

    def __call__(self) -> str:  # pragma: no cover - interface
        ...


class MonotonicTimestamp:
    """基于本地时间的时间标记，同一进程内严格递增。

    时钟未前进时顺延一微秒，保证连续两次调用得到不同的值。
    """

    def __init__(self, clock: Callable[[], datetime] = datetime.now) -> None:
        self._clock = clock
        self._last: Optional[datetime] = None

    def __call__(self) -> str:
        now = self._clock()
        if self._last is not None and now <= self._last:
            now = self._last + timedelta(microseconds=1)
        self._last = now
        return now.strftime(TIMESTAMP_FORMAT)


default_timestamp = MonotonicTimestamp()
