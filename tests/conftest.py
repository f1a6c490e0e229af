"""测试公共夹具。"""

from __future__ import annotations

from itertools import count

import pytest


class CountingTimestamp:
    """可预测的时间标记：T0001、T0002……"""

    def __init__(self) -> None:
        self._counter = count(1)
        self.issued: list[str] = []

    def __call__(self) -> str:
        value = f"T{next(self._counter):04d}"
        self.issued.append(value)
        return value


@pytest.fixture()
def timestamp() -> CountingTimestamp:
    return CountingTimestamp()
