"""日志工具。"""

from __future__ import annotations

import logging
import sys


def setup_logging(level: int = logging.INFO) -> None:
    """初始化项目日志配置。

    输出到标准错误，标准输出可能被用作 DST。重复调用时以最后一次为准。
    """

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
        force=True,
    )
