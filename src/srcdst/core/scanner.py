"""目录的浅层扫描。"""

from __future__ import annotations

import logging
import os
from pathlib import Path

LOGGER = logging.getLogger(__name__)


def scan_directory(path: Path) -> list[Path]:
    """列出目录下的直接子文件，按路径升序返回。

    不递归；子目录、符号链接与特殊文件都会被跳过。
    """

    collected: list[Path] = []
    with os.scandir(path) as entries:
        for entry in entries:
            if entry.is_file(follow_symlinks=False):
                collected.append(Path(entry.path))
            else:
                LOGGER.debug("跳过非普通文件：%s", entry.path)

    collected.sort()
    return collected
