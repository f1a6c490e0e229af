"""报告生成工具。"""

from __future__ import annotations

import csv
from pathlib import Path
from typing import Iterable

from srcdst.core.models import FileOutcome

HEADER = ["source", "destination", "status", "message"]


def write_csv_report(outcomes: Iterable[FileOutcome], report_path: Path) -> Path:
    """将处理结果写入 CSV 报告。标准输入/输出记为 ``-``。"""

    with report_path.open("w", newline="", encoding="utf-8") as handle:
        writer = csv.writer(handle)
        writer.writerow(HEADER)
        for record in outcomes:
            writer.writerow(
                [
                    str(record.source),
                    str(record.destination) if record.destination else "",
                    record.status,
                    record.message or "",
                ]
            )
    return report_path
