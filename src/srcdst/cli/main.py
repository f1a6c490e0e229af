"""命令行入口。"""

from __future__ import annotations

import logging
from functools import partial
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.table import Table

from srcdst.core.config import Policy
from srcdst.core.exceptions import InvalidConfigurationError
from srcdst.core.models import PolicyError, ProgressUpdate
from srcdst.core.pairs import PairStream
from srcdst.core.report import write_csv_report
from srcdst.core.resolver import resolve
from srcdst.processing.image_codec import transcode_image
from srcdst.processing.pipeline import process_pairs
from srcdst.processing.transforms import Transform, copy_with_sniffed_extension
from srcdst.utils.logging import setup_logging

app = typer.Typer(help="解析 SRC/DST 并逐个处理文件。单个连字符 - 表示标准输入/输出。")

console = Console()
err_console = Console(stderr=True)

EXIT_FAILURE = 1
EXIT_POLICY = 2

SRC_ARGUMENT = typer.Argument(..., help="源文件或目录，- 表示标准输入")
DST_ARGUMENT = typer.Argument(None, help="目标文件或目录，- 表示标准输出；省略时自动命名")
STDIN_OPTION = typer.Option(True, "--stdin/--no-stdin", help="是否允许从标准输入读取")
STDOUT_OPTION = typer.Option(True, "--stdout/--no-stdout", help="是否允许写入标准输出")
AUTO_FILE_OPTION = typer.Option(True, "--auto-file/--no-auto-file", help="未给出 DST 时是否自动命名输出文件")
AUTO_DIR_OPTION = typer.Option(True, "--auto-dir/--no-auto-dir", help="未给出 DST 时是否自动命名输出目录")
INPLACE_OPTION = typer.Option(False, "--inplace", help="允许源目录与目标目录相同")
KEEP_PARTIAL_OPTION = typer.Option(False, "--keep-partial", help="失败时保留非空的部分输出")
REPORT_OPTION = typer.Option(None, "--report", help="将处理结果写入 CSV 报告")
VERBOSE_OPTION = typer.Option(False, "--verbose", "-v", help="输出调试日志")


def _build_policy(
    ext: str,
    allow_stdin: bool,
    allow_stdout: bool,
    auto_file: bool,
    auto_dir: bool,
    inplace: bool,
) -> Policy:
    try:
        return Policy(
            default_extension=ext,
            allow_from_stdin=allow_stdin,
            allow_to_stdout=allow_stdout,
            auto_name_file=auto_file,
            auto_name_dir=auto_dir,
            allow_inplace=inplace,
        )
    except InvalidConfigurationError as exc:
        raise typer.BadParameter(str(exc), param_hint="--ext") from exc


def _resolve_or_exit(policy: Policy, src: str, dst: Optional[str]) -> PairStream:
    try:
        result = resolve(policy, src, dst)
    except OSError as exc:
        err_console.print(f"[red]无法解析路径[/red]: {exc}")
        raise typer.Exit(EXIT_FAILURE) from exc

    if isinstance(result, PolicyError):
        err_console.print(f"[red]参数组合被拒绝[/red]: {result.message}")
        raise typer.Exit(EXIT_POLICY)
    return result


def _build_progress_callback(progress: Progress):
    task_id: Optional[int] = None

    def callback(update: ProgressUpdate) -> None:
        nonlocal task_id
        if update.total == 0:
            return
        if task_id is None:
            task_id = progress.add_task("处理文件", total=update.total)
        description = "处理文件"
        if update.current is not None and update.current.path is not None:
            description = update.current.path.name
        if update.failed:
            description = f"[red]{description}[/red]"
        progress.update(task_id, completed=update.completed, description=description)

    return callback


def _run(pairs: PairStream, transform: Transform, keep_partial: bool, report: Optional[Path]) -> None:
    try:
        if pairs.is_batch():
            progress = Progress(
                SpinnerColumn(),
                TextColumn("[bold blue]{task.description}"),
                BarColumn(),
                TimeElapsedColumn(),
                console=err_console,
            )
            with progress:
                result = process_pairs(
                    pairs,
                    transform,
                    progress_callback=_build_progress_callback(progress),
                    keep_partial=keep_partial,
                )
        else:
            result = process_pairs(pairs, transform, keep_partial=keep_partial)
    except OSError as exc:
        err_console.print(f"[red]无法创建输出目录[/red]: {exc}")
        raise typer.Exit(EXIT_FAILURE) from exc

    if report is not None:
        write_csv_report(result.all_outcomes(), report)

    for outcome in result.failed:
        err_console.print(f"[red]失败[/red] {outcome.source}: {outcome.message}")
    if pairs.is_batch():
        err_console.print(f"处理完成：成功 {len(result.succeeded)} 个，失败 {len(result.failed)} 个。")
    if result.failed:
        raise typer.Exit(EXIT_FAILURE)


@app.command("plan")
def plan_cli(  # noqa: PLR0913
    src: str = SRC_ARGUMENT,
    dst: Optional[str] = DST_ARGUMENT,
    ext: str = typer.Option("", "--ext", help="自动命名时使用的扩展名"),
    allow_stdin: bool = STDIN_OPTION,
    allow_stdout: bool = STDOUT_OPTION,
    auto_file: bool = AUTO_FILE_OPTION,
    auto_dir: bool = AUTO_DIR_OPTION,
    inplace: bool = INPLACE_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """只解析并列出配对，不读写任何文件。"""

    setup_logging(logging.DEBUG if verbose else logging.WARNING)
    policy = _build_policy(ext, allow_stdin, allow_stdout, auto_file, auto_dir, inplace)
    pairs = _resolve_or_exit(policy, src, dst)

    table = Table(title="SRC => DST")
    table.add_column("SRC")
    table.add_column("DST")
    for pair_src, pair_dst in pairs:
        table.add_row(str(pair_src), str(pair_dst))
    console.print(table)
    if pairs.needs_directory_creation:
        console.print(f"将创建输出目录：{pairs.destination}")


@app.command("copy")
def copy_cli(  # noqa: PLR0913
    src: str = SRC_ARGUMENT,
    dst: Optional[str] = DST_ARGUMENT,
    ext: str = typer.Option("", "--ext", help="自动命名时使用的扩展名"),
    allow_stdin: bool = STDIN_OPTION,
    allow_stdout: bool = STDOUT_OPTION,
    auto_file: bool = AUTO_FILE_OPTION,
    auto_dir: bool = AUTO_DIR_OPTION,
    inplace: bool = INPLACE_OPTION,
    keep_partial: bool = KEEP_PARTIAL_OPTION,
    report: Optional[Path] = REPORT_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """复制文件；目标扩展名与文件头不符时自动修正。"""

    setup_logging(logging.DEBUG if verbose else logging.INFO)
    policy = _build_policy(ext, allow_stdin, allow_stdout, auto_file, auto_dir, inplace)
    pairs = _resolve_or_exit(policy, src, dst)
    _run(pairs, copy_with_sniffed_extension, keep_partial, report)


@app.command("convert")
def convert_cli(  # noqa: PLR0913
    src: str = SRC_ARGUMENT,
    dst: Optional[str] = DST_ARGUMENT,
    ext: str = typer.Option("png", "--ext", help="输出图片格式，同时用于自动命名"),
    allow_stdin: bool = STDIN_OPTION,
    allow_stdout: bool = STDOUT_OPTION,
    auto_file: bool = AUTO_FILE_OPTION,
    auto_dir: bool = AUTO_DIR_OPTION,
    inplace: bool = INPLACE_OPTION,
    keep_partial: bool = KEEP_PARTIAL_OPTION,
    report: Optional[Path] = REPORT_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """将图片重新编码为目标扩展名对应的格式。"""

    setup_logging(logging.DEBUG if verbose else logging.INFO)
    policy = _build_policy(ext, allow_stdin, allow_stdout, auto_file, auto_dir, inplace)
    pairs = _resolve_or_exit(policy, src, dst)
    transform = partial(transcode_image, fallback_extension=policy.default_extension or "png")
    _run(pairs, transform, keep_partial, report)


if __name__ == "__main__":
    app()
