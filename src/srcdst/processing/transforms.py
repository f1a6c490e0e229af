"""逐个配对执行的内容变换。"""

from __future__ import annotations

import logging
import shutil
from typing import BinaryIO, Callable, Optional

from srcdst.core.handles import EndpointIO, ReadFile, WriteFile

LOGGER = logging.getLogger(__name__)

Transform = Callable[[EndpointIO], None]

SNIFF_LENGTH = 16

# (偏移, 魔数, 扩展名)
MAGIC_NUMBERS = (
    (0, b"\x89PNG\r\n\x1a\n", "png"),
    (0, b"\xff\xd8\xff", "jpg"),
    (0, b"GIF87a", "gif"),
    (0, b"GIF89a", "gif"),
    (8, b"WEBP", "webp"),
    (0, b"II*\x00", "tif"),
    (0, b"MM\x00*", "tif"),
    (0, b"%PDF", "pdf"),
    (0, b"PK\x03\x04", "zip"),
    (0, b"\x1f\x8b", "gz"),
)

EQUIVALENT_EXTENSIONS = {
    "jpeg": "jpg",
    "tiff": "tif",
}

KNOWN_EXTENSIONS = frozenset(extension for _, _, extension in MAGIC_NUMBERS)


def sniff_extension(head: bytes) -> Optional[str]:
    """根据文件头判断真实格式，无法识别时返回 None。"""

    for offset, magic, extension in MAGIC_NUMBERS:
        if head[offset : offset + len(magic)] == magic:
            return extension
    return None


def _peek(stream: BinaryIO) -> bytes:
    peek = getattr(stream, "peek", None)
    if peek is None:
        return b""
    return peek(SNIFF_LENGTH)[:SNIFF_LENGTH]


def _normalize(extension: str) -> str:
    lowered = extension.lower()
    return EQUIVALENT_EXTENSIONS.get(lowered, lowered)


def copy_stream(handle: EndpointIO) -> None:
    """原样复制字节。"""

    shutil.copyfileobj(handle.reader(), handle.writer())


def copy_with_sniffed_extension(handle: EndpointIO) -> None:
    """复制字节；若目标扩展名与输入的真实格式不符，在写入前修正。

    只有目标带有可识别的扩展名时才替换它，否则在文件名末尾追加。
    修正后的名称已存在（包括恰好是源文件）时保留原名。
    """

    reader = handle.reader()
    output = handle.output
    if isinstance(output, WriteFile) and not output.opened:
        sniffed = sniff_extension(_peek(reader))
        if sniffed is not None:
            _rename_to_sniffed(handle, output, sniffed)

    shutil.copyfileobj(reader, handle.writer())


def _rename_to_sniffed(handle: EndpointIO, output: WriteFile, sniffed: str) -> None:
    current = output.extension() or ""
    if _normalize(current) == sniffed:
        return

    name = output.dst.name
    if _normalize(current) in KNOWN_EXTENSIONS:
        name = name[: -(len(current) + 1)]
    renamed = output.dst.with_name(f"{name}.{sniffed}")

    source = handle.input
    if renamed.exists() or (isinstance(source, ReadFile) and renamed.resolve() == source.src.resolve()):
        LOGGER.warning("修正后的目标已存在，保留原名：%s", renamed)
        return

    LOGGER.info("按文件头修正扩展名：%s -> %s", output.dst.name, renamed.name)
    handle.rename(renamed.name)
