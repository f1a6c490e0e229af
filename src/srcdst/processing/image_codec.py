"""图片解码与重新编码。"""

from __future__ import annotations

import logging
from typing import BinaryIO, Optional

from PIL import Image, ImageOps, UnidentifiedImageError

from srcdst.core.exceptions import SrcDstError
from srcdst.core.handles import EndpointIO

LOGGER = logging.getLogger(__name__)

SUPPORTED_FORMATS = {
    "jpg": "JPEG",
    "jpeg": "JPEG",
    "png": "PNG",
    "webp": "WEBP",
    "bmp": "BMP",
    "gif": "GIF",
    "tif": "TIFF",
    "tiff": "TIFF",
}


class ImageLoadingError(SrcDstError):
    """图片加载失败。"""


class ImageWriteError(SrcDstError):
    """输出写入失败。"""


def load_image(stream: BinaryIO) -> Image.Image:
    """从字节流加载单张图片并执行 EXIF 旋转。

    返回值为新的 Image 对象，调用者负责关闭。
    """

    try:
        with Image.open(stream) as img:
            img.load()
            # EXIF Orientation 校正
            return ImageOps.exif_transpose(img).copy()
    except (UnidentifiedImageError, OSError) as exc:
        LOGGER.debug("无法识别图像数据: %s", exc)
        raise ImageLoadingError("无法加载图像") from exc


def save_image(image: Image.Image, stream: BinaryIO, image_format: str) -> None:
    """按指定格式将 PIL Image 写入字节流。"""

    save_params = {}
    image_to_save = image
    if image_format == "JPEG":
        save_params.update(quality=95, subsampling=1)
        if image.mode != "RGB":
            image_to_save = image.convert("RGB")
    elif image_format == "PNG":
        save_params.update(optimize=True)
        if image.mode not in {"RGB", "RGBA", "L", "LA", "P"}:
            image_to_save = image.convert("RGBA")

    try:
        image_to_save.save(stream, format=image_format, **save_params)
    except OSError as exc:
        raise ImageWriteError(f"写入图像失败: {exc}") from exc
    finally:
        if image_to_save is not image:
            image_to_save.close()


def format_for_extension(extension: Optional[str]) -> Optional[str]:
    if not extension:
        return None
    return SUPPORTED_FORMATS.get(extension.lower())


def transcode_image(handle: EndpointIO, fallback_extension: str = "png") -> None:
    """读取输入图片，按目标扩展名对应的格式重新编码。

    目标没有可识别的扩展名（例如标准输出）时使用 ``fallback_extension``。
    """

    image_format = format_for_extension(handle.extension()) or format_for_extension(fallback_extension)
    if image_format is None:
        raise ImageWriteError(f"不支持的输出格式: {handle.extension() or fallback_extension}")

    image = load_image(handle.reader())
    try:
        save_image(image, handle.writer(), image_format)
    finally:
        image.close()
