"""
OneNote Image
큰 이미지를 최대 크기 안으로 축소 (page item 조회 시)
"""

import io
import logging
from typing import Tuple

from PIL import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)

_FORMATS = {
    "image/jpeg": "JPEG",
    "image/jpg": "JPEG",
    "image/png": "PNG",
    "image/gif": "GIF",
}


def scale_image_if_needed(
    image_data: bytes,
    content_type: str,
    max_width: int = 1024,
    max_height: int = 768,
) -> Tuple[bytes, bool]:
    """
    이미지가 최대 크기를 넘으면 비율 유지 축소

    Args:
        image_data: 원본 바이너리
        content_type: MIME 타입 (jpeg/png/gif 만 재인코딩)
        max_width: 최대 너비
        max_height: 최대 높이

    Returns:
        (바이너리, 축소 여부) - 디코딩/인코딩 실패 시 원본 그대로
    """
    image_format = _FORMATS.get((content_type or "").lower())
    if image_format is None:
        return image_data, False

    try:
        with Image.open(io.BytesIO(image_data)) as img:
            width, height = img.size
            if width <= max_width and height <= max_height:
                return image_data, False

            scale = min(max_width / width, max_height / height)
            new_size = (max(1, int(width * scale)), max(1, int(height * scale)))

            scaled = img.convert("RGB") if image_format == "JPEG" else img.copy()
            scaled = scaled.resize(new_size, Image.BILINEAR)

            buf = io.BytesIO()
            if image_format == "JPEG":
                scaled.save(buf, format=image_format, quality=85)
            else:
                scaled.save(buf, format=image_format)
    except (UnidentifiedImageError, OSError, ValueError) as e:
        logger.debug(f"Image scaling skipped: {e}")
        return image_data, False

    scaled_data = buf.getvalue()
    logger.debug(
        f"Image scaled {width}x{height} -> {new_size[0]}x{new_size[1]} "
        f"({len(image_data)} -> {len(scaled_data)} bytes)"
    )
    return scaled_data, True
