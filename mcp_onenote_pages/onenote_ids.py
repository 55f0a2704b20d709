"""
OneNote IDs
OneNote ID 검증/정리, 리소스 URL에서 ID 추출, 파일명 생성
"""

import re
import logging
from typing import Optional

from .onenote_errors import OneNoteValidationError

logger = logging.getLogger(__name__)

MAX_ID_LENGTH = 100

# 예: 0-896fbac8f72d01b02c5950345e65f588!1-4D24C77F19546939!39705
_ID_PATTERN = re.compile(r'^[A-Za-z0-9\-!]+$')
_RESOURCE_ID_PATTERN = re.compile(r'/resources/([A-Za-z0-9\-!]+)/\$value')
_PAGE_LOCATION_PATTERN = re.compile(r'/onenote/pages/([A-Za-z0-9\-!]+)')

_EXTENSIONS = [
    ("image/jpeg", ".jpg"),
    ("image/png", ".png"),
    ("image/gif", ".gif"),
    ("image/bmp", ".bmp"),
    ("image/webp", ".webp"),
    ("image/svg", ".svg"),
    ("application/pdf", ".pdf"),
    ("text/plain", ".txt"),
    ("text/html", ".html"),
    ("application/json", ".json"),
    ("application/xml", ".xml"),
    ("application/zip", ".zip"),
]


def sanitize_onenote_id(raw_id: Optional[str], id_label: str) -> str:
    """
    OneNote ID 검증 및 정리 (URL 삽입 전 필수)

    Args:
        raw_id: 원본 ID
        id_label: 에러 메시지용 ID 이름 (pageID, sectionID 등)

    Returns:
        공백 제거된 ID

    Raises:
        OneNoteValidationError: 빈 값, 문자열 아님, 100자 초과, 허용되지 않은 문자
    """
    if not raw_id:
        raise OneNoteValidationError(f"{id_label} cannot be empty")

    if not isinstance(raw_id, str):
        raise OneNoteValidationError(f"{id_label} must be a string, got {type(raw_id).__name__}")

    sanitized = raw_id.strip()
    if not sanitized:
        raise OneNoteValidationError(f"{id_label} cannot be empty")

    if not _ID_PATTERN.match(sanitized):
        logger.debug(f"Invalid character in {id_label}: {sanitized!r}")
        raise OneNoteValidationError(f"{id_label} contains invalid characters")

    if len(sanitized) > MAX_ID_LENGTH:
        raise OneNoteValidationError(f"{id_label} is too long")

    return sanitized


def extract_page_item_id(url: str) -> str:
    """
    리소스 URL에서 page item ID 추출

    지원 형식:
        https://graph.microsoft.com/v1.0/users(...)/onenote/resources/{id}/$value
        https://www.onenote.com/api/v1.0/me/notes/resources/{id}/$value

    Returns:
        추출된 ID (형식이 맞지 않으면 빈 문자열)
    """
    match = _RESOURCE_ID_PATTERN.search(url or "")
    return match.group(1) if match else ""


def extract_page_id_from_location(resource_location: Optional[str]) -> str:
    """
    비동기 작업 결과 resourceLocation URL에서 새 페이지 ID 추출

    Raises:
        OneNoteValidationError: URL 없음 또는 ID 추출/검증 실패
    """
    if not isinstance(resource_location, str) or not resource_location:
        raise OneNoteValidationError("resourceLocation field not found in operation result")

    match = _PAGE_LOCATION_PATTERN.search(resource_location)
    if not match:
        raise OneNoteValidationError(
            f"could not extract page ID from URL: {resource_location}"
        )

    return sanitize_onenote_id(match.group(1), "extracted page ID")


def extension_for_content_type(content_type: str) -> str:
    """MIME 타입에 맞는 확장자 (모르면 빈 문자열)"""
    content_type = (content_type or "").lower()
    for prefix, ext in _EXTENSIONS:
        if content_type.startswith(prefix):
            return ext

    if content_type.startswith("application/vnd.openxmlformats-officedocument"):
        if "wordprocessingml" in content_type:
            return ".docx"
        if "spreadsheetml" in content_type:
            return ".xlsx"
        if "presentationml" in content_type:
            return ".pptx"
        return ".office"

    return ""


def generate_filename(page_item_id: str, content_type: str) -> str:
    """page item ID + 확장자 (매핑 없으면 .bin)"""
    return page_item_id + (extension_for_content_type(content_type) or ".bin")
