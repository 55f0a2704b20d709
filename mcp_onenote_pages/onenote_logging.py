"""
OneNote Logging
패키지 로거 설정 + 페이지 HTML 로그 미리보기
"""

import logging
import sys
from pathlib import Path
from typing import Optional, List

PACKAGE_LOGGER = 'mcp_onenote_pages'
DEFAULT_FORMAT = '[%(asctime)s] %(levelname)-8s %(name)s - %(message)s'


def _build_handlers(log_file: Optional[str]) -> List[logging.Handler]:
    # stdout 은 MCP stdio 채널용
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding='utf-8'))
    return handlers


def setup_logger(
    name: str = PACKAGE_LOGGER,
    level: str = 'INFO',
    log_file: Optional[str] = None,
    format_string: Optional[str] = None
) -> logging.Logger:
    """
    로거 설정 (기존 핸들러 교체)

    Args:
        name: 로거 이름 (기본: 패키지 로거, 하위 모듈 로거가 전파)
        level: DEBUG / INFO / WARNING / ERROR (알 수 없으면 INFO)
        log_file: 파일 로그 경로 (디렉토리 자동 생성)
        format_string: 로그 포맷

    Returns:
        설정된 로거
    """
    logger = logging.getLogger(name)
    logger.handlers.clear()
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    formatter = logging.Formatter(format_string or DEFAULT_FORMAT)
    for handler in _build_handlers(log_file):
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger


def setup_from_config(config) -> logging.Logger:
    """OneNoteConfig 의 log_level / log_file 로 패키지 로거 설정"""
    return setup_logger(level=config.log_level, log_file=config.log_file)


def content_preview(content: Optional[str], enabled: bool, max_len: int = 200) -> str:
    """페이지 HTML 로그용 미리보기 (log_content 비활성 시 길이만)"""
    if content is None:
        return "<none>"
    if not enabled:
        return f"<{len(content)} chars>"
    if len(content) <= max_len:
        return content
    return content[:max_len] + "..."
