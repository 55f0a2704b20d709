"""
OneNote Config
기본값 → YAML 설정 파일 → 환경 변수(.env 포함) 순으로 설정 로드
"""

import os
import logging
from dataclasses import dataclass, fields
from typing import Optional, Dict, Any

import yaml
from dotenv import load_dotenv

logger = logging.getLogger(__name__)


@dataclass
class OneNoteConfig:
    """OneNote 파이프라인 설정"""

    # Graph API
    graph_base_url: str = "https://graph.microsoft.com/v1.0"
    graph_beta_url: str = "https://graph.microsoft.com/beta"
    resource_host_prefix: str = "https://graph.microsoft.com/"
    request_timeout: int = 30

    # 비동기 작업 폴링 (copy/move)
    poll_max_attempts: int = 30
    poll_min_delay: int = 1
    poll_jitter_base: int = 2

    # 이미지 축소 (page item 조회 시)
    image_max_width: int = 1024
    image_max_height: int = 768

    # 로깅
    log_level: str = "INFO"
    log_file: Optional[str] = None
    log_content: bool = False

    # 인증
    azure_client_id: Optional[str] = None
    azure_client_secret: Optional[str] = None
    azure_tenant_id: str = "common"
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


_ENV_MAPPINGS = {
    "ONENOTE_GRAPH_BASE_URL": "graph_base_url",
    "ONENOTE_GRAPH_BETA_URL": "graph_beta_url",
    "ONENOTE_RESOURCE_HOST_PREFIX": "resource_host_prefix",
    "ONENOTE_REQUEST_TIMEOUT": "request_timeout",
    "ONENOTE_POLL_MAX_ATTEMPTS": "poll_max_attempts",
    "ONENOTE_POLL_MIN_DELAY": "poll_min_delay",
    "ONENOTE_POLL_JITTER_BASE": "poll_jitter_base",
    "ONENOTE_IMAGE_MAX_WIDTH": "image_max_width",
    "ONENOTE_IMAGE_MAX_HEIGHT": "image_max_height",
    "ONENOTE_LOG_LEVEL": "log_level",
    "ONENOTE_LOG_FILE": "log_file",
    "ONENOTE_LOG_CONTENT": "log_content",
    "AZURE_CLIENT_ID": "azure_client_id",
    "AZURE_CLIENT_SECRET": "azure_client_secret",
    "AZURE_TENANT_ID": "azure_tenant_id",
    "ONENOTE_ACCESS_TOKEN": "access_token",
    "ONENOTE_REFRESH_TOKEN": "refresh_token",
}

_INT_KEYS = {
    "request_timeout",
    "poll_max_attempts",
    "poll_min_delay",
    "poll_jitter_base",
    "image_max_width",
    "image_max_height",
}

_BOOL_KEYS = {"log_content"}


def _convert_value(key: str, value: Any) -> Any:
    """문자열/YAML 값을 필드 타입으로 변환 (실패 시 ValueError)"""
    if key in _INT_KEYS:
        return int(value)
    if key in _BOOL_KEYS:
        if isinstance(value, bool):
            return value
        return str(value).lower() in ("true", "1", "yes")
    return value


def _apply(values: Dict[str, Any], source: str, target: Dict[str, Any]):
    known = {f.name for f in fields(OneNoteConfig)}
    for key, value in values.items():
        if key not in known:
            logger.warning(f"Unknown config key ignored ({source}): {key}")
            continue
        if value is None or value == "":
            continue
        try:
            target[key] = _convert_value(key, value)
        except (TypeError, ValueError):
            logger.warning(f"Invalid config value ignored ({source}): {key}={value!r}")


def _load_yaml(config_path: str) -> Dict[str, Any]:
    """YAML 설정 파일 로드 (onenote: 섹션 또는 최상위 키)"""
    if not os.path.exists(config_path):
        logger.warning(f"Config file not found: {config_path}, using defaults")
        return {}

    with open(config_path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        logger.warning(f"Config file is not a mapping: {config_path}")
        return {}

    return data.get("onenote", data)


def load_config(config_path: Optional[str] = None, use_env: bool = True) -> OneNoteConfig:
    """
    설정 로드

    Args:
        config_path: YAML 설정 파일 경로 (없으면 ONENOTE_CONFIG_FILE 환경 변수)
        use_env: 환경 변수 적용 여부 (테스트에서 False)

    Returns:
        OneNoteConfig
    """
    values: Dict[str, Any] = {}

    if use_env:
        load_dotenv()

    path = config_path or (os.getenv("ONENOTE_CONFIG_FILE") if use_env else None)
    if path:
        _apply(_load_yaml(path), path, values)

    if use_env:
        env_values = {
            config_key: os.environ.get(env_var)
            for env_var, config_key in _ENV_MAPPINGS.items()
        }
        _apply(env_values, "env", values)

    return OneNoteConfig(**values)
