"""
OneNote Service - Facade
에이전트 툴 계층용 진입점: 예외를 {"success": ...} 결과 dict 로 변환
+ 하위 모듈 접근자
"""

import base64
import logging
from typing import Dict, Any, Optional, List

from .graph_onenote_client import GraphOneNoteClient
from .onenote_config import OneNoteConfig, load_config
from .onenote_errors import (
    OneNoteError,
    OneNoteRemoteError,
    OneNoteTimeoutError,
    TableUpdateError,
)
from .onenote_logging import setup_from_config
from .onenote_resources import OneNoteResourceFetcher
from .onenote_transfer import OneNotePageTransfer, PollPolicy
from .onenote_update import OneNoteContentUpdater

logger = logging.getLogger(__name__)


def error_result(error: OneNoteError) -> Dict[str, Any]:
    """예외 → 실패 결과 dict"""
    result: Dict[str, Any] = {
        "success": False,
        "error": str(error),
        "error_type": type(error).__name__,
    }
    if isinstance(error, OneNoteRemoteError) and error.status is not None:
        result["status"] = error.status
    if isinstance(error, OneNoteTimeoutError):
        result["operation_id"] = error.operation_id
        result["attempts"] = error.attempts
    if isinstance(error, TableUpdateError):
        result["targets"] = error.targets
    return result


class OneNoteService:
    """
    OneNote 페이지 Facade

    하위 모듈 접근:
    - svc.updater  → OneNoteContentUpdater (내용 업데이트)
    - svc.transfer → OneNotePageTransfer (복사/이동/삭제)
    - svc.fetcher  → OneNoteResourceFetcher (page item 조회)
    """

    def __init__(
        self,
        config: Optional[OneNoteConfig] = None,
        client: Optional[GraphOneNoteClient] = None,
        policy: Optional[PollPolicy] = None,
    ):
        self._config = config
        self._client = client
        self._policy = policy
        self._updater: Optional[OneNoteContentUpdater] = None
        self._transfer: Optional[OneNotePageTransfer] = None
        self._fetcher: Optional[OneNoteResourceFetcher] = None
        self._initialized = False

    async def initialize(self) -> bool:
        """서비스 초기화"""
        if self._initialized:
            return True

        if self._client is None:
            config = self._config or load_config()
            setup_from_config(config)
            self._client = GraphOneNoteClient(config=config)

        self._fetcher = OneNoteResourceFetcher(self._client)
        self._updater = OneNoteContentUpdater(self._client, self._fetcher)
        self._transfer = OneNotePageTransfer(self._client, self._policy)

        self._initialized = True
        logger.info("OneNoteService initialized")
        return True

    def _ensure_initialized(self):
        """초기화 확인"""
        if not self._initialized or not self._client:
            raise RuntimeError("OneNoteService not initialized. Call initialize() first.")

    async def close(self):
        """리소스 정리"""
        if self._client:
            await self._client.close()
            self._client = None
        self._initialized = False

    @property
    def updater(self) -> OneNoteContentUpdater:
        self._ensure_initialized()
        return self._updater

    @property
    def transfer(self) -> OneNotePageTransfer:
        self._ensure_initialized()
        return self._transfer

    @property
    def fetcher(self) -> OneNoteResourceFetcher:
        self._ensure_initialized()
        return self._fetcher

    # ========================================================================
    # 내용
    # ========================================================================

    async def get_page_content(self, page_id: str, for_update: bool = False) -> Dict[str, Any]:
        """
        페이지 HTML 조회

        Args:
            page_id: 페이지 ID
            for_update: True 면 업데이트 대상 지정용 ID 포함 (includeIDs=true)
        """
        self._ensure_initialized()
        try:
            content = await self._client.get_page_content(page_id, include_ids=for_update)
        except OneNoteError as e:
            return error_result(e)
        return {"success": True, "page_id": page_id, "content": content}

    async def update_page(self, page_id: str, commands: List[Dict[str, Any]]) -> Dict[str, Any]:
        """
        페이지 내용 업데이트

        Args:
            page_id: 페이지 ID
            commands: [{"target", "action", "position", "content"}, ...]
        """
        self._ensure_initialized()
        try:
            resources = await self._updater.update_page(page_id, commands)
        except OneNoteError as e:
            logger.error(f"페이지 업데이트 실패: {page_id} - {e}")
            return error_result(e)
        return {
            "success": True,
            "page_id": page_id,
            "commands": len(commands),
            "resources": resources,
        }

    async def update_page_simple(self, page_id: str, content: str) -> Dict[str, Any]:
        """페이지 body 전체 교체"""
        self._ensure_initialized()
        try:
            resources = await self._updater.update_page_simple(page_id, content)
        except OneNoteError as e:
            logger.error(f"페이지 업데이트 실패: {page_id} - {e}")
            return error_result(e)
        return {"success": True, "page_id": page_id, "commands": 1, "resources": resources}

    # ========================================================================
    # 복사 / 이동 / 삭제
    # ========================================================================

    async def copy_page(self, page_id: str, target_section_id: str, progress=None) -> Dict[str, Any]:
        """페이지 복사"""
        self._ensure_initialized()
        try:
            copied = await self._transfer.copy_page(page_id, target_section_id, progress=progress)
        except OneNoteError as e:
            logger.error(f"페이지 복사 실패: {page_id} - {e}")
            return error_result(e)
        return {"success": True, **copied.to_dict()}

    async def move_page(self, page_id: str, target_section_id: str, progress=None) -> Dict[str, Any]:
        """페이지 이동 - 원본 삭제 실패 시에도 success (warning 포함)"""
        self._ensure_initialized()
        try:
            moved = await self._transfer.move_page(page_id, target_section_id, progress=progress)
        except OneNoteError as e:
            logger.error(f"페이지 이동 실패: {page_id} - {e}")
            return error_result(e)
        return {"success": True, **moved.to_dict()}

    async def delete_page(self, page_id: str) -> Dict[str, Any]:
        """페이지 삭제"""
        self._ensure_initialized()
        try:
            await self._transfer.delete_page(page_id)
        except OneNoteError as e:
            return error_result(e)
        return {"success": True, "deleted_page_id": page_id}

    # ========================================================================
    # page item
    # ========================================================================

    async def list_page_items(self, page_id: str) -> Dict[str, Any]:
        """페이지 내 이미지/첨부파일 목록"""
        self._ensure_initialized()
        try:
            items = await self._fetcher.list_page_items(page_id)
        except OneNoteError as e:
            return error_result(e)
        return {
            "success": True,
            "page_id": page_id,
            "items": [item.to_dict() for item in items],
            "count": len(items),
        }

    async def get_page_item(self, page_id: str, page_item_id: str, full_size: bool = False) -> Dict[str, Any]:
        """page item 조회 (content 는 base64)"""
        self._ensure_initialized()
        try:
            item = await self._fetcher.get_page_item(page_id, page_item_id, full_size=full_size)
        except OneNoteError as e:
            return error_result(e)
        return {
            "success": True,
            "page_item_id": page_item_id,
            "content_type": item.content_type,
            "filename": item.filename,
            "size": item.size,
            "tag_name": item.tag_name,
            "attributes": item.attributes,
            "content_base64": base64.b64encode(item.content).decode("ascii"),
        }
