"""
OneNote Resources - 페이지 내장 리소스(이미지/첨부파일) 조회

- list_page_items: 페이지 HTML의 img/object 참조 목록
- get_page_item: HTML 메타데이터 + 바이너리 (이미지 축소 옵션)
- fetch_resource: 업데이트 재작성용 원본 바이너리 (다운로드 1회)
"""

import logging
from typing import List, Optional

from .graph_onenote_client import GraphOneNoteClient
from .onenote_html import scan_embedded_references
from .onenote_ids import sanitize_onenote_id, generate_filename
from .onenote_image import scale_image_if_needed
from .onenote_types import PageItemData, PageItemInfo

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "application/octet-stream"


class OneNoteResourceFetcher:
    """
    page item 조회 전담 (core.protocols.ResourceFetcherProtocol 구현)
    """

    def __init__(self, client: GraphOneNoteClient):
        self._client = client

    async def list_page_items(self, page_id: str) -> List[PageItemInfo]:
        """
        페이지에 포함된 img/object 목록

        Args:
            page_id: 페이지 ID

        Returns:
            PageItemInfo 리스트
        """
        page_id = sanitize_onenote_id(page_id, "pageID")
        content = await self._client.get_page_content(page_id)
        items = scan_embedded_references(content)
        logger.info(f"ListPageItems: {page_id} -> {len(items)} items")
        return items

    async def _download(self, page_item_id: str):
        response = await self._client.download_resource(page_item_id)
        content_type = response.header("Content-Type") or DEFAULT_CONTENT_TYPE
        return response.body, content_type

    async def fetch_resource(self, page_id: str, resource_id: str) -> PageItemData:
        """
        리소스 원본 다운로드 (HTTP Content-Type 사용, 축소 없음)

        Raises:
            OneNoteValidationError: ID 검증 실패
            OneNoteRemoteError: 다운로드 실패
        """
        sanitize_onenote_id(page_id, "pageID")
        resource_id = sanitize_onenote_id(resource_id, "pageItemID")

        content, content_type = await self._download(resource_id)
        return PageItemData(
            content_type=content_type,
            filename=generate_filename(resource_id, content_type),
            size=len(content),
            content=content,
            original_url=self._client.resource_url(resource_id),
        )

    async def get_page_item(
        self,
        page_id: str,
        page_item_id: str,
        full_size: bool = False,
        max_width: Optional[int] = None,
        max_height: Optional[int] = None,
    ) -> PageItemData:
        """
        page item 전체 데이터 조회

        MIME 타입은 HTML 속성(object type, data-src-type)을 우선하고
        없으면 HTTP Content-Type 을 사용합니다.

        Args:
            page_id: 페이지 ID
            page_item_id: 리소스 ID
            full_size: True 면 이미지 축소 생략
            max_width: 축소 최대 너비 (기본 설정값)
            max_height: 축소 최대 높이 (기본 설정값)
        """
        page_id = sanitize_onenote_id(page_id, "pageID")
        page_item_id = sanitize_onenote_id(page_item_id, "pageItemID")

        items = await self.list_page_items(page_id)
        info = next((i for i in items if i.page_item_id == page_item_id), None)
        if info is None:
            logger.debug(f"No HTML metadata found for page item {page_item_id}")

        content, http_content_type = await self._download(page_item_id)
        content_type = (info.mime_type if info else None) or http_content_type

        item = PageItemData(
            content_type=content_type,
            filename=generate_filename(page_item_id, content_type),
            size=len(content),
            content=content,
            tag_name=info.tag_name if info else None,
            attributes=dict(info.attributes) if info else {},
            original_url=info.original_url if info else "",
        )

        if not full_size and content_type.startswith("image/"):
            config = self._client.config
            scaled, was_scaled = scale_image_if_needed(
                content,
                content_type,
                max_width or config.image_max_width,
                max_height or config.image_max_height,
            )
            if was_scaled:
                item.content = scaled
                item.size = len(scaled)

        logger.info(
            f"GetPageItem: {page_item_id} ({item.content_type}, {item.size} bytes, "
            f"tag={item.tag_name})"
        )
        return item
