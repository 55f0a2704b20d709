"""
OneNote Graph API Client
Microsoft Graph API OneNote 페이지 엔드포인트 호출
GraphTransport 를 통한 인증 관리
"""

import json
import logging
from typing import Optional, Dict, TYPE_CHECKING

from .graph_transport import GraphTransport, GraphResponse
from .onenote_auth import token_provider_from_config
from .onenote_config import OneNoteConfig, load_config
from .onenote_errors import OneNoteRemoteError
from .onenote_ids import sanitize_onenote_id

if TYPE_CHECKING:
    from core.protocols import GraphTransportProtocol

logger = logging.getLogger(__name__)


class GraphOneNoteClient:
    """OneNote Graph API 클라이언트"""

    def __init__(
        self,
        transport: Optional["GraphTransportProtocol"] = None,
        config: Optional[OneNoteConfig] = None,
    ):
        """
        클라이언트 초기화

        Args:
            transport: GraphTransportProtocol 구현체 (없으면 설정으로 GraphTransport 생성)
            config: 설정 (없으면 load_config())
        """
        self.config = config or load_config()
        self.transport = transport or GraphTransport(
            token_provider_from_config(self.config),
            timeout=self.config.request_timeout,
        )

    @property
    def base_url(self) -> str:
        return self.config.graph_base_url.rstrip("/")

    @property
    def beta_url(self) -> str:
        return self.config.graph_beta_url.rstrip("/")

    async def close(self):
        """리소스 정리"""
        await self.transport.close()

    # ========================================================================
    # URL
    # ========================================================================

    def page_content_url(self, page_id: str, include_ids: bool = False) -> str:
        url = f"{self.base_url}/me/onenote/pages/{page_id}/content"
        return f"{url}?includeIDs=true" if include_ids else url

    def page_url(self, page_id: str) -> str:
        return f"{self.base_url}/me/onenote/pages/{page_id}"

    def copy_to_section_url(self, page_id: str) -> str:
        # copyToSection 은 beta 엔드포인트
        return f"{self.beta_url}/me/onenote/pages/{page_id}/copyToSection"

    def operation_url(self, operation_id: str) -> str:
        return f"{self.base_url}/me/onenote/operations/{operation_id}"

    def resource_url(self, resource_id: str) -> str:
        return f"{self.base_url}/me/onenote/resources/{resource_id}/$value"

    # ========================================================================
    # 공통
    # ========================================================================

    async def request(
        self,
        method: str,
        url: str,
        data: Optional[bytes] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> GraphResponse:
        return await self.transport.request(method, url, data=data, headers=headers)

    @staticmethod
    def raise_for_status(response: GraphResponse, operation: str):
        """2xx 가 아니면 OneNoteRemoteError"""
        if not response.ok:
            error_text = response.text()
            logger.error(f"{operation} 실패: {response.status} - {error_text}")
            raise OneNoteRemoteError(
                f"{operation} failed",
                status=response.status,
                body=error_text,
                operation=operation,
            )

    # ========================================================================
    # 페이지 관련 메서드
    # ========================================================================

    async def get_page_content(self, page_id: str, include_ids: bool = False) -> str:
        """
        페이지 HTML 조회

        Args:
            page_id: 페이지 ID
            include_ids: 업데이트 대상 지정용 생성 ID 포함 (includeIDs=true)

        Returns:
            페이지 HTML
        """
        page_id = sanitize_onenote_id(page_id, "pageID")
        response = await self.request(
            "GET",
            self.page_content_url(page_id, include_ids),
            headers={"Accept": "text/html"},
        )
        self.raise_for_status(response, "GetPageContent")
        return response.text()

    async def patch_page_content(self, page_id: str, body: bytes, content_type: str):
        """
        페이지 내용 PATCH (multipart)

        Args:
            page_id: 검증된 페이지 ID
            body: multipart 본문
            content_type: boundary 포함 Content-Type
        """
        response = await self.request(
            "PATCH",
            self.page_content_url(page_id),
            data=body,
            headers={"Content-Type": content_type},
        )
        self.raise_for_status(response, "UpdatePageContent")

    async def delete_page(self, page_id: str):
        """페이지 삭제"""
        page_id = sanitize_onenote_id(page_id, "pageID")
        response = await self.request("DELETE", self.page_url(page_id))
        self.raise_for_status(response, "DeletePage")
        logger.info(f"Page deleted: {page_id}")

    async def post_copy_to_section(self, page_id: str, section_id: str) -> GraphResponse:
        """copyToSection 요청 (응답 해석은 호출자)"""
        return await self.request(
            "POST",
            self.copy_to_section_url(page_id),
            data=json.dumps({"id": section_id}).encode("utf-8"),
            headers={"Content-Type": "application/json"},
        )

    async def get_operation_response(self, operation_id: str) -> GraphResponse:
        """비동기 작업 상태 조회 (응답 해석은 호출자)"""
        return await self.request("GET", self.operation_url(operation_id))

    async def download_resource(self, resource_id: str) -> GraphResponse:
        """리소스 바이너리 다운로드"""
        response = await self.request("GET", self.resource_url(resource_id))
        self.raise_for_status(response, "GetPageItem")
        return response
