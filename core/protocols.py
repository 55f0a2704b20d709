"""
Core Protocols - 모듈 간 의존성 추상화를 위한 Protocol 정의

현재 정의:
    - TokenProviderProtocol: 전송 계층이 토큰 저장/갱신 방식을 직접 알지 않아도 되게 함
    - GraphTransportProtocol: 업데이트/전송 파이프라인이 aiohttp에 직접 의존하지 않게 함
    - ResourceFetcherProtocol: HTML 리소스 재작성기가 다운로드 방식을 알지 않아도 되게 함

사용 예시:
    # 테스트용 Mock 주입
    transport = FakeTransport()
    updater = OneNoteContentUpdater(client=GraphOneNoteClient(transport=transport))

    # 기본 사용
    updater = OneNoteContentUpdater()  # 내부에서 GraphTransport 사용
"""

from typing import Protocol, Optional, Dict, Any, runtime_checkable


@runtime_checkable
class TokenProviderProtocol(Protocol):
    """
    토큰 제공자 프로토콜

    OAuth 액세스 토큰의 조회, 만료 확인, 갱신을 담당하는 인터페이스.
    mcp_onenote_pages.onenote_auth 의 StaticTokenProvider / RefreshTokenProvider 가 구현합니다.
    """

    async def get_access_token(self) -> Optional[str]:
        """
        현재 액세스 토큰 반환 (없으면 None)
        """
        ...

    def is_token_expired(self) -> bool:
        """
        액세스 토큰 만료 여부
        """
        ...

    async def refresh_access_token(self) -> str:
        """
        액세스 토큰 갱신 후 새 토큰 반환

        Raises:
            OneNoteAuthError: 갱신 불가 (refresh token 없음/만료)
        """
        ...


@runtime_checkable
class GraphTransportProtocol(Protocol):
    """
    인증된 HTTP 전송 프로토콜

    Bearer 토큰을 붙여 요청을 수행하고, 인증 실패 시 한 번 갱신 후 재시도한
    최종 결과를 반환합니다.
    """

    async def request(
        self,
        method: str,
        url: str,
        data: Optional[bytes] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        """
        요청 수행

        Returns:
            GraphResponse (status, headers, body)
        """
        ...

    async def close(self) -> None:
        """리소스 정리"""
        ...


@runtime_checkable
class ResourceFetcherProtocol(Protocol):
    """
    페이지 내장 리소스(이미지/첨부파일) 다운로드 프로토콜
    """

    async def fetch_resource(self, page_id: str, resource_id: str) -> Any:
        """
        리소스 바이너리 + 메타데이터 조회

        Returns:
            PageItemData
        """
        ...
