"""
Graph Transport
Bearer 토큰 인증 HTTP 전송 계층

- 만료된 토큰은 요청 전에 갱신
- 401 응답 시 토큰 갱신 후 1회 재시도
- 토큰 갱신은 asyncio.Lock 으로 직렬화 (동시 호출자가 같은 토큰을 중복 갱신하지 않음)
"""

import json
import asyncio
import logging
from dataclasses import dataclass, field
from typing import Optional, Dict, Any, TYPE_CHECKING

import aiohttp

if TYPE_CHECKING:
    from core.protocols import TokenProviderProtocol

from .onenote_errors import OneNoteAuthError, OneNoteTransportError

logger = logging.getLogger(__name__)


@dataclass
class GraphResponse:
    """HTTP 응답 (본문은 이미 읽힌 상태)"""
    status: int
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def header(self, name: str, default: Optional[str] = None) -> Optional[str]:
        lowered = name.lower()
        for key, value in self.headers.items():
            if key.lower() == lowered:
                return value
        return default

    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")

    def json(self) -> Any:
        if not self.body:
            return {}
        return json.loads(self.body)


class GraphTransport:
    """인증된 Graph API 전송 클라이언트 (호출 간 공유되는 유일한 객체)"""

    def __init__(
        self,
        token_provider: "TokenProviderProtocol",
        timeout: int = 30,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        """
        Args:
            token_provider: TokenProviderProtocol 구현체
            timeout: 요청 타임아웃 (초)
            session: 외부 aiohttp 세션 (없으면 내부 생성)
        """
        self._token_provider = token_provider
        self.timeout = timeout
        self._session = session
        self._owns_session = session is None
        self._refresh_lock: Optional[asyncio.Lock] = None
        self._token_generation = 0

    async def initialize(self) -> bool:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
            self._owns_session = True
            logger.info("GraphTransport initialized")
        return True

    async def close(self):
        """리소스 정리"""
        if self._session and self._owns_session and not self._session.closed:
            await self._session.close()
        self._session = None
        if hasattr(self._token_provider, "close"):
            await self._token_provider.close()

    async def _refresh(self, seen_generation: int):
        """
        토큰 갱신 (임계 구역)

        seen_generation 이후 다른 호출자가 이미 갱신했다면 그 결과를 재사용
        """
        # 실행 중인 루프 안에서 생성
        if self._refresh_lock is None:
            self._refresh_lock = asyncio.Lock()
        async with self._refresh_lock:
            if self._token_generation != seen_generation:
                logger.debug("Token already refreshed by another caller")
                return
            logger.info("Refreshing access token")
            await self._token_provider.refresh_access_token()
            self._token_generation += 1

    async def _valid_token(self) -> tuple:
        generation = self._token_generation
        if self._token_provider.is_token_expired():
            logger.info("Token expired, attempting refresh")
            await self._refresh(generation)
            generation = self._token_generation

        token = await self._token_provider.get_access_token()
        if not token:
            raise OneNoteAuthError("액세스 토큰이 없습니다. 로그인이 필요합니다.")
        return token, generation

    async def _send(
        self,
        method: str,
        url: str,
        token: str,
        data: Optional[bytes],
        headers: Optional[Dict[str, str]],
    ) -> GraphResponse:
        if self._session is None or self._session.closed:
            await self.initialize()

        request_headers = {"Authorization": f"Bearer {token}"}
        if headers:
            request_headers.update(headers)

        try:
            async with self._session.request(
                method,
                url,
                headers=request_headers,
                data=data,
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            ) as response:
                body = await response.read()
                return GraphResponse(
                    status=response.status,
                    headers=dict(response.headers),
                    body=body,
                )
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(f"API 요청 오류: {method} {url} - {str(e)}")
            raise OneNoteTransportError(f"{method} {url} failed: {e}") from e

    async def request(
        self,
        method: str,
        url: str,
        data: Optional[bytes] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> GraphResponse:
        """
        인증된 요청 수행

        Args:
            method: HTTP 메서드 (GET, POST, PATCH, DELETE)
            url: 전체 URL
            data: 요청 본문 (재시도 시 재전송되므로 bytes)
            headers: 추가 헤더

        Returns:
            GraphResponse (401 재시도 이후의 최종 응답)

        Raises:
            OneNoteAuthError: 토큰 없음/갱신 실패
            OneNoteTransportError: 네트워크 오류
        """
        logger.debug(f"{method} {url}")
        token, generation = await self._valid_token()
        response = await self._send(method, url, token, data, headers)

        if response.status == 401:
            logger.info(f"401 received for {method} {url}, refreshing token and retrying once")
            await self._refresh(generation)
            token = await self._token_provider.get_access_token()
            if not token:
                raise OneNoteAuthError("액세스 토큰이 없습니다. 로그인이 필요합니다.")
            response = await self._send(method, url, token, data, headers)

        logger.debug(f"{method} {url} -> {response.status}")
        return response
