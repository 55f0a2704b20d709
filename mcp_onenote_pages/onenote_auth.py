"""
OneNote Auth
토큰 제공자 구현 (core.protocols.TokenProviderProtocol)

- StaticTokenProvider: 고정 액세스 토큰 (갱신 불가)
- RefreshTokenProvider: Azure AD refresh_token 그랜트로 갱신
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any

import aiohttp

from .onenote_errors import OneNoteAuthError

logger = logging.getLogger(__name__)


class StaticTokenProvider:
    """고정 토큰 제공자 - 만료 개념 없음, 갱신 요청 시 재인증 필요 에러"""

    def __init__(self, access_token: Optional[str]):
        self._access_token = access_token

    async def get_access_token(self) -> Optional[str]:
        return self._access_token

    def is_token_expired(self) -> bool:
        return False

    async def refresh_access_token(self) -> str:
        raise OneNoteAuthError(
            "Access token rejected and no refresh token configured. Re-authentication required."
        )


class RefreshTokenProvider:
    """Azure AD refresh token 기반 토큰 제공자"""

    TOKEN_URL = "https://login.microsoftonline.com/{tenant}/oauth2/v2.0/token"
    DEFAULT_SCOPE = "https://graph.microsoft.com/Notes.ReadWrite offline_access"

    def __init__(
        self,
        client_id: str,
        refresh_token: str,
        tenant_id: str = "common",
        client_secret: Optional[str] = None,
        access_token: Optional[str] = None,
        expires_at: Optional[datetime] = None,
        buffer_seconds: int = 300,
        scope: Optional[str] = None,
    ):
        """
        Args:
            client_id: Azure AD 앱 ID
            refresh_token: 리프레시 토큰
            tenant_id: 테넌트 ID (기본 common)
            client_secret: 기밀 클라이언트인 경우 시크릿
            access_token: 기존 액세스 토큰 (없으면 첫 요청 시 갱신)
            expires_at: 기존 액세스 토큰 만료 시간
            buffer_seconds: 만료 판단 버퍼 (기본 5분)
            scope: 요청 스코프
        """
        self.client_id = client_id
        self.client_secret = client_secret
        self.tenant_id = tenant_id or "common"
        self.scope = scope or self.DEFAULT_SCOPE
        self.buffer_seconds = buffer_seconds
        self._refresh_token = refresh_token
        self._access_token = access_token
        self._expires_at = expires_at
        self._session: Optional[aiohttp.ClientSession] = None

    async def _get_session(self) -> aiohttp.ClientSession:
        """aiohttp 세션 관리"""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
        return self._session

    async def get_access_token(self) -> Optional[str]:
        return self._access_token

    def is_token_expired(self) -> bool:
        """
        토큰 만료 확인 (버퍼 시간 고려)
        """
        if not self._access_token or self._expires_at is None:
            return True

        expires_at = self._expires_at
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)

        return datetime.now(timezone.utc) >= (expires_at - timedelta(seconds=self.buffer_seconds))

    async def refresh_access_token(self) -> str:
        """
        토큰 갱신

        Returns:
            새 액세스 토큰

        Raises:
            OneNoteAuthError: 리프레시 토큰 없음/만료/거부
        """
        if not self._refresh_token:
            raise OneNoteAuthError("Refresh token not available, re-authentication required")

        token_url = self.TOKEN_URL.format(tenant=self.tenant_id)
        data = {
            'client_id': self.client_id,
            'refresh_token': self._refresh_token,
            'grant_type': 'refresh_token',
            'scope': self.scope,
        }
        if self.client_secret:
            data['client_secret'] = self.client_secret

        try:
            session = await self._get_session()
            async with session.post(token_url, data=data) as response:
                if response.status != 200:
                    error_text = await response.text()
                    if 'invalid_grant' in error_text:
                        raise OneNoteAuthError("Refresh token expired or revoked, re-authentication required")
                    raise OneNoteAuthError(f"Token refresh failed: {response.status} - {error_text}")

                token_data = await response.json()
        except (aiohttp.ClientError, ValueError) as e:
            logger.error(f"Token refresh error: {str(e)}")
            raise OneNoteAuthError(f"Token refresh request failed: {e}") from e

        self._apply_token_data(token_data)
        logger.info("Token refreshed successfully")
        return self._access_token

    def _apply_token_data(self, token_data: Dict[str, Any]):
        if not isinstance(token_data, dict):
            raise OneNoteAuthError(
                f"Token refresh response is not an object: {type(token_data).__name__}"
            )
        if not token_data.get('access_token'):
            raise OneNoteAuthError("Token refresh response has no access_token")

        try:
            expires_in = int(token_data.get('expires_in', 3600))
        except (TypeError, ValueError) as e:
            raise OneNoteAuthError(
                f"Token refresh response has invalid expires_in: {token_data.get('expires_in')!r}"
            ) from e
        self._access_token = token_data['access_token']
        self._expires_at = datetime.now(timezone.utc) + timedelta(seconds=expires_in)

        # 새 refresh token이 있으면 교체, 없으면 기존 것 유지
        if token_data.get('refresh_token'):
            self._refresh_token = token_data['refresh_token']

    async def close(self):
        """리소스 정리"""
        if self._session and not self._session.closed:
            await self._session.close()
        self._session = None


def token_provider_from_config(config):
    """
    설정으로 토큰 제공자 생성

    refresh token + client id 가 있으면 RefreshTokenProvider, 아니면 StaticTokenProvider
    """
    if config.refresh_token and config.azure_client_id:
        return RefreshTokenProvider(
            client_id=config.azure_client_id,
            refresh_token=config.refresh_token,
            tenant_id=config.azure_tenant_id,
            client_secret=config.azure_client_secret,
            access_token=config.access_token,
        )
    return StaticTokenProvider(config.access_token)
