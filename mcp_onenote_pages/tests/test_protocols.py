"""
core.protocols 구현체 확인
"""

from core.protocols import (
    TokenProviderProtocol,
    GraphTransportProtocol,
    ResourceFetcherProtocol,
)
from mcp_onenote_pages.graph_transport import GraphTransport
from mcp_onenote_pages.onenote_auth import StaticTokenProvider, RefreshTokenProvider
from mcp_onenote_pages.onenote_resources import OneNoteResourceFetcher

from .fakes import FakeTransport, FakeFetcher


class TestProtocols:
    """Protocol 구조 일치 테스트"""

    def test_token_providers(self):
        assert isinstance(StaticTokenProvider("t"), TokenProviderProtocol)
        assert isinstance(RefreshTokenProvider(client_id="app", refresh_token="rt"), TokenProviderProtocol)

    def test_transports(self):
        assert isinstance(GraphTransport(StaticTokenProvider("t")), GraphTransportProtocol)
        assert isinstance(FakeTransport(), GraphTransportProtocol)

    def test_fetchers(self, client):
        assert isinstance(OneNoteResourceFetcher(client), ResourceFetcherProtocol)
        assert isinstance(FakeFetcher(), ResourceFetcherProtocol)
