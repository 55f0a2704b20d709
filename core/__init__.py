"""
Core Module - Protocol 정의

mcp_onenote_pages 가 토큰/전송/리소스 구현체에 직접 의존하지 않도록 추상화.
"""

from .protocols import (
    TokenProviderProtocol,
    GraphTransportProtocol,
    ResourceFetcherProtocol,
)

__all__ = [
    'TokenProviderProtocol',
    'GraphTransportProtocol',
    'ResourceFetcherProtocol',
]
