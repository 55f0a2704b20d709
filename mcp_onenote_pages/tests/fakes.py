"""
테스트용 대역 (전송 계층, 리소스 다운로드, sleep)
"""

import json
from dataclasses import dataclass, field
from typing import Optional, Dict, List, Any

from mcp_onenote_pages.graph_transport import GraphResponse
from mcp_onenote_pages.onenote_errors import OneNoteRemoteError
from mcp_onenote_pages.onenote_types import PageItemData

PAGE_ID = "0-896fbac8f72d01b02c5950345e65f588!1-4D24C77F19546939!39705"
SECTION_ID = "0-4D24C77F19546939!39710"
RESOURCE_BASE = "https://graph.microsoft.com/v1.0/users('me')/onenote/resources"


def resource_url(resource_id: str) -> str:
    return f"{RESOURCE_BASE}/{resource_id}/$value"


def json_response(status: int, data: Any) -> GraphResponse:
    return GraphResponse(
        status=status,
        headers={"Content-Type": "application/json"},
        body=json.dumps(data).encode("utf-8"),
    )


def empty_response(status: int) -> GraphResponse:
    return GraphResponse(status=status, headers={}, body=b"")


@dataclass
class FakeCall:
    method: str
    url: str
    data: Optional[bytes] = None
    headers: Dict[str, str] = field(default_factory=dict)


class FakeTransport:
    """
    준비된 응답을 돌려주는 전송 계층

    route 별 응답 목록은 앞에서부터 소비하고 마지막 응답은 계속 반복합니다.
    """

    def __init__(self):
        self.calls: List[FakeCall] = []
        self._routes: List[Dict[str, Any]] = []
        self.closed = False

    def add(self, method: str, url_contains: str, *responses: GraphResponse):
        self._routes.append({
            "method": method,
            "url_contains": url_contains,
            "responses": list(responses),
        })
        return self

    def calls_to(self, method: str, url_contains: str = "") -> List[FakeCall]:
        return [c for c in self.calls if c.method == method and url_contains in c.url]

    async def request(self, method, url, data=None, headers=None):
        self.calls.append(FakeCall(method, url, data, dict(headers or {})))
        for route in self._routes:
            if route["method"] == method and route["url_contains"] in url:
                responses = route["responses"]
                return responses.pop(0) if len(responses) > 1 else responses[0]
        raise AssertionError(f"unexpected request: {method} {url}")

    async def close(self):
        self.closed = True


class FakeFetcher:
    """리소스 다운로드 대역"""

    def __init__(self, items: Optional[Dict[str, Any]] = None):
        self.items = items or {}
        self.calls: List[tuple] = []

    async def fetch_resource(self, page_id, resource_id):
        self.calls.append((page_id, resource_id))
        item = self.items.get(resource_id)
        if item is None:
            raise OneNoteRemoteError("GetPageItem failed", status=404, body="not found")
        if isinstance(item, Exception):
            raise item
        return item


def page_item(resource_id: str, content: bytes = b"\x89PNG-data", content_type: str = "image/png") -> PageItemData:
    return PageItemData(
        content_type=content_type,
        filename=f"{resource_id}.png",
        size=len(content),
        content=content,
    )


class NoSleep:
    """대기 시간만 기록하는 sleep"""

    def __init__(self):
        self.delays: List[float] = []

    async def __call__(self, delay):
        self.delays.append(delay)
