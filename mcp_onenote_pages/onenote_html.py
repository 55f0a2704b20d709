"""
OneNote HTML - 내장 리소스 참조 스캔 및 재작성

업데이트 HTML 안의 Graph 리소스 URL(<img src>, <object data>)을 다운로드하여
multipart 파트로 옮기고, 참조를 name:partN 으로 바꿉니다.

재작성은 순수 변환입니다:
    파싱 → 대상 시작 태그 위치 기록 → 리소스 조회 → 새 문자열에 시작 태그만 교체
변경이 없으면 입력 문자열을 그대로 반환합니다.
"""

import html as html_lib
import logging
from dataclasses import dataclass, field
from html.parser import HTMLParser
from typing import List, Dict, Tuple, TYPE_CHECKING

from .onenote_errors import OneNoteError
from .onenote_ids import extract_page_item_id, generate_filename
from .onenote_types import PageItemInfo, ResourcePart

if TYPE_CHECKING:
    from core.protocols import ResourceFetcherProtocol

logger = logging.getLogger(__name__)

DEFAULT_RESOURCE_HOST_PREFIX = "https://graph.microsoft.com/"

# 태그별 리소스 URL 속성
URL_ATTRIBUTES = {
    "img": "src",
    "object": "data",
}


@dataclass
class StartTag:
    """HTML 원문에서 찾은 img/object 시작 태그"""
    offset: int
    raw: str
    tag: str
    attributes: Dict[str, str]
    self_closing: bool = False

    @property
    def url_attribute(self) -> str:
        return URL_ATTRIBUTES[self.tag]

    @property
    def url(self) -> str:
        return self.attributes.get(self.url_attribute, "")

    @property
    def declared_content_type(self) -> str:
        """HTML에 선언된 MIME 타입 (object type 우선, 다음 data-src-type)"""
        if self.tag == "object" and self.attributes.get("type"):
            return self.attributes["type"]
        return self.attributes.get("data-src-type", "")


class ResourceTagScanner(HTMLParser):
    """
    img / object 시작 태그를 원문 오프셋과 함께 수집하는 파서.
    트리를 만들거나 수정하지 않습니다.
    """

    def __init__(self):
        super().__init__(convert_charrefs=True)
        self._tags: List[StartTag] = []
        self._line_offsets: List[int] = [0]
        self._source = ""

    def scan(self, source: str) -> List[StartTag]:
        self._tags = []
        self._source = source
        # getpos() 는 '\n' 기준 (1-based line, 0-based column)
        self._line_offsets = [0] + [i + 1 for i, ch in enumerate(source) if ch == "\n"]
        self.feed(source)
        self.close()
        return self._tags

    def handle_starttag(self, tag, attrs):
        self._record(tag, attrs, self_closing=False)

    def handle_startendtag(self, tag, attrs):
        self._record(tag, attrs, self_closing=True)

    def _record(self, tag, attrs, self_closing: bool):
        if tag not in URL_ATTRIBUTES:
            return

        raw = self.get_starttag_text() or ""
        line, column = self.getpos()
        offset = self._line_offsets[line - 1] + column

        if not self._source.startswith(raw, offset):
            logger.debug(f"Start tag position mismatch, skipped: {raw[:80]!r}")
            return

        attributes: Dict[str, str] = {}
        for name, value in attrs:
            attributes.setdefault(name, value or "")

        self._tags.append(StartTag(
            offset=offset,
            raw=raw,
            tag=tag,
            attributes=attributes,
            self_closing=self_closing,
        ))


def scan_start_tags(source: str) -> List[StartTag]:
    """HTML에서 img/object 시작 태그 목록 추출"""
    if not source:
        return []
    return ResourceTagScanner().scan(source)


def scan_embedded_references(source: str) -> List[PageItemInfo]:
    """
    페이지 HTML에서 리소스 ID를 추출할 수 있는 img/object 참조 목록

    Args:
        source: 페이지 HTML

    Returns:
        PageItemInfo 리스트 (문서 순서)
    """
    items = []
    for start_tag in scan_start_tags(source):
        page_item_id = extract_page_item_id(start_tag.url)
        if not page_item_id:
            continue
        items.append(PageItemInfo(
            tag_name=start_tag.tag,
            page_item_id=page_item_id,
            attributes=dict(start_tag.attributes),
            original_url=start_tag.url,
        ))
    return items


def render_placeholder_tag(tag: str, url_attribute: str, content_id: str, self_closing: bool) -> str:
    """URL 속성 하나만 남긴 시작 태그 (name:{content_id})"""
    value = html_lib.escape(f"name:{content_id}", quote=True)
    closing = " />" if self_closing else ">"
    return f'<{tag} {url_attribute}="{value}"{closing}'


def splice(source: str, replacements: List[Tuple[int, int, str]]) -> str:
    """(offset, length, text) 교체 목록을 적용한 새 문자열"""
    pieces = []
    cursor = 0
    for offset, length, text in sorted(replacements):
        pieces.append(source[cursor:offset])
        pieces.append(text)
        cursor = offset + length
    pieces.append(source[cursor:])
    return "".join(pieces)


@dataclass
class RewriteResult:
    """재작성 결과 (HTML + 추출된 파트)"""
    html: str
    parts: List[ResourcePart] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.parts)


async def rewrite_html(
    source: str,
    page_id: str,
    fetcher: "ResourceFetcherProtocol",
    resource_host_prefix: str = DEFAULT_RESOURCE_HOST_PREFIX,
    start_index: int = 1,
) -> RewriteResult:
    """
    HTML 내 Graph 리소스 참조를 multipart 파트 참조로 재작성

    Args:
        source: 커맨드 content HTML
        page_id: 리소스가 속한 페이지 ID
        fetcher: ResourceFetcherProtocol 구현체
        resource_host_prefix: 재작성 대상 URL 접두사
        start_index: 첫 content ID 번호 (한 업데이트 호출 안에서 이어짐)

    Returns:
        RewriteResult - 변경이 없으면 html 은 입력과 동일한 객체
    """
    replacements: List[Tuple[int, int, str]] = []
    parts: List[ResourcePart] = []

    for start_tag in scan_start_tags(source):
        url = start_tag.url
        if not url.startswith(resource_host_prefix):
            continue

        page_item_id = extract_page_item_id(url)
        if not page_item_id:
            logger.warning(f"Could not extract resource ID from {start_tag.tag} URL, left unchanged: {url}")
            continue

        try:
            item = await fetcher.fetch_resource(page_id, page_item_id)
        except OneNoteError as e:
            logger.warning(f"Resource download failed, {start_tag.tag} left unchanged ({page_item_id}): {e}")
            continue

        content_id = f"part{start_index + len(parts)}"
        declared_type = start_tag.declared_content_type
        parts.append(ResourcePart(
            content_id=content_id,
            content=item.content,
            content_type=declared_type or item.content_type,
            filename=generate_filename(page_item_id, declared_type) if declared_type else item.filename,
        ))
        replacements.append((
            start_tag.offset,
            len(start_tag.raw),
            render_placeholder_tag(start_tag.tag, start_tag.url_attribute, content_id, start_tag.self_closing),
        ))
        logger.debug(f"Rewrote {start_tag.tag} resource {page_item_id} -> name:{content_id}")

    if not replacements:
        return RewriteResult(html=source, parts=[])

    return RewriteResult(html=splice(source, replacements), parts=parts)
