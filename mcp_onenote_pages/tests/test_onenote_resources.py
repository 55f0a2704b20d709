"""
page item 조회 / 이미지 축소 테스트
"""

import io

import pytest
from PIL import Image

from mcp_onenote_pages.graph_transport import GraphResponse
from mcp_onenote_pages.onenote_errors import OneNoteRemoteError, OneNoteValidationError
from mcp_onenote_pages.onenote_image import scale_image_if_needed
from mcp_onenote_pages.onenote_resources import OneNoteResourceFetcher

from .fakes import json_response, resource_url, PAGE_ID


def png_bytes(width, height):
    buf = io.BytesIO()
    Image.new("RGB", (width, height), (200, 30, 30)).save(buf, format="PNG")
    return buf.getvalue()


def image_size(data):
    with Image.open(io.BytesIO(data)) as img:
        return img.size


PAGE_HTML = (
    "<html><body>"
    f'<img src="{resource_url("img-1")}" data-src-type="image/png" width="2048">'
    '<img src="https://example.com/outside.png">'
    f'<object data="{resource_url("file-1")}" data-attachment="true" type="application/pdf"></object>'
    "</body></html>"
)


class TestScaleImage:
    """scale_image_if_needed 테스트"""

    def test_large_png_scaled(self):
        data, scaled = scale_image_if_needed(png_bytes(2048, 1024), "image/png")
        assert scaled
        assert image_size(data) == (1024, 512)

    def test_small_image_untouched(self):
        original = png_bytes(100, 50)
        assert scale_image_if_needed(original, "image/png") == (original, False)

    def test_unsupported_or_broken(self):
        assert scale_image_if_needed(b"<svg/>", "image/svg+xml") == (b"<svg/>", False)
        assert scale_image_if_needed(b"not an image", "image/jpeg") == (b"not an image", False)


class TestOneNoteResourceFetcher:
    """OneNoteResourceFetcher 테스트"""

    @pytest.fixture
    def fetcher(self, client):
        return OneNoteResourceFetcher(client)

    @pytest.mark.asyncio
    async def test_list_page_items(self, fetcher, transport):
        transport.add("GET", "/content", GraphResponse(200, {"Content-Type": "text/html"}, PAGE_HTML.encode()))

        items = await fetcher.list_page_items(PAGE_ID)

        assert [i.to_dict() for i in items] == [
            {"pageItemId": "img-1", "tagName": "img", "type": "image", "mimeType": "image/png"},
            {
                "pageItemId": "file-1",
                "tagName": "object",
                "type": "attachment",
                "data-attachment": "true",
                "mimeType": "application/pdf",
            },
        ]
        assert transport.calls[0].headers["Accept"] == "text/html"

    @pytest.mark.asyncio
    async def test_get_page_item_scales_by_default(self, fetcher, transport):
        transport.add("GET", "/content", GraphResponse(200, body=PAGE_HTML.encode()))
        transport.add(
            "GET", "/resources/img-1/",
            GraphResponse(200, {"Content-Type": "application/octet-stream"}, png_bytes(2048, 1024)),
        )

        item = await fetcher.get_page_item(PAGE_ID, "img-1")

        assert item.content_type == "image/png"
        assert item.filename == "img-1.png"
        assert item.tag_name == "img"
        assert item.attributes["width"] == "2048"
        assert image_size(item.content) == (1024, 512)
        assert item.size == len(item.content)

    @pytest.mark.asyncio
    async def test_get_page_item_full_size(self, fetcher, transport):
        original = png_bytes(2048, 1024)
        transport.add("GET", "/content", GraphResponse(200, body=PAGE_HTML.encode()))
        transport.add("GET", "/resources/img-1/", GraphResponse(200, {"Content-Type": "image/png"}, original))

        item = await fetcher.get_page_item(PAGE_ID, "img-1", full_size=True)

        assert item.content == original

    @pytest.mark.asyncio
    async def test_get_page_item_without_html_metadata(self, fetcher, transport):
        transport.add("GET", "/content", GraphResponse(200, body=b"<p>empty</p>"))
        transport.add("GET", "/resources/doc-9/", GraphResponse(200, {"Content-Type": "application/pdf"}, b"%PDF"))

        item = await fetcher.get_page_item(PAGE_ID, "doc-9")

        assert item.content_type == "application/pdf"
        assert item.filename == "doc-9.pdf"
        assert item.tag_name is None

    @pytest.mark.asyncio
    async def test_fetch_resource_single_download(self, fetcher, transport):
        transport.add("GET", "/resources/", GraphResponse(200, {}, b"raw"))

        item = await fetcher.fetch_resource(PAGE_ID, "img-1")

        assert len(transport.calls) == 1
        assert item.content_type == "application/octet-stream"
        assert item.filename == "img-1.bin"
        assert item.content == b"raw"

    @pytest.mark.asyncio
    async def test_fetch_resource_errors(self, fetcher, transport):
        transport.add("GET", "/resources/", json_response(404, {"error": "not found"}))

        with pytest.raises(OneNoteRemoteError) as exc_info:
            await fetcher.fetch_resource(PAGE_ID, "img-1")
        assert exc_info.value.status == 404

        with pytest.raises(OneNoteValidationError):
            await fetcher.fetch_resource(PAGE_ID, "img/1")
        assert len(transport.calls) == 1
