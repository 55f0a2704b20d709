"""
OneNote Multipart - 페이지 PATCH multipart 본문 조립

첫 파트는 항상 commands (commands.json), 이후 리소스 파트가 content ID 순서로 이어집니다.
"""

import logging
from dataclasses import dataclass, field
from typing import List

from aiohttp import MultipartWriter, hdrs
from aiohttp.payload import BytesPayload

from .onenote_types import UpdateCommand, ResourcePart, serialize_commands

logger = logging.getLogger(__name__)

COMMANDS_FIELD = "commands"
COMMANDS_FILENAME = "commands.json"


@dataclass
class MultipartPayload:
    """직렬화된 multipart 본문"""
    body: bytes
    content_type: str
    part_names: List[str] = field(default_factory=list)


class _BufferWriter:
    """MultipartWriter.write() 대상 메모리 버퍼"""

    def __init__(self):
        self._buffer = bytearray()

    async def write(self, data) -> None:
        self._buffer.extend(data)

    def getvalue(self) -> bytes:
        return bytes(self._buffer)


def _quote(value: str) -> str:
    return value.replace("\r", "").replace("\n", "").replace('"', "%22")


def form_data_disposition(name: str, filename: str) -> str:
    return f'form-data; name="{_quote(name)}"; filename="{_quote(filename)}"'


def _append_part(writer: MultipartWriter, name: str, filename: str, content: bytes, content_type: str):
    payload = BytesPayload(
        content,
        content_type=content_type,
        headers={hdrs.CONTENT_DISPOSITION: form_data_disposition(name, filename)},
    )
    writer.append_payload(payload)


async def assemble_update_payload(
    commands: List[UpdateCommand],
    parts: List[ResourcePart],
) -> MultipartPayload:
    """
    커맨드 + 리소스 파트를 multipart/form-data 본문으로 조립

    Args:
        commands: 재작성이 끝난 커맨드 목록
        parts: 재작성 중 수집된 리소스 파트

    Returns:
        MultipartPayload (body, boundary 포함 content_type)

    Raises:
        OneNoteValidationError: 커맨드 직렬화 실패 (네트워크 호출 전)
    """
    commands_json = serialize_commands(commands)

    writer = MultipartWriter("form-data")
    _append_part(
        writer,
        COMMANDS_FIELD,
        COMMANDS_FILENAME,
        commands_json.encode("utf-8"),
        "application/json",
    )
    part_names = [COMMANDS_FIELD]

    for part in parts:
        try:
            _append_part(writer, part.content_id, part.filename, part.content, part.content_type)
        except (TypeError, ValueError) as e:
            logger.warning(f"Skipping resource part {part.content_id} ({part.filename}): {e}")
            continue
        part_names.append(part.content_id)

    buffer = _BufferWriter()
    await writer.write(buffer)

    logger.debug(f"Multipart payload assembled: parts={part_names}")
    return MultipartPayload(
        body=buffer.getvalue(),
        content_type=writer.content_type,
        part_names=part_names,
    )
