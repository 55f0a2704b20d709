"""
OneNote Update - 페이지 내용 업데이트

ID 검증 → 커맨드 검증 → 표 가드레일 → 리소스 재작성 → multipart 조립 → PATCH
"""

import logging
from dataclasses import replace
from typing import List, Tuple, Union, Dict, Any, Optional, TYPE_CHECKING

from .graph_onenote_client import GraphOneNoteClient
from .onenote_errors import OneNoteValidationError
from .onenote_guardrail import validate_table_updates
from .onenote_html import rewrite_html
from .onenote_ids import sanitize_onenote_id
from .onenote_logging import content_preview
from .onenote_multipart import assemble_update_payload
from .onenote_resources import OneNoteResourceFetcher
from .onenote_types import UpdateCommand, ResourcePart, PageAction

if TYPE_CHECKING:
    from core.protocols import ResourceFetcherProtocol

logger = logging.getLogger(__name__)

CommandInput = Union[UpdateCommand, Dict[str, Any]]


class OneNoteContentUpdater:
    """
    페이지 내용 업데이트 전담

    - update_page: 커맨드 목록으로 PATCH
    - update_page_simple: body 전체 교체
    """

    def __init__(self, client: GraphOneNoteClient, fetcher: Optional["ResourceFetcherProtocol"] = None):
        """
        Args:
            client: Graph OneNote 클라이언트
            fetcher: ResourceFetcherProtocol 구현체 (없으면 OneNoteResourceFetcher)
        """
        self._client = client
        self._fetcher = fetcher or OneNoteResourceFetcher(client)

    @property
    def _log_content(self) -> bool:
        return self._client.config.log_content

    async def _rewrite_commands(
        self,
        page_id: str,
        commands: List[UpdateCommand],
    ) -> Tuple[List[UpdateCommand], List[ResourcePart]]:
        """각 커맨드 content 를 독립적으로 재작성 (content ID 번호는 호출 전체에서 이어짐)"""
        rewritten: List[UpdateCommand] = []
        parts: List[ResourcePart] = []
        prefix = self._client.config.resource_host_prefix

        for command in commands:
            if not command.content:
                rewritten.append(command)
                continue

            result = await rewrite_html(
                command.content,
                page_id,
                self._fetcher,
                resource_host_prefix=prefix,
                start_index=len(parts) + 1,
            )
            if result.changed:
                logger.debug(
                    f"Command {command.target}: {len(result.parts)} resources rewritten, "
                    f"content {content_preview(result.html, self._log_content)}"
                )
                command = replace(command, content=result.html)

            rewritten.append(command)
            parts.extend(result.parts)

        return rewritten, parts

    async def update_page(self, page_id: str, commands: List[CommandInput]) -> int:
        """
        페이지 내용 업데이트

        Args:
            page_id: 페이지 ID
            commands: UpdateCommand 또는 {"target", "action", "position", "content"} dict 목록

        Returns:
            함께 전송된 리소스 파트 수

        Raises:
            OneNoteValidationError: ID/커맨드 검증 실패, 표 하위 요소 대상 (TableUpdateError)
            OneNoteRemoteError: PATCH 가 2xx 가 아님
        """
        page_id = sanitize_onenote_id(page_id, "pageID")

        if not commands:
            raise OneNoteValidationError("no update commands provided")
        if not isinstance(commands, (list, tuple)):
            raise OneNoteValidationError(f"update commands must be a list, got {type(commands).__name__}")

        parsed = [
            command if isinstance(command, UpdateCommand) else UpdateCommand.from_dict(command)
            for command in commands
        ]

        for i, command in enumerate(parsed):
            logger.debug(
                f"Update command {i}: target={command.target} action={command.action.value} "
                f"position={command.position.value if command.position else None} "
                f"content={content_preview(command.content, self._log_content)}"
            )

        validate_table_updates(parsed)

        rewritten, parts = await self._rewrite_commands(page_id, parsed)
        payload = await assemble_update_payload(rewritten, parts)

        await self._client.patch_page_content(page_id, payload.body, payload.content_type)

        logger.info(
            f"UpdatePageContent: {page_id} ({len(rewritten)} commands, {len(parts)} resources)"
        )
        return len(parts)

    async def update_page_simple(self, page_id: str, content: str) -> int:
        """body 전체를 content 로 교체"""
        return await self.update_page(
            page_id,
            [UpdateCommand(target="body", action=PageAction.REPLACE, content=content)],
        )
