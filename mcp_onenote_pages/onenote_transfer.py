"""
OneNote Transfer - 페이지 복사/이동 (비동기 작업 폴링)

상태 흐름:
    Submitted → Running ⇄ Running(503) → Completed | Failed | TimedOut

- copy_page: copyToSection 제출 (202 만 성공) → 작업 상태 폴링 → 새 페이지 ID
- move_page: copy_page 성공 후 원본 삭제 (삭제 실패는 경고, 롤백 없음)
"""

import json
import random
import asyncio
import inspect
import logging
from dataclasses import dataclass, field
from typing import Optional, Callable, Awaitable, Any

from .graph_onenote_client import GraphOneNoteClient
from .onenote_errors import (
    OneNoteError,
    OneNoteRemoteError,
    OneNoteTimeoutError,
    OneNoteValidationError,
)
from .onenote_ids import sanitize_onenote_id, extract_page_id_from_location
from .onenote_types import (
    AsyncOperation,
    CopyResult,
    MoveResult,
    OperationStatus,
)

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int, AsyncOperation], Any]


@dataclass
class PollPolicy:
    """
    작업 폴링 정책

    attempt 번째 시도 후 대기: min_delay + randrange(jitter_base + attempt) 초
    (기본값 기준 1 ~ 2+attempt 초)
    """
    max_attempts: int = 30
    min_delay: int = 1
    jitter_base: int = 2
    # 연속 503 허용 횟수 (None 이면 max_attempts 안에서 무제한)
    max_consecutive_unavailable: Optional[int] = None
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep
    rng: random.Random = field(default_factory=random.Random)

    def __post_init__(self):
        if self.max_attempts < 1:
            raise OneNoteValidationError("poll max_attempts must be at least 1")

    def delay_for(self, attempt: int) -> int:
        return self.min_delay + self.rng.randrange(self.jitter_base + attempt)

    @classmethod
    def from_config(cls, config, **overrides) -> "PollPolicy":
        values = {
            "max_attempts": config.poll_max_attempts,
            "min_delay": config.poll_min_delay,
            "jitter_base": config.poll_jitter_base,
        }
        values.update(overrides)
        return cls(**values)


class OneNotePageTransfer:
    """
    페이지 복사/이동 전담

    호출마다 AsyncOperation 을 하나 소유하며 인스턴스 상태를 공유하지 않습니다.
    """

    def __init__(self, client: GraphOneNoteClient, policy: Optional[PollPolicy] = None):
        self._client = client
        self.policy = policy or PollPolicy.from_config(client.config)

    # ========================================================================
    # 작업 상태
    # ========================================================================

    async def get_operation_status(self, operation_id: str) -> AsyncOperation:
        """
        비동기 작업 상태 조회

        503 은 오류가 아니라 진행 중 (Running + note) 으로 처리

        Raises:
            OneNoteRemoteError: 503 이외의 실패, 응답 파싱 실패, status 필드 없음
        """
        operation_id = sanitize_onenote_id(operation_id, "operationID")
        response = await self._client.get_operation_response(operation_id)

        if response.status == 503:
            logger.info(
                f"Operation {operation_id}: 503 received, treating as Running "
                f"(expected during long-running copy operations)"
            )
            return AsyncOperation.service_unavailable(operation_id)

        self._client.raise_for_status(response, "GetOnenoteOperation")

        try:
            data = response.json()
        except ValueError as e:
            raise OneNoteRemoteError(
                "failed to parse operation status response",
                status=response.status,
                body=response.text(),
                operation="GetOnenoteOperation",
            ) from e

        if not isinstance(data, dict) or not isinstance(data.get("status"), str):
            raise OneNoteRemoteError(
                "no status field in operation result",
                status=response.status,
                body=response.text(),
                operation="GetOnenoteOperation",
            )

        operation = AsyncOperation.from_dict(data, operation_id)
        logger.debug(f"Operation {operation_id} status: {operation.raw_status}")
        return operation

    # ========================================================================
    # 복사
    # ========================================================================

    async def _submit_copy(self, page_id: str, section_id: str) -> AsyncOperation:
        response = await self._client.post_copy_to_section(page_id, section_id)

        if response.status != 202:
            raise OneNoteRemoteError(
                "copy operation failed: expected status 202",
                status=response.status,
                body=response.text(),
                operation="CopyPage",
            )

        try:
            data = response.json()
        except ValueError as e:
            raise OneNoteRemoteError(
                "failed to parse copy response",
                status=response.status,
                body=response.text(),
                operation="CopyPage",
            ) from e

        if not isinstance(data, dict) or not isinstance(data.get("status"), str):
            raise OneNoteRemoteError(
                "no status field found in copy response",
                status=response.status,
                body=response.text(),
                operation="CopyPage",
            )
        if not isinstance(data.get("id"), str) or not data["id"]:
            raise OneNoteRemoteError(
                "no id field found in copy response",
                status=response.status,
                body=response.text(),
                operation="CopyPage",
            )

        operation = AsyncOperation.from_dict(data)
        logger.info(f"Copy submitted: page {page_id} -> section {section_id}, operation {operation.operation_id}")
        return operation

    async def _notify(self, progress: Optional[ProgressCallback], attempt: int, operation: AsyncOperation):
        if progress is None:
            return
        result = progress(attempt, self.policy.max_attempts, operation)
        if inspect.isawaitable(result):
            await result

    async def wait_for_operation(
        self,
        operation_id: str,
        progress: Optional[ProgressCallback] = None,
    ) -> CopyResult:
        """
        작업이 끝날 때까지 폴링

        Args:
            operation_id: copyToSection 응답의 작업 ID
            progress: 시도마다 호출 (attempt, max_attempts, operation), 코루틴 가능

        Returns:
            CopyResult

        Raises:
            OneNoteRemoteError: Failed 상태, resourceLocation 없음/잘못됨
            OneNoteTimeoutError: 폴링 횟수 초과
        """
        policy = self.policy
        consecutive_unavailable = 0

        for attempt in range(1, policy.max_attempts + 1):
            operation = await self.get_operation_status(operation_id)
            await self._notify(progress, attempt, operation)

            if operation.status == OperationStatus.COMPLETED:
                try:
                    new_page_id = extract_page_id_from_location(operation.resource_location)
                except OneNoteValidationError as e:
                    raise OneNoteRemoteError(
                        f"failed to extract page ID from operation result: {e}",
                        body=json.dumps(operation.raw, ensure_ascii=False),
                        operation="CopyPage",
                    ) from e

                logger.info(f"Copy completed: operation {operation_id} -> page {new_page_id} (attempt {attempt})")
                return CopyResult(
                    page_id=new_page_id,
                    operation_id=operation_id,
                    attempts=attempt,
                )

            if operation.status == OperationStatus.FAILED:
                raise OneNoteRemoteError(
                    "copy operation failed",
                    body=json.dumps(operation.raw, ensure_ascii=False),
                    operation="CopyPage",
                )

            if operation.unavailable:
                consecutive_unavailable += 1
                limit = policy.max_consecutive_unavailable
                if limit is not None and consecutive_unavailable >= limit:
                    raise OneNoteTimeoutError(
                        f"operation status unavailable (503) {consecutive_unavailable} times in a row",
                        operation_id=operation_id,
                        attempts=attempt,
                    )
            else:
                consecutive_unavailable = 0

            if attempt < policy.max_attempts:
                delay = policy.delay_for(attempt)
                if operation.unavailable:
                    logger.info(
                        f"Operation {operation_id} unavailable (503), retrying in {delay}s "
                        f"(attempt {attempt}/{policy.max_attempts})"
                    )
                else:
                    logger.debug(
                        f"Operation {operation_id} {operation.raw_status}, polling again in {delay}s "
                        f"(attempt {attempt}/{policy.max_attempts})"
                    )
                await policy.sleep(delay)

        raise OneNoteTimeoutError(
            f"copy operation did not complete within {policy.max_attempts} attempts",
            operation_id=operation_id,
            attempts=policy.max_attempts,
        )

    async def copy_page(
        self,
        page_id: str,
        target_section_id: str,
        progress: Optional[ProgressCallback] = None,
    ) -> CopyResult:
        """
        페이지를 다른 섹션으로 복사

        Args:
            page_id: 원본 페이지 ID
            target_section_id: 대상 섹션 ID
            progress: 폴링 진행 콜백

        Returns:
            CopyResult (새 페이지 ID)
        """
        page_id = sanitize_onenote_id(page_id, "pageID")
        target_section_id = sanitize_onenote_id(target_section_id, "targetSectionID")

        submitted = await self._submit_copy(page_id, target_section_id)
        return await self.wait_for_operation(submitted.operation_id, progress=progress)

    # ========================================================================
    # 삭제 / 이동
    # ========================================================================

    async def delete_page(self, page_id: str):
        """페이지 삭제"""
        await self._client.delete_page(page_id)

    async def move_page(
        self,
        page_id: str,
        target_section_id: str,
        progress: Optional[ProgressCallback] = None,
    ) -> MoveResult:
        """
        페이지 이동 (복사 후 원본 삭제)

        복사가 성공하면 원본 삭제 실패와 관계없이 성공으로 반환합니다.
        삭제 실패는 MoveResult.warning / source_deleted=False 로 전달되며 보상 작업은 없습니다.
        """
        copied = await self.copy_page(page_id, target_section_id, progress=progress)
        source_page_id = page_id.strip()

        try:
            await self.delete_page(source_page_id)
        except OneNoteError as e:
            warning = (
                f"Page copied to {copied.page_id} but the original page {source_page_id} "
                f"could not be deleted: {e}"
            )
            logger.warning(warning)
            return MoveResult(
                page_id=copied.page_id,
                operation_id=copied.operation_id,
                source_page_id=source_page_id,
                source_deleted=False,
                warning=warning,
            )

        logger.info(f"Page moved: {source_page_id} -> {copied.page_id}")
        return MoveResult(
            page_id=copied.page_id,
            operation_id=copied.operation_id,
            source_page_id=source_page_id,
        )
