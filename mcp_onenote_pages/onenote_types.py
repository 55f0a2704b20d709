"""
OneNote Types
페이지 업데이트/전송 관련 타입 정의

- 도메인 타입: dataclass (호출 단위로 생성/소멸)
- PATCH 커맨드 와이어 형식: Pydantic 모델 (append / positioned 두 가지 형태)
"""

import json
from dataclasses import dataclass, field
from typing import Optional, List, Dict, Any, Literal, Union
from enum import Enum

from pydantic import BaseModel, ConfigDict, ValidationError

from .onenote_errors import OneNoteValidationError


class PageAction(str, Enum):
    """페이지 업데이트 액션"""
    APPEND = "append"
    PREPEND = "prepend"
    INSERT = "insert"
    REPLACE = "replace"
    DELETE = "delete"


class Position(str, Enum):
    """삽입 위치"""
    BEFORE = "before"
    AFTER = "after"


class OperationStatus(str, Enum):
    """비동기 작업 상태 (copyToSection)"""
    NOT_STARTED = "NotStarted"
    RUNNING = "Running"
    COMPLETED = "Completed"
    FAILED = "Failed"

    @classmethod
    def parse(cls, value: Any) -> Optional["OperationStatus"]:
        """대소문자 무시 파싱 (copy 응답은 notStarted, 작업 조회는 NotStarted)"""
        if not isinstance(value, str):
            return None
        for status in cls:
            if status.value.lower() == value.lower():
                return status
        return None


# ============================================================================
# 업데이트 커맨드
# ============================================================================

@dataclass
class UpdateCommand:
    """
    페이지 PATCH 커맨드 1건

    target: body, title, #{generated-id}, {tag}:{data-id} (예: table:{id}, p:{id})
    content: delete 를 제외한 모든 액션에서 필수
    """
    target: str
    action: PageAction
    content: Optional[str] = None
    position: Optional[Position] = None

    def __post_init__(self):
        if not isinstance(self.target, str) or not self.target.strip():
            raise OneNoteValidationError("update command target cannot be empty")
        self.target = self.target.strip()

        try:
            self.action = PageAction(self.action)
        except (ValueError, TypeError):
            raise OneNoteValidationError(
                f"unknown update action: {self.action!r}. "
                f"allowed: {[a.value for a in PageAction]}"
            )

        if self.position is not None:
            try:
                self.position = Position(self.position)
            except (ValueError, TypeError):
                raise OneNoteValidationError(
                    f"unknown position: {self.position!r}. "
                    f"allowed: {[p.value for p in Position]}"
                )

        if self.content is not None and not isinstance(self.content, str):
            raise OneNoteValidationError(
                f"content must be a string, got {type(self.content).__name__} (target {self.target})"
            )

        if self.content is None and self.action != PageAction.DELETE:
            raise OneNoteValidationError(
                f"content is required for action '{self.action.value}' (target {self.target})"
            )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UpdateCommand":
        if not isinstance(data, dict):
            raise OneNoteValidationError(f"update command must be an object, got {type(data).__name__}")
        return cls(
            target=data.get("target", ""),
            action=data.get("action", ""),
            content=data.get("content"),
            position=data.get("position") or None,
        )


class AppendCommandWire(BaseModel):
    """append 와이어 형식 - position 필드 없음"""

    model_config = ConfigDict(extra='forbid')

    target: str
    action: Literal["append"]
    content: str


class PositionedCommandWire(BaseModel):
    """append 이외 액션 와이어 형식 - position 항상 포함"""

    model_config = ConfigDict(extra='forbid')

    target: str
    action: Literal["prepend", "insert", "replace", "delete"]
    position: Position
    content: Optional[str] = None


CommandWire = Union[AppendCommandWire, PositionedCommandWire]


def to_wire(command: UpdateCommand) -> CommandWire:
    """액션에 따라 와이어 형식 선택 (position 미지정 시 after)"""
    if command.action == PageAction.APPEND:
        return AppendCommandWire(
            target=command.target,
            action=command.action.value,
            content=command.content,
        )
    return PositionedCommandWire(
        target=command.target,
        action=command.action.value,
        position=command.position or Position.AFTER,
        content=command.content,
    )


def commands_to_payload(commands: List[UpdateCommand]) -> List[Dict[str, Any]]:
    return [
        to_wire(command).model_dump(mode="json", exclude_none=True)
        for command in commands
    ]


def serialize_commands(commands: List[UpdateCommand]) -> str:
    """
    커맨드 목록을 PATCH용 JSON 배열 문자열로 직렬화

    Raises:
        OneNoteValidationError: 직렬화 실패
    """
    try:
        return json.dumps(commands_to_payload(commands), ensure_ascii=False)
    except (ValidationError, TypeError, ValueError) as e:
        raise OneNoteValidationError(f"failed to marshal update commands: {e}") from e


# ============================================================================
# 내장 리소스 (이미지/첨부파일)
# ============================================================================

@dataclass
class ResourcePart:
    """multipart 요청에 포함될 바이너리 파트 (name:{content_id} 로 참조)"""
    content_id: str
    content: bytes
    content_type: str
    filename: str


@dataclass
class PageItemInfo:
    """페이지 HTML에서 찾은 img/object 참조"""
    tag_name: str
    page_item_id: str
    attributes: Dict[str, str] = field(default_factory=dict)
    original_url: str = ""

    @property
    def item_type(self) -> str:
        if self.tag_name == "img":
            return "image"
        if self.tag_name == "object" and self.attributes.get("data-attachment") == "true":
            return "attachment"
        return self.tag_name

    @property
    def mime_type(self) -> Optional[str]:
        mime_type = self.attributes.get("data-src-type")
        if not mime_type and self.tag_name == "object":
            mime_type = self.attributes.get("type")
        return mime_type or None

    def to_dict(self) -> Dict[str, Any]:
        item = {
            "pageItemId": self.page_item_id,
            "tagName": self.tag_name,
            "type": self.item_type,
        }
        if "data-attachment" in self.attributes:
            item["data-attachment"] = self.attributes["data-attachment"]
        if self.mime_type:
            item["mimeType"] = self.mime_type
        return item


@dataclass
class PageItemData:
    """다운로드한 page item (바이너리 + 메타데이터)"""
    content_type: str
    filename: str
    size: int
    content: bytes
    tag_name: Optional[str] = None
    attributes: Dict[str, str] = field(default_factory=dict)
    original_url: str = ""


# ============================================================================
# 비동기 작업 (copy / move)
# ============================================================================

@dataclass
class AsyncOperation:
    """GET /onenote/operations/{id} 결과"""
    operation_id: str
    status: Optional[OperationStatus]
    raw_status: str = ""
    resource_location: Optional[str] = None
    note: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict)
    unavailable: bool = False  # 503 응답으로 만든 Running

    @classmethod
    def service_unavailable(cls, operation_id: str) -> "AsyncOperation":
        note = "Operation is still in progress (503 response received)"
        return cls(
            operation_id=operation_id,
            status=OperationStatus.RUNNING,
            raw_status=OperationStatus.RUNNING.value,
            note=note,
            raw={"id": operation_id, "status": OperationStatus.RUNNING.value, "note": note},
            unavailable=True,
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any], operation_id: str = "") -> "AsyncOperation":
        raw_status = data.get("status")
        return cls(
            operation_id=data.get("id") or operation_id,
            status=OperationStatus.parse(raw_status),
            raw_status=raw_status if isinstance(raw_status, str) else "",
            resource_location=data.get("resourceLocation"),
            note=data.get("note"),
            raw=data,
        )


@dataclass
class CopyResult:
    """페이지 복사 결과"""
    page_id: str
    operation_id: str
    status: str = OperationStatus.COMPLETED.value
    attempts: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.page_id,
            "operationId": self.operation_id,
            "status": self.status,
            "attempts": self.attempts,
        }


@dataclass
class MoveResult:
    """
    페이지 이동 결과

    source_deleted=False 인 경우 복사는 완료되었지만 원본 삭제 실패 (warning 참고)
    """
    page_id: str
    operation_id: str
    source_page_id: str
    source_deleted: bool = True
    warning: Optional[str] = None

    @property
    def is_partial(self) -> bool:
        return not self.source_deleted

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "id": self.page_id,
            "operationId": self.operation_id,
            "status": OperationStatus.COMPLETED.value,
            "sourcePageId": self.source_page_id,
            "sourceDeleted": self.source_deleted,
        }
        if self.warning:
            result["warning"] = self.warning
        return result
