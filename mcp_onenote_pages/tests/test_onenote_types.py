"""
OneNote 타입 / 커맨드 직렬화 테스트
- append 는 position 을 절대 직렬화하지 않음
- 그 외 액션은 항상 position 포함 (미지정 시 after)
"""

import json
import pytest

from mcp_onenote_pages.onenote_errors import OneNoteValidationError
from mcp_onenote_pages.onenote_types import (
    PageAction,
    Position,
    OperationStatus,
    UpdateCommand,
    AsyncOperation,
    MoveResult,
    PageItemInfo,
    serialize_commands,
    commands_to_payload,
)


class TestUpdateCommand:
    """UpdateCommand 검증 테스트"""

    def test_coerces_strings(self):
        command = UpdateCommand(target=" body ", action="replace", content="<p>x</p>", position="before")
        assert command.target == "body"
        assert command.action == PageAction.REPLACE
        assert command.position == Position.BEFORE

    def test_unknown_action(self):
        with pytest.raises(OneNoteValidationError, match="unknown update action"):
            UpdateCommand(target="body", action="upsert", content="x")

    def test_unknown_position(self):
        with pytest.raises(OneNoteValidationError, match="unknown position"):
            UpdateCommand(target="body", action="insert", content="x", position="inside")

    def test_empty_target(self):
        with pytest.raises(OneNoteValidationError, match="target cannot be empty"):
            UpdateCommand(target="  ", action="append", content="x")

    def test_content_required_except_delete(self):
        with pytest.raises(OneNoteValidationError, match="content is required"):
            UpdateCommand(target="body", action="append")
        assert UpdateCommand(target="p:{1}", action="delete").content is None

    def test_from_dict(self):
        command = UpdateCommand.from_dict({
            "target": "#p1",
            "action": "insert",
            "position": "",
            "content": "<p>new</p>",
        })
        assert command.position is None
        assert command.content == "<p>new</p>"

    @pytest.mark.parametrize("content", [["<p>x</p>"], 5, {"html": "<p>x</p>"}])
    def test_content_must_be_string(self, content):
        with pytest.raises(OneNoteValidationError, match="content must be a string"):
            UpdateCommand(target="body", action="replace", content=content)

    def test_unhashable_action_rejected(self):
        with pytest.raises(OneNoteValidationError, match="unknown update action"):
            UpdateCommand(target="body", action=["append"], content="x")

    def test_from_dict_rejects_non_mapping(self):
        with pytest.raises(OneNoteValidationError):
            UpdateCommand.from_dict(["body", "append"])


class TestSerializeCommands:
    """커맨드 직렬화 테스트"""

    def test_append_never_has_position(self):
        commands = [
            UpdateCommand(target="body", action="append", content="<p>a</p>"),
            UpdateCommand(target="body", action="append", content="<p>b</p>", position="before"),
        ]
        payload = json.loads(serialize_commands(commands))
        for item in payload:
            assert "position" not in item
        assert payload[0] == {"target": "body", "action": "append", "content": "<p>a</p>"}

    @pytest.mark.parametrize("action", ["prepend", "insert", "replace", "delete"])
    def test_other_actions_always_have_position(self, action):
        content = None if action == "delete" else "<p>x</p>"
        payload = json.loads(serialize_commands([
            UpdateCommand(target="#p1", action=action, content=content),
        ]))
        assert payload[0]["position"] == "after"
        assert payload[0]["action"] == action

    def test_explicit_position_kept(self):
        payload = commands_to_payload([
            UpdateCommand(target="#p1", action="insert", content="<p>x</p>", position="before"),
        ])
        assert payload == [{"target": "#p1", "action": "insert", "position": "before", "content": "<p>x</p>"}]

    def test_delete_omits_content(self):
        payload = commands_to_payload([UpdateCommand(target="p:{abc}", action="delete")])
        assert payload == [{"target": "p:{abc}", "action": "delete", "position": "after"}]

    def test_non_ascii_preserved(self):
        body = serialize_commands([UpdateCommand(target="body", action="append", content="<p>회의록</p>")])
        assert "회의록" in body


class TestAsyncOperation:
    """비동기 작업 상태 파싱 테스트"""

    def test_status_case_insensitive(self):
        assert OperationStatus.parse("notStarted") == OperationStatus.NOT_STARTED
        assert OperationStatus.parse("COMPLETED") == OperationStatus.COMPLETED
        assert OperationStatus.parse("Paused") is None
        assert OperationStatus.parse(None) is None

    def test_from_dict(self):
        operation = AsyncOperation.from_dict({
            "id": "op-1",
            "status": "Completed",
            "resourceLocation": "https://graph.microsoft.com/v1.0/me/onenote/pages/1-abc",
        })
        assert operation.operation_id == "op-1"
        assert operation.status == OperationStatus.COMPLETED
        assert not operation.unavailable

    def test_service_unavailable_is_running(self):
        operation = AsyncOperation.service_unavailable("op-1")
        assert operation.status == OperationStatus.RUNNING
        assert operation.unavailable
        assert operation.note


class TestResultTypes:
    """결과 타입 테스트"""

    def test_partial_move(self):
        result = MoveResult(
            page_id="new-1",
            operation_id="op-1",
            source_page_id="old-1",
            source_deleted=False,
            warning="delete failed",
        )
        assert result.is_partial
        data = result.to_dict()
        assert data["sourceDeleted"] is False
        assert data["warning"] == "delete failed"

    def test_clean_move_has_no_warning(self):
        data = MoveResult(page_id="new-1", operation_id="op-1", source_page_id="old-1").to_dict()
        assert "warning" not in data
        assert data["sourceDeleted"] is True

    def test_page_item_info(self):
        info = PageItemInfo(
            tag_name="object",
            page_item_id="res-1",
            attributes={"type": "application/pdf", "data-attachment": "true"},
        )
        assert info.item_type == "attachment"
        assert info.to_dict() == {
            "pageItemId": "res-1",
            "tagName": "object",
            "type": "attachment",
            "data-attachment": "true",
            "mimeType": "application/pdf",
        }
