"""
표 가드레일 테스트
"""

import pytest

from mcp_onenote_pages.onenote_errors import TableUpdateError, OneNoteValidationError
from mcp_onenote_pages.onenote_guardrail import (
    validate_table_updates,
    find_table_subelement_targets,
)
from mcp_onenote_pages.onenote_types import UpdateCommand


def command(target, action="replace", content="<p>x</p>"):
    return UpdateCommand(target=target, action=action, content=content)


class TestTableGuardrail:
    """td/th/tr 대상 차단 테스트"""

    def test_whole_table_allowed(self):
        validate_table_updates([
            command("table:{6f1e0f6a}"),
            command("body", action="append"),
            command("#p:{abc}{42}"),
        ])

    @pytest.mark.parametrize("target", ["td:{cell-1}", "th:{head-1}", "tr:{row-1}", "TD:{cell-2}"])
    def test_subelement_rejected(self, target):
        with pytest.raises(TableUpdateError) as exc_info:
            validate_table_updates([command("body", action="append"), command(target)])
        assert exc_info.value.targets == [target]

    def test_lists_every_offending_target(self):
        commands = [
            command("td:{c1}"),
            command("table:{t1}"),
            command("tr:{r1}", action="delete", content=None),
            command("th:{h1}"),
        ]

        with pytest.raises(TableUpdateError) as exc_info:
            validate_table_updates(commands)

        error = exc_info.value
        assert error.targets == ["td:{c1}", "tr:{r1}", "th:{h1}"]
        message = str(error)
        for target in error.targets:
            assert target in message
        assert "table:{table-data-id}" in message
        assert "replace" in message.lower()

    def test_is_validation_error(self):
        with pytest.raises(OneNoteValidationError):
            validate_table_updates([command("td:{c1}")])

    def test_prefix_only(self):
        assert find_table_subelement_targets([command("#td-notes"), command("table:{td:1}")]) == []
