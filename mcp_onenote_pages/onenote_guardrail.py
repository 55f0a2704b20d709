"""
OneNote Guardrail - 표 하위 요소 개별 업데이트 차단

OneNote 는 표를 통째로 교체하는 업데이트만 지원합니다.
td/th/tr 대상 커맨드는 네트워크 호출 전에 거부합니다.
"""

import logging
from typing import List

from .onenote_errors import TableUpdateError
from .onenote_types import UpdateCommand

logger = logging.getLogger(__name__)

TABLE_SUBELEMENT_PREFIXES = ("td:", "th:", "tr:")

TABLE_UPDATE_GUIDANCE = """TABLE UPDATE RESTRICTION: You are attempting to update individual table elements ({targets}).

OneNote requires that tables be updated as complete units, not individual cells or rows.

SOLUTION: Instead of updating individual table elements, you must:
1. Target the entire table element (table:{{table-data-id}})
2. Replace the complete table HTML with your updated content
3. Include all table structure (table, tr, td/th elements) in your replacement

Example of CORRECT approach:
- Target: "table:{{table-data-id}}"
- Action: "replace"
- Content: "<table>...complete table HTML...</table>"

Example of INCORRECT approach (what you're doing):
- Target: "td:{{cell-data-id}}"
- Action: "replace"
- Content: "<td>new content</td>"

This restriction ensures table integrity and prevents layout corruption in OneNote."""


def find_table_subelement_targets(commands: List[UpdateCommand]) -> List[str]:
    """td:/th:/tr: 로 시작하는 대상 목록 (커맨드 순서)"""
    return [
        command.target
        for command in commands
        if command.target.lower().startswith(TABLE_SUBELEMENT_PREFIXES)
    ]


def validate_table_updates(commands: List[UpdateCommand]):
    """
    표 하위 요소 대상 커맨드가 있으면 TableUpdateError

    Raises:
        TableUpdateError: 모든 위반 대상과 해결 방법 포함
    """
    targets = find_table_subelement_targets(commands)
    if not targets:
        return

    logger.warning(f"Rejected table sub-element update targets: {targets}")
    raise TableUpdateError(
        TABLE_UPDATE_GUIDANCE.format(targets=", ".join(targets)),
        targets=targets,
    )
