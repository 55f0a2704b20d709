"""
OneNote Errors
페이지 업데이트/전송 파이프라인 예외 정의
"""

from typing import List, Optional


class OneNoteError(Exception):
    """OneNote 파이프라인 기본 예외"""
    pass


class OneNoteValidationError(OneNoteError):
    """로컬 검증 실패 (ID, 커맨드 목록 등) - 재시도하지 않음"""
    pass


class TableUpdateError(OneNoteValidationError):
    """표 하위 요소(td/th/tr)를 개별 대상으로 지정한 업데이트"""

    def __init__(self, message: str, targets: List[str]):
        super().__init__(message)
        self.targets = list(targets)


class OneNoteRemoteError(OneNoteError):
    """Graph API가 실패를 반환 (상태 코드/본문 포함)"""

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        body: Optional[str] = None,
        operation: Optional[str] = None,
    ):
        super().__init__(message)
        self.status = status
        self.body = body
        self.operation = operation

    def __str__(self) -> str:
        message = super().__str__()
        if self.status is not None:
            message = f"{message} (HTTP {self.status})"
        if self.body:
            message = f"{message}: {self.body}"
        return message


class OneNoteTimeoutError(OneNoteError):
    """비동기 작업 폴링 횟수 초과"""

    def __init__(self, message: str, operation_id: str, attempts: int):
        super().__init__(message)
        self.operation_id = operation_id
        self.attempts = attempts


class OneNoteAuthError(OneNoteError):
    """토큰 없음 또는 갱신 실패"""
    pass


class OneNoteTransportError(OneNoteError):
    """네트워크 오류 (연결 실패, 타임아웃)"""
    pass
