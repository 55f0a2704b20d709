"""
MCP OneNote Pages Module
Microsoft Graph API OneNote 페이지 내용 업데이트 / 섹션 간 복사·이동
"""

from .onenote_service import OneNoteService
from .onenote_update import OneNoteContentUpdater
from .onenote_transfer import OneNotePageTransfer, PollPolicy
from .onenote_resources import OneNoteResourceFetcher
from .graph_onenote_client import GraphOneNoteClient
from .graph_transport import GraphTransport, GraphResponse
from .onenote_auth import StaticTokenProvider, RefreshTokenProvider
from .onenote_config import OneNoteConfig, load_config
from .onenote_guardrail import validate_table_updates
from .onenote_html import rewrite_html, scan_embedded_references, RewriteResult
from .onenote_multipart import assemble_update_payload, MultipartPayload
from .onenote_ids import (
    sanitize_onenote_id,
    extract_page_item_id,
    extract_page_id_from_location,
)
from .onenote_errors import (
    OneNoteError,
    OneNoteValidationError,
    TableUpdateError,
    OneNoteRemoteError,
    OneNoteTimeoutError,
    OneNoteAuthError,
    OneNoteTransportError,
)
from .onenote_types import (
    PageAction,
    Position,
    OperationStatus,
    UpdateCommand,
    ResourcePart,
    PageItemInfo,
    PageItemData,
    AsyncOperation,
    CopyResult,
    MoveResult,
    serialize_commands,
)

__all__ = [
    # Service (Facade)
    "OneNoteService",
    # Pipeline
    "OneNoteContentUpdater",
    "OneNotePageTransfer",
    "PollPolicy",
    "OneNoteResourceFetcher",
    "validate_table_updates",
    "rewrite_html",
    "scan_embedded_references",
    "RewriteResult",
    "assemble_update_payload",
    "MultipartPayload",
    # Client / transport
    "GraphOneNoteClient",
    "GraphTransport",
    "GraphResponse",
    "StaticTokenProvider",
    "RefreshTokenProvider",
    # Config
    "OneNoteConfig",
    "load_config",
    # IDs
    "sanitize_onenote_id",
    "extract_page_item_id",
    "extract_page_id_from_location",
    # Errors
    "OneNoteError",
    "OneNoteValidationError",
    "TableUpdateError",
    "OneNoteRemoteError",
    "OneNoteTimeoutError",
    "OneNoteAuthError",
    "OneNoteTransportError",
    # Types
    "PageAction",
    "Position",
    "OperationStatus",
    "UpdateCommand",
    "ResourcePart",
    "PageItemInfo",
    "PageItemData",
    "AsyncOperation",
    "CopyResult",
    "MoveResult",
    "serialize_commands",
]

__version__ = "1.0.0"
