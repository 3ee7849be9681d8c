"""
In-memory import review sessions.

One session per uploaded file: the parsed rows plus the mapping the operator
is reviewing. Sessions expire after a TTL and are dropped on upload or cancel.
Single process only; nothing here is persisted.
"""
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Optional, Sequence
import structlog

from config import settings
from config.import_fields import TRESPASS_RECORD_FIELDS
from exceptions import ImportSessionNotFoundError
from models.field_mapping import (
    FieldDefinition,
    ColumnMappingResponse,
    ImportSessionResponse,
)
from parsers.upload_parser import ParsedUpload
from services.header_mapper import MappingSession

logger = structlog.get_logger(__name__)


@dataclass
class ImportSession:
    """Uploaded rows and the mapping under review."""
    id: str
    filename: str
    rows: list[dict[str, str]]
    mapping: MappingSession
    created_at: datetime = field(default_factory=datetime.now)
    expires_at: datetime = field(default_factory=datetime.now)

    @property
    def headers(self) -> list[str]:
        return self.mapping.source_columns

    def to_response(self) -> ImportSessionResponse:
        return ImportSessionResponse(
            session_id=self.id,
            filename=self.filename,
            row_count=len(self.rows),
            columns=[
                ColumnMappingResponse(
                    source_column=column,
                    target_key=key,
                    available_keys=[f.key for f in self.mapping.available_fields(column)],
                )
                for column, key in self.mapping.mapping.items()
            ],
            unmapped_required=self.mapping.unmapped_required,
            can_confirm=self.mapping.can_confirm,
            expires_at=self.expires_at,
        )


_sessions: dict[str, ImportSession] = {}


def create_session(
    parsed: ParsedUpload,
    catalog: Sequence[FieldDefinition] = TRESPASS_RECORD_FIELDS,
    ttl_minutes: Optional[int] = None,
) -> ImportSession:
    """Auto-map the upload's headers and store a new session."""
    ttl = ttl_minutes if ttl_minutes is not None else settings.import_session_ttl_minutes
    now = datetime.now()

    session = ImportSession(
        id=str(uuid.uuid4()),
        filename=parsed.filename,
        rows=parsed.rows,
        mapping=MappingSession(parsed.headers, catalog),
        created_at=now,
        expires_at=now + timedelta(minutes=ttl),
    )
    _sessions[session.id] = session
    _cleanup_expired()

    logger.info(
        "import_session_created",
        session_id=session.id,
        filename=parsed.filename,
        row_count=len(parsed.rows),
        unmapped_required=[f.key for f in session.mapping.unmapped_required]
    )

    return session


def get_session(session_id: str) -> ImportSession:
    """
    Retrieve a live session.

    Raises:
        ImportSessionNotFoundError: Unknown or expired id
    """
    session = _sessions.get(session_id)
    if session is None:
        raise ImportSessionNotFoundError(session_id)
    if datetime.now() > session.expires_at:
        del _sessions[session_id]
        logger.info("import_session_expired", session_id=session_id)
        raise ImportSessionNotFoundError(session_id)
    return session


def delete_session(session_id: str) -> None:
    """Remove session after upload or cancel."""
    if _sessions.pop(session_id, None) is not None:
        logger.info("import_session_discarded", session_id=session_id)


def clear_sessions() -> None:
    """Drop every session."""
    _sessions.clear()


def _cleanup_expired() -> None:
    """Remove all expired entries."""
    now = datetime.now()
    expired = [k for k, s in _sessions.items() if now > s.expires_at]
    for k in expired:
        del _sessions[k]
