"""
Trespass record import API routes.

Flow: upload a file → review the proposed mapping → override columns →
confirm → upload records into the caller's tenant.
"""

from fastapi import APIRouter, File, Header, UploadFile
from fastapi.responses import JSONResponse, Response
from io import BytesIO
import structlog

from config import settings
from config.import_fields import TRESPASS_RECORD_FIELDS, TEMPLATE_FILENAME
from models.field_mapping import (
    FieldDefinition,
    ImportSessionResponse,
    MappingUpdateRequest,
)
from models.trespass_record import MappedRecordsResponse, RecordUploadResponse
from parsers.upload_parser import parse_upload, apply_mapping, build_template_csv
from services import import_session_service
from services.record_upload_service import get_record_upload_service
from exceptions import (
    AppError,
    ValidationError,
    UploadTooLargeError,
)

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/imports", tags=["Imports"])


# ===================
# EXCEPTION HANDLER
# ===================

def handle_error(e: Exception) -> JSONResponse:
    """Convert exception to JSON response."""
    if isinstance(e, AppError):
        return JSONResponse(
            status_code=e.status_code,
            content=e.to_dict()
        )
    # Unexpected error
    logger.error("unexpected_error", error=str(e), type=type(e).__name__)
    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred"
            }
        }
    )


# ===================
# CATALOG
# ===================

@router.get("/fields", response_model=list[FieldDefinition])
async def list_fields():
    """Fields an upload can be mapped to, required ones first."""
    return list(TRESPASS_RECORD_FIELDS)


@router.get("/template")
async def download_template():
    """CSV template with every importable column and a sample row."""
    content = build_template_csv(TRESPASS_RECORD_FIELDS)
    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{TEMPLATE_FILENAME}"'}
    )


# ===================
# SESSIONS
# ===================

@router.post("/sessions", response_model=ImportSessionResponse, status_code=201)
async def create_import_session(file: UploadFile = File(...)):
    """
    Upload a CSV or Excel file and get the proposed column mapping.

    Raises:
        413: File too large
        422: Unsupported file type, unreadable file, or no data rows
    """
    logger.info(
        "import_upload_started",
        filename=file.filename,
        content_type=file.content_type
    )

    try:
        content = await file.read()
        if len(content) > settings.max_upload_bytes:
            raise UploadTooLargeError(len(content), settings.max_upload_bytes)

        parsed = parse_upload(BytesIO(content), file.filename or "")
        session = import_session_service.create_session(parsed)
        return session.to_response()

    except Exception as e:
        return handle_error(e)


@router.get("/sessions/{session_id}", response_model=ImportSessionResponse)
async def get_import_session(session_id: str):
    """
    Current mapping and its confirmation state.

    Raises:
        404: Session not found or expired
    """
    try:
        return import_session_service.get_session(session_id).to_response()
    except Exception as e:
        return handle_error(e)


@router.patch("/sessions/{session_id}/mapping", response_model=ImportSessionResponse)
async def update_mapping(session_id: str, data: MappingUpdateRequest):
    """
    Point one column at a different field, or at 'skip'.

    Raises:
        404: Session or column not found
        409: Field already mapped to another column
        422: Unknown field
    """
    try:
        session = import_session_service.get_session(session_id)
        session.mapping.assign(data.source_column, data.target_key)
        return session.to_response()
    except Exception as e:
        return handle_error(e)


@router.post("/sessions/{session_id}/confirm", response_model=MappedRecordsResponse)
async def confirm_mapping(session_id: str):
    """
    Confirm the mapping and preview the records it produces.

    Raises:
        404: Session not found
        422: Required fields still unmapped
    """
    try:
        session = import_session_service.get_session(session_id)
        mapping = session.mapping.confirm()
        mapped = apply_mapping(session.rows, mapping, session.mapping.catalog)

        return MappedRecordsResponse(
            session_id=session_id,
            mapping=mapping,
            records=mapped.records,
            errors=mapped.errors
        )
    except Exception as e:
        return handle_error(e)


@router.post("/sessions/{session_id}/upload", response_model=RecordUploadResponse)
async def upload_records(
    session_id: str,
    user_id: str = Header(..., alias="X-User-Id"),
):
    """
    Write the confirmed records into the caller's tenant.

    The session is discarded once the records are written.

    Raises:
        403: Caller has no tenant or may not upload
        404: Session or user profile not found
        422: Required fields unmapped, or no row produced a record
        500: Some records failed to write
    """
    try:
        session = import_session_service.get_session(session_id)
        mapping = session.mapping.confirm()
        mapped = apply_mapping(session.rows, mapping, session.mapping.catalog)

        if not mapped.records:
            raise ValidationError(
                code="NO_VALID_RECORDS",
                message="No rows contain all required fields",
                details={"errors": [err.model_dump() for err in mapped.errors]}
            )

        service = get_record_upload_service()
        summary = service.upload_records(user_id, mapped.records)
        import_session_service.delete_session(session_id)

        return RecordUploadResponse.from_summary(summary, mapped.errors)

    except Exception as e:
        return handle_error(e)


@router.delete("/sessions/{session_id}", status_code=204)
async def cancel_import(session_id: str):
    """Discard an import session. Unknown ids are ignored."""
    import_session_service.delete_session(session_id)
    return Response(status_code=204)
