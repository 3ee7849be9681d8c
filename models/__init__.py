"""
Pydantic models for request/response validation.
"""

from models.base import BaseSchema
from models.field_mapping import (
    SKIP,
    FieldDefinition,
    MappingEntry,
    MappingResult,
    MappingUpdateRequest,
    ColumnMappingResponse,
    ImportSessionResponse,
    RowError,
    UploadSummary,
)
from models.trespass_record import (
    TrespassRecordCreate,
    MappedRecordsResponse,
    RecordUploadResponse,
)

__all__ = [
    "BaseSchema",
    "SKIP",
    "FieldDefinition",
    "MappingEntry",
    "MappingResult",
    "MappingUpdateRequest",
    "ColumnMappingResponse",
    "ImportSessionResponse",
    "RowError",
    "UploadSummary",
    "TrespassRecordCreate",
    "MappedRecordsResponse",
    "RecordUploadResponse",
]
