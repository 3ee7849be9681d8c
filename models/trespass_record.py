"""
Trespass record schemas.

Shape of a record built from one uploaded row after the mapping is confirmed.
"""

from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

from models.base import BaseSchema
from models.field_mapping import RowError, UploadSummary

TRUE_VALUES = ("true", "1")

# Characters; roughly a 3 MB image once base64 encoded
PHOTO_MAX_LENGTH = 4_000_000


class TrespassRecordCreate(BaseSchema):
    """
    Create a trespass record.

    Required: first_name, last_name, school_id, expiration_date, trespassed_from
    """

    # Required
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    school_id: str = Field(..., min_length=1, max_length=50)
    expiration_date: str = Field(..., min_length=1, examples=["2026-10-15"])
    trespassed_from: str = Field(..., min_length=1)

    # Optional
    aka: Optional[str] = None
    date_of_birth: Optional[str] = None
    incident_date: Optional[str] = None
    incident_location: Optional[str] = None
    description: Optional[str] = None
    status: str = Field(default="active")
    is_current_student: bool = False
    affiliation: Optional[str] = None
    current_school: Optional[str] = None
    guardian_first_name: Optional[str] = None
    guardian_last_name: Optional[str] = None
    guardian_phone: Optional[str] = None
    school_contact: Optional[str] = None
    notes: Optional[str] = None
    photo: Optional[str] = None

    @field_validator(
        "aka", "date_of_birth", "incident_date", "incident_location",
        "description", "affiliation", "current_school", "guardian_first_name",
        "guardian_last_name", "guardian_phone", "school_contact", "notes", "photo",
        mode="before",
    )
    @classmethod
    def empty_to_none(cls, v: Any) -> Any:
        """Blank spreadsheet cells are stored as NULL."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("photo")
    @classmethod
    def check_photo_size(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and len(v) > PHOTO_MAX_LENGTH:
            raise ValueError("Photo is too large. Please use a smaller image (max 3MB).")
        return v

    @field_validator("status", mode="before")
    @classmethod
    def default_status(cls, v: Any) -> Any:
        if v is None or (isinstance(v, str) and not v.strip()):
            return "active"
        return v

    @field_validator("is_current_student", mode="before")
    @classmethod
    def parse_flag(cls, v: Any) -> bool:
        """Only 'true' and '1' count as set."""
        if isinstance(v, bool):
            return v
        if v is None:
            return False
        return str(v).strip().lower() in TRUE_VALUES


class MappedRecordsResponse(BaseModel):
    """Records produced by a confirmed mapping, before upload."""
    session_id: str
    mapping: dict[str, str]
    records: list[TrespassRecordCreate]
    errors: list[RowError]


class RecordUploadResponse(BaseModel):
    """Upload outcome."""
    success: bool = True
    count: int
    inserted: int
    updated: int
    skipped_rows: list[RowError] = Field(default_factory=list)

    @classmethod
    def from_summary(
        cls,
        summary: UploadSummary,
        skipped_rows: list[RowError]
    ) -> "RecordUploadResponse":
        return cls(
            count=summary.count,
            inserted=summary.inserted,
            updated=summary.updated,
            skipped_rows=skipped_rows,
        )
