"""
Field mapping schemas.

Types shared by the header mapper, the import session store and the API.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from models.base import BaseSchema


# Target key meaning "do not import this column"
SKIP = "skip"


class FieldDefinition(BaseModel):
    """One column of the destination schema that an import can populate."""

    model_config = ConfigDict(frozen=True)

    key: str = Field(..., min_length=1, description="Stable field identifier")
    label: str = Field(..., description="Human-readable name, also used for matching")
    required: bool = Field(False, description="Import must supply a value")


class MappingEntry(BaseModel):
    """Outcome for one source column."""

    source_column: str
    target_key: str = Field(SKIP, description="Field key or 'skip'")

    @property
    def is_skip(self) -> bool:
        return self.target_key == SKIP


class MappingResult(BaseModel):
    """
    Auto-map output.

    entries holds exactly one entry per distinct source column, in upload order.
    """

    entries: dict[str, MappingEntry] = Field(default_factory=dict)
    unmapped_required: list[FieldDefinition] = Field(default_factory=list)

    def as_mapping(self) -> dict[str, str]:
        """Source column -> target key, skip entries included."""
        return {column: entry.target_key for column, entry in self.entries.items()}


# ===================
# API SCHEMAS
# ===================

class MappingUpdateRequest(BaseSchema):
    """Manual override of one column."""
    source_column: str = Field(..., description="Header as shown in the upload")
    target_key: str = Field(
        ...,
        min_length=1,
        description="Catalog field key, or 'skip'",
        examples=["first_name", "skip"]
    )


class ColumnMappingResponse(BaseModel):
    """One review row: column, current target and the fields it may pick."""
    source_column: str
    target_key: str
    available_keys: list[str]


class ImportSessionResponse(BaseModel):
    """Current state of an import review session."""
    session_id: str
    filename: Optional[str] = None
    row_count: int
    columns: list[ColumnMappingResponse]
    unmapped_required: list[FieldDefinition]
    can_confirm: bool
    expires_at: datetime


class RowError(BaseModel):
    """A data row that could not become a record."""
    row: int = Field(..., ge=1, description="1-based data row number")
    error: str
    missing_fields: list[str] = Field(default_factory=list)


class UploadSummary(BaseModel):
    """Result of writing confirmed records."""
    inserted: int = 0
    updated: int = 0

    @property
    def count(self) -> int:
        return self.inserted + self.updated
