"""
Custom exception classes for the application.

Every error returned by the API is an AppError rendered with to_dict().
"""

from typing import Optional, Any
from datetime import datetime


class AppError(Exception):
    """
    Base exception for all application errors.

    All custom exceptions inherit from this.

    Attributes:
        code: Error code (e.g., "IMPORT_SESSION_NOT_FOUND")
        message: Human-readable message
        status_code: HTTP status code
        details: Additional context
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: Optional[dict[str, Any]] = None
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.timestamp = datetime.utcnow().isoformat()
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert to API response format."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
                "timestamp": self.timestamp
            }
        }


class NotFoundError(AppError):
    """Resource not found (404)."""

    def __init__(
        self,
        resource: str,
        identifier: str,
        code: Optional[str] = None
    ):
        super().__init__(
            code=code or f"{resource.upper()}_NOT_FOUND",
            message=f"{resource} not found",
            status_code=404,
            details={"id": identifier}
        )


class ValidationError(AppError):
    """Validation failed (422)."""

    def __init__(
        self,
        message: str,
        code: str = "VALIDATION_ERROR",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=422,
            details=details
        )


class ConflictError(AppError):
    """Conflict with existing resource (409)."""

    def __init__(
        self,
        message: str,
        code: str = "CONFLICT",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=409,
            details=details
        )


class PermissionDeniedError(AppError):
    """Caller may not perform this action (403)."""

    def __init__(
        self,
        message: str,
        code: str = "PERMISSION_DENIED",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=403,
            details=details
        )


class DatabaseError(AppError):
    """Database operation failed (500)."""

    def __init__(
        self,
        operation: str,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code="DATABASE_ERROR",
            message=f"Database {operation} failed: {message}",
            status_code=500,
            details={"operation": operation, **(details or {})}
        )


# ===================
# UPLOAD PARSER ERRORS
# ===================

class UploadParseError(ValidationError):
    """Uploaded file could not be read as a table."""

    def __init__(
        self,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code="UPLOAD_PARSE_ERROR",
            message=message,
            details=details
        )


class UnsupportedFileTypeError(ValidationError):
    """Uploaded file extension is not accepted."""

    def __init__(self, filename: str, supported: tuple[str, ...]):
        super().__init__(
            code="UNSUPPORTED_FILE_TYPE",
            message="Please upload a CSV or Excel file",
            details={"filename": filename, "supported": list(supported)}
        )


class UploadTooLargeError(AppError):
    """Uploaded file exceeds the configured size limit (413)."""

    def __init__(self, size: int, limit: int):
        super().__init__(
            code="UPLOAD_TOO_LARGE",
            message=f"File is too large ({size} bytes, max {limit})",
            status_code=413,
            details={"size": size, "limit": limit}
        )


# ===================
# FIELD MAPPING ERRORS
# ===================

class ImportSessionNotFoundError(NotFoundError):
    """Import session expired or never existed."""

    def __init__(self, session_id: str):
        super().__init__(
            resource="Import session",
            identifier=session_id,
            code="IMPORT_SESSION_NOT_FOUND"
        )


class SourceColumnNotFoundError(NotFoundError):
    """Column is not part of the uploaded header row."""

    def __init__(self, source_column: str):
        super().__init__(
            resource="Source column",
            identifier=source_column,
            code="SOURCE_COLUMN_NOT_FOUND"
        )


class UnknownFieldError(ValidationError):
    """Target key is neither a catalog field nor skip."""

    def __init__(self, target_key: str, valid: list[str]):
        super().__init__(
            code="UNKNOWN_FIELD",
            message=f"Unknown field: {target_key}",
            details={"provided": target_key, "valid": valid}
        )


class FieldAlreadyMappedError(ConflictError):
    """Target field is already claimed by another column."""

    def __init__(self, target_key: str, claimed_by: str):
        super().__init__(
            code="FIELD_ALREADY_MAPPED",
            message=f"Field {target_key} is already mapped to column '{claimed_by}'",
            details={"target_key": target_key, "claimed_by": claimed_by}
        )


class MappingIncompleteError(ValidationError):
    """Required fields have no source column; confirmation is blocked."""

    def __init__(self, missing_labels: list[str]):
        super().__init__(
            code="MAPPING_INCOMPLETE",
            message=f"Missing required fields: {', '.join(missing_labels)}",
            details={"missing_required": missing_labels}
        )


# ===================
# RECORD UPLOAD ERRORS
# ===================

class ProfileNotFoundError(NotFoundError):
    """Uploader has no user profile."""

    def __init__(self, user_id: str):
        super().__init__(
            resource="User profile",
            identifier=user_id,
            code="USER_PROFILE_NOT_FOUND"
        )


class TenantMissingError(PermissionDeniedError):
    """Uploader profile has no tenant to write into."""

    def __init__(self, user_id: str):
        super().__init__(
            code="TENANT_MISSING",
            message="Your profile is missing a tenant ID. Please contact your administrator.",
            details={"user_id": user_id}
        )


class UploadPermissionError(PermissionDeniedError):
    """Uploader role may not create records."""

    def __init__(self, role: Optional[str], allowed: tuple[str, ...]):
        super().__init__(
            code="UPLOAD_NOT_PERMITTED",
            message="You do not have permission to upload records.",
            details={"role": role, "allowed": list(allowed)}
        )


class RecordUploadError(AppError):
    """One or more records failed to upsert (500)."""

    def __init__(self, errors: list[str], inserted: int, updated: int):
        super().__init__(
            code="RECORD_UPLOAD_FAILED",
            message=f"Failed to upsert {len(errors)} records. First error: {errors[0]}",
            status_code=500,
            details={"errors": errors, "inserted": inserted, "updated": updated}
        )
