"""
Custom exceptions module.

Routes turn any AppError into the standard error envelope.
"""

from exceptions.errors import (
    # Base exceptions
    AppError,
    NotFoundError,
    ValidationError,
    ConflictError,
    PermissionDeniedError,
    DatabaseError,

    # Upload parser
    UploadParseError,
    UnsupportedFileTypeError,
    UploadTooLargeError,

    # Field mapping
    ImportSessionNotFoundError,
    SourceColumnNotFoundError,
    UnknownFieldError,
    FieldAlreadyMappedError,
    MappingIncompleteError,

    # Record upload
    ProfileNotFoundError,
    TenantMissingError,
    UploadPermissionError,
    RecordUploadError,
)

__all__ = [
    # Base
    "AppError",
    "NotFoundError",
    "ValidationError",
    "ConflictError",
    "PermissionDeniedError",
    "DatabaseError",

    # Upload parser
    "UploadParseError",
    "UnsupportedFileTypeError",
    "UploadTooLargeError",

    # Field mapping
    "ImportSessionNotFoundError",
    "SourceColumnNotFoundError",
    "UnknownFieldError",
    "FieldAlreadyMappedError",
    "MappingIncompleteError",

    # Record upload
    "ProfileNotFoundError",
    "TenantMissingError",
    "UploadPermissionError",
    "RecordUploadError",
]
