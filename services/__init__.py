"""
Business logic services.

Each service handles one domain area.
"""

from services.header_mapper import (
    SIMILARITY_THRESHOLD,
    compute_similarity,
    levenshtein_distance,
    auto_map,
    find_unmapped_required,
    MappingSession,
)
from services.record_upload_service import RecordUploadService, get_record_upload_service

__all__ = [
    "SIMILARITY_THRESHOLD",
    "compute_similarity",
    "levenshtein_distance",
    "auto_map",
    "find_unmapped_required",
    "MappingSession",
    "RecordUploadService",
    "get_record_upload_service",
]
