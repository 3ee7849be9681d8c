"""
Upload parsers module.
"""

from parsers.upload_parser import (
    parse_upload,
    apply_mapping,
    build_template_csv,
    ParsedUpload,
    MappedRows,
)

__all__ = [
    "parse_upload",
    "apply_mapping",
    "build_template_csv",
    "ParsedUpload",
    "MappedRows",
]
