"""
Upload parser for trespass record imports.

Reads an uploaded CSV or Excel file into its header row and data rows,
and turns rows into record payloads once a column mapping is confirmed.
"""

import csv
from dataclasses import dataclass, field
from io import BytesIO, StringIO
from pathlib import Path
from typing import Sequence, Union
import structlog

import pandas as pd
from pydantic import ValidationError as PydanticValidationError

from config.import_fields import SUPPORTED_EXTENSIONS, TEMPLATE_SAMPLE_ROW
from exceptions import UploadParseError, UnsupportedFileTypeError
from models.field_mapping import SKIP, FieldDefinition, RowError
from models.trespass_record import TrespassRecordCreate
from utils.text_utils import clean_cell

logger = structlog.get_logger(__name__)


@dataclass
class ParsedUpload:
    """Header row and data rows of an uploaded file."""
    filename: str
    headers: list[str]
    rows: list[dict[str, str]] = field(default_factory=list)

    @property
    def row_count(self) -> int:
        return len(self.rows)


@dataclass
class MappedRows:
    """Records built from a confirmed mapping, plus rows that were left out."""
    records: list[TrespassRecordCreate] = field(default_factory=list)
    errors: list[RowError] = field(default_factory=list)

    @property
    def success(self) -> bool:
        """True if every row became a record."""
        return len(self.errors) == 0


def parse_upload(
    file: Union[str, Path, BytesIO],
    filename: str,
) -> ParsedUpload:
    """
    Parse an uploaded CSV or Excel file.

    Every cell is read as text; surrounding whitespace is stripped and fully
    blank rows are dropped.

    Args:
        file: File path or file-like object
        filename: Original file name, used to pick the reader

    Returns:
        ParsedUpload with headers in file order

    Raises:
        UnsupportedFileTypeError: Extension is not .csv or .xlsx
        UploadParseError: File cannot be read, or has no data rows
    """
    extension = Path(filename).suffix.lower()
    if extension not in SUPPORTED_EXTENSIONS:
        raise UnsupportedFileTypeError(filename, SUPPORTED_EXTENSIONS)

    logger.info("parsing_upload", filename=filename, extension=extension)

    try:
        if extension == ".csv":
            df = pd.read_csv(
                file,
                dtype=str,
                keep_default_na=False,
                encoding="utf-8-sig",
                skip_blank_lines=True,
            )
        else:
            df = pd.read_excel(file, dtype=str, keep_default_na=False, engine="openpyxl")
    except pd.errors.EmptyDataError:
        raise UploadParseError(
            message="File must contain headers and at least one record",
            details={"filename": filename}
        )
    except Exception as e:
        logger.error("upload_read_failed", filename=filename, error=str(e))
        raise UploadParseError(
            message="Failed to read uploaded file",
            details={"filename": filename, "original_error": str(e)}
        )

    headers = _dedupe_headers([clean_cell(str(col)) for col in df.columns])
    df.columns = headers

    rows = []
    for record in df.to_dict(orient="records"):
        row = {
            header: "" if pd.isna(value) else clean_cell(value)
            for header, value in record.items()
        }
        if any(row.values()):
            rows.append(row)

    if not headers or not rows:
        raise UploadParseError(
            message="File must contain headers and at least one record",
            details={"filename": filename, "headers": headers}
        )

    logger.info(
        "upload_parsed",
        filename=filename,
        column_count=len(headers),
        row_count=len(rows)
    )

    return ParsedUpload(filename=filename, headers=headers, rows=rows)


def _dedupe_headers(headers: list[str]) -> list[str]:
    """
    Suffix repeated headers the way pandas does (".1", ".2", ...).

    pandas only renames exact repeats; "Notes" and "Notes " collide once
    whitespace is stripped.
    """
    taken: set[str] = set()
    result = []
    for header in headers:
        name, suffix = header, 0
        while name in taken:
            suffix += 1
            name = f"{header}.{suffix}"
        if name != header:
            logger.warning("duplicate_header_renamed", header=header, renamed_to=name)
        taken.add(name)
        result.append(name)
    return result


def apply_mapping(
    rows: Sequence[dict[str, str]],
    mapping: dict[str, str],
    catalog: Sequence[FieldDefinition],
) -> MappedRows:
    """
    Build record payloads from data rows.

    Each mapped column's value is copied to its field key; skip entries are
    ignored. Rows with an empty required field are reported, not imported.

    Args:
        rows: Data rows keyed by source header
        mapping: Confirmed source column -> field key
        catalog: Target fields, used to find the required keys

    Returns:
        MappedRows with records and per-row errors (1-based row numbers)
    """
    required = [f.key for f in catalog if f.required]
    result = MappedRows()

    for index, row in enumerate(rows, start=1):
        values = {
            key: row.get(column, "")
            for column, key in mapping.items()
            if key != SKIP
        }

        missing = [key for key in required if not values.get(key)]
        if missing:
            result.errors.append(RowError(
                row=index,
                error=f"Missing required values: {', '.join(missing)}",
                missing_fields=missing
            ))
            continue

        try:
            result.records.append(TrespassRecordCreate(**values))
        except PydanticValidationError as e:
            result.errors.append(RowError(
                row=index,
                error="; ".join(
                    f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
                    for err in e.errors()
                )
            ))

    logger.info(
        "mapping_applied",
        records=len(result.records),
        skipped=len(result.errors)
    )

    return result


def build_template_csv(catalog: Sequence[FieldDefinition]) -> str:
    """
    CSV template with every field key and one quoted sample row.
    """
    output = StringIO()
    csv.writer(output, lineterminator="\n").writerow([f.key for f in catalog])
    csv.writer(output, quoting=csv.QUOTE_ALL, lineterminator="").writerow(
        [TEMPLATE_SAMPLE_ROW.get(f.key, "") for f in catalog]
    )
    return output.getvalue()
