"""
Header mapper — propose and review column-to-field mappings for uploads.

Matches uploaded column headers against the import catalog with a normalized
Levenshtein similarity, then lets an operator override individual columns
before the mapping is confirmed.

Assignment is a single greedy left-to-right pass: each column takes its best
still-available field, and a later column never takes a field back from an
earlier one even when it would match better. Keep it that way; callers depend
on which column wins a contested field.
"""

from collections.abc import Iterable, Sequence
from typing import Optional

import structlog
from rapidfuzz.distance import Levenshtein

from exceptions import (
    SourceColumnNotFoundError,
    UnknownFieldError,
    FieldAlreadyMappedError,
    MappingIncompleteError,
)
from models.field_mapping import SKIP, FieldDefinition, MappingEntry, MappingResult
from utils.text_utils import normalize_header

logger = structlog.get_logger(__name__)

# Inclusive: a score of exactly 0.7 maps
SIMILARITY_THRESHOLD = 0.7


def levenshtein_distance(a: str, b: str) -> int:
    """Edit distance with unit-cost insertion, deletion and substitution."""
    return Levenshtein.distance(a, b)


def compute_similarity(a: str, b: str) -> float:
    """
    Similarity of two headers in [0, 1].

    Both strings are normalized (lowercase, ASCII letters and digits only).
    Equal normalized strings score 1.0; two strings that both normalize to
    nothing score 0.0.

    Examples:
        compute_similarity("First Name", "first_name") → 1.0
        compute_similarity("fname", "firstname") → 0.555...
    """
    norm_a = normalize_header(a)
    norm_b = normalize_header(b)

    longest = max(len(norm_a), len(norm_b))
    if longest == 0:
        return 0.0

    if norm_a == norm_b:
        return 1.0

    return (longest - levenshtein_distance(norm_a, norm_b)) / longest


def score_field(source_column: str, field: FieldDefinition) -> float:
    """Best of label similarity and key similarity."""
    return max(
        compute_similarity(source_column, field.label),
        compute_similarity(source_column, field.key),
    )


def _check_catalog(catalog: Sequence[FieldDefinition]) -> None:
    """Reject catalogs the mapper cannot reason about."""
    seen: set[str] = set()
    for field in catalog:
        if field.key == SKIP:
            raise ValueError(f"'{SKIP}' is reserved and cannot be a field key")
        if field.key in seen:
            raise ValueError(f"Duplicate field key in catalog: {field.key}")
        seen.add(field.key)


def _check_columns(source_columns: Iterable[str]) -> list[str]:
    if isinstance(source_columns, str):
        raise TypeError("source_columns must be a sequence of strings, not a string")
    columns = list(source_columns)
    for column in columns:
        if not isinstance(column, str):
            raise TypeError(f"Source column must be a string, got {type(column).__name__}")
    return columns


def find_unmapped_required(
    mapping: dict[str, str],
    catalog: Sequence[FieldDefinition],
) -> list[FieldDefinition]:
    """Required catalog fields that no column maps to, in catalog order."""
    mapped = {key for key in mapping.values() if key != SKIP}
    return [f for f in catalog if f.required and f.key not in mapped]


def auto_map(
    source_columns: Iterable[str],
    catalog: Sequence[FieldDefinition],
) -> MappingResult:
    """
    Propose a mapping from source columns to catalog fields.

    Columns are processed in upload order. Each one is scored against every
    field not yet taken in this pass; the strictly highest score wins, ties go
    to the field listed first. A best score of at least SIMILARITY_THRESHOLD
    assigns the field and takes it out of play, anything lower maps to skip.

    A header that repeats keeps the outcome of its first occurrence.

    Args:
        source_columns: Header row of the upload, original text
        catalog: Ordered target fields

    Returns:
        MappingResult with one entry per distinct column

    Raises:
        ValueError: Catalog has duplicate keys or uses the skip sentinel
        TypeError: A column is not a string
    """
    columns = _check_columns(source_columns)
    _check_catalog(catalog)

    entries: dict[str, MappingEntry] = {}
    consumed: set[str] = set()

    for column in columns:
        if column in entries:
            logger.debug("duplicate_source_column", source_column=column)
            continue

        best_field: Optional[FieldDefinition] = None
        best_score = -1.0

        for field in catalog:
            if field.key in consumed:
                continue
            score = score_field(column, field)
            if score > best_score:
                best_field, best_score = field, score

        if best_field is not None and best_score >= SIMILARITY_THRESHOLD:
            entries[column] = MappingEntry(source_column=column, target_key=best_field.key)
            consumed.add(best_field.key)
        else:
            entries[column] = MappingEntry(source_column=column, target_key=SKIP)

    mapping = {column: entry.target_key for column, entry in entries.items()}
    unmapped = find_unmapped_required(mapping, catalog)

    logger.debug(
        "auto_map_complete",
        columns=len(entries),
        mapped=len(consumed),
        unmapped_required=[f.key for f in unmapped]
    )

    return MappingResult(entries=entries, unmapped_required=unmapped)


class MappingSession:
    """
    Working mapping for one upload while an operator reviews it.

    Starts from auto_map; afterwards only changes through assign().
    The auto-mapper is never re-run, and unmapped required fields are derived
    from the current entries on every read.

    Usage:
        session = MappingSession(headers, TRESPASS_RECORD_FIELDS)
        session.assign("Student #", "school_id")
        if session.can_confirm:
            mapping = session.confirm()
    """

    def __init__(
        self,
        source_columns: Iterable[str],
        catalog: Sequence[FieldDefinition],
    ):
        self.catalog = tuple(catalog)
        self._fields = {f.key: f for f in self.catalog}
        result = auto_map(source_columns, self.catalog)
        self._mapping = result.as_mapping()

    @property
    def source_columns(self) -> list[str]:
        return list(self._mapping)

    @property
    def mapping(self) -> dict[str, str]:
        """Copy of the current source column -> target key mapping."""
        return dict(self._mapping)

    @property
    def entries(self) -> dict[str, MappingEntry]:
        return {
            column: MappingEntry(source_column=column, target_key=key)
            for column, key in self._mapping.items()
        }

    def claimed_by(self, target_key: str) -> Optional[str]:
        """Column currently mapped to target_key, if any."""
        if target_key == SKIP:
            return None
        for column, key in self._mapping.items():
            if key == target_key:
                return column
        return None

    def available_fields(self, source_column: str) -> list[FieldDefinition]:
        """
        Fields this column may be set to.

        Everything not claimed by another column; the column's own field stays.
        """
        if source_column not in self._mapping:
            raise SourceColumnNotFoundError(source_column)

        taken = {
            key for column, key in self._mapping.items()
            if column != source_column and key != SKIP
        }
        return [f for f in self.catalog if f.key not in taken]

    def assign(self, source_column: str, target_key: str) -> None:
        """
        Point one column at a field, or at skip.

        Raises:
            SourceColumnNotFoundError: Column is not in the upload
            UnknownFieldError: Key is not in the catalog
            FieldAlreadyMappedError: Another column already holds the field
        """
        if source_column not in self._mapping:
            raise SourceColumnNotFoundError(source_column)

        if target_key != SKIP and target_key not in self._fields:
            raise UnknownFieldError(target_key, [SKIP, *self._fields])

        owner = self.claimed_by(target_key)
        if owner is not None and owner != source_column:
            raise FieldAlreadyMappedError(target_key, owner)

        previous = self._mapping[source_column]
        self._mapping[source_column] = target_key

        logger.info(
            "mapping_overridden",
            source_column=source_column,
            previous=previous,
            target_key=target_key
        )

    @property
    def unmapped_required(self) -> list[FieldDefinition]:
        return find_unmapped_required(self._mapping, self.catalog)

    @property
    def can_confirm(self) -> bool:
        return not self.unmapped_required

    def confirm(self) -> dict[str, str]:
        """
        Final mapping without skip entries.

        Raises:
            MappingIncompleteError: Any required field is still unmapped
        """
        missing = self.unmapped_required
        if missing:
            raise MappingIncompleteError([f.label for f in missing])

        return {
            column: key for column, key in self._mapping.items()
            if key != SKIP
        }

    def to_result(self) -> MappingResult:
        return MappingResult(
            entries=self.entries,
            unmapped_required=self.unmapped_required
        )
