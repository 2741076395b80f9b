# =============================================================================
# ingestion/base.py - Data Processor Contract
# =============================================================================
# Every processor turns raw input (file text, or an API description) into
# a ProcessingResult of DataRecords.
#
# Error policy:
# - A bad row/item is skipped and reported in result.errors
# - Only input that is unusable as a whole returns success=False
# - Nothing is retried
#
# Config keys are snake_case (text_column, text_field, split_by,
# chunk_size, overlap, data_path, api_key).
# =============================================================================

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from core.models.ingestion import DataRecord, ProcessingResult
from lib.utils import ApplicationError, utc_now, utc_now_iso

# Field names tried, in order, when pulling text out of a JSON object
TEXT_FIELDS = ("text", "content", "message", "description", "body", "title")


class UnsupportedSourceTypeError(ApplicationError):
    """Raised by the processor factory for kinds with no processor."""

    def __init__(self, source_type: str):
        super().__init__(
            message=f"Unsupported data source type: {source_type}",
            code="UNSUPPORTED_SOURCE_TYPE",
            suggestion="Use one of: csv, json, text, api",
            details={"type": source_type},
        )


class DataProcessor(ABC):
    """Base class for all data source processors."""

    #: Short tag used in generated record ids ("csv", "json", ...)
    kind: str = "data"

    @abstractmethod
    def process(self, raw: Any, config: dict[str, Any] | None = None) -> ProcessingResult:
        """Convert raw input into normalized records."""

    @abstractmethod
    def validate(self, raw: Any) -> bool:
        """Cheap check that `raw` is worth processing."""

    def get_schema(self, records: list[DataRecord]) -> dict[str, str]:
        """Infer field types from the first record's metadata."""
        if not records:
            return {}
        return {key: infer_type(value) for key, value in records[0].metadata.items()}

    # -------------------------------------------------------------------------
    # Helpers shared by subclasses
    # -------------------------------------------------------------------------

    def make_record(self, tag: str | int, content: str, metadata: dict[str, Any]) -> DataRecord:
        """Build a record with a `<kind>_<tag>_<epoch-ms>` id."""
        epoch_ms = int(utc_now().timestamp() * 1000)
        return DataRecord(
            id=f"{self.kind}_{tag}_{epoch_ms}",
            content=content.strip(),
            metadata=metadata,
            processed_at=utc_now_iso(),
        )

    def build_result(
        self,
        records: list[DataRecord],
        errors: list[str],
        metadata: dict[str, Any],
    ) -> ProcessingResult:
        """Successful iff at least one record came out."""
        return ProcessingResult(
            success=len(records) > 0,
            records=records,
            total_records=len(records),
            errors=errors,
            metadata=metadata,
        )


def infer_type(value: Any) -> str:
    """Map a Python value onto the coarse type names shown in the UI."""
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return "string"


def extract_text_content(
    item: Any,
    text_field: str | None = None,
    fields: tuple[str, ...] = TEXT_FIELDS,
) -> str:
    """
    Pull the text of one JSON object.

    Order:
    1. The configured text_field, if present and truthy
    2. The first non-empty string among `fields`
    3. All non-blank string values joined with a space

    Returns "" when nothing usable is found (including non-dict items).
    """
    if not isinstance(item, dict):
        return ""

    if text_field and item.get(text_field):
        return str(item[text_field])

    for field in fields:
        value = item.get(field)
        if isinstance(value, str) and value:
            return value

    return " ".join(
        value for value in item.values()
        if isinstance(value, str) and value.strip()
    )
