# =============================================================================
# ingestion/factory.py - Processor Selection and Preview
# =============================================================================
# get_data_processor() maps a data source type onto its processor.
# preview() runs a processor over a bounded prefix of the input so the
# builder UI can show a sample before committing to a full run.
# =============================================================================

from __future__ import annotations

from typing import Any

from core.models.data_source import DataSourceType
from core.models.ingestion import PreviewResult
from ingestion.api_processor import APIProcessor
from ingestion.base import DataProcessor, UnsupportedSourceTypeError
from ingestion.csv_processor import CSVProcessor
from ingestion.json_processor import JSONProcessor
from ingestion.text_processor import TextProcessor

PREVIEW_MAX_CHARS = 10_000
PREVIEW_MAX_RECORDS = 5
PREVIEW_MAX_ERRORS = 5

# Source types whose input is uploaded file content
FILE_SOURCE_TYPES = (DataSourceType.CSV, DataSourceType.JSON, DataSourceType.TEXT)


def get_data_processor(source_type: str | DataSourceType, **kwargs: Any) -> DataProcessor:
    """
    Processor for a data source type.

    Args:
        source_type: csv, json, text or api
        **kwargs: Passed to the APIProcessor (client, timeout)

    Raises:
        UnsupportedSourceTypeError: For database sources and unknown types
    """
    value = source_type.value if isinstance(source_type, DataSourceType) else str(source_type)

    if value == DataSourceType.CSV.value:
        return CSVProcessor()
    if value == DataSourceType.JSON.value:
        return JSONProcessor()
    if value == DataSourceType.TEXT.value:
        return TextProcessor()
    if value == DataSourceType.API.value:
        return APIProcessor(**kwargs)

    raise UnsupportedSourceTypeError(value)


def preview(
    processor: DataProcessor,
    raw: Any,
    config: dict[str, Any] | None = None,
    max_chars: int = PREVIEW_MAX_CHARS,
) -> PreviewResult:
    """
    Process a bounded sample of the input.

    String input is cut to `max_chars` before processing. At most five
    records and five errors are returned; total_records counts everything
    the processor produced from the sample.
    """
    if isinstance(raw, str) and len(raw) > max_chars:
        raw = raw[:max_chars]

    result = processor.process(raw, config or {})

    return PreviewResult(
        total_records=result.total_records,
        preview_records=result.records[:PREVIEW_MAX_RECORDS],
        metadata=result.metadata,
        errors=result.errors[:PREVIEW_MAX_ERRORS],
    )
