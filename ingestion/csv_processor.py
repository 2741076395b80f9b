# =============================================================================
# ingestion/csv_processor.py - CSV Processor
# =============================================================================
# One record per data row. The header row names the columns; the text
# column is chosen as:
# 1. config["text_column"] if given
# 2. the first header containing "text", "content" or "message"
# 3. the first header
#
# The splitter works line by line: a double quote toggles "in quotes" and
# only unquoted commas separate fields. Quoted newlines are not supported.
#
# Row numbers in errors are 1-indexed over the whole file, so the first
# data row is "Row 2".
# =============================================================================

from __future__ import annotations

import logging
from typing import Any

from core.models.ingestion import DataRecord, ProcessingResult
from ingestion.base import DataProcessor

logger = logging.getLogger(__name__)

TEXT_COLUMN_HINTS = ("text", "content", "message")
SAMPLE_SIZE = 5


def parse_csv_line(line: str) -> list[str]:
    """Split one CSV line on unquoted commas, trimming each field."""
    fields: list[str] = []
    current: list[str] = []
    in_quotes = False

    for char in line:
        if char == '"':
            in_quotes = not in_quotes
        elif char == "," and not in_quotes:
            fields.append("".join(current).strip())
            current = []
        else:
            current.append(char)

    fields.append("".join(current).strip())
    return fields


def resolve_text_column(headers: list[str], configured: str | None = None) -> str:
    if configured:
        return configured
    for header in headers:
        lowered = header.lower()
        if any(hint in lowered for hint in TEXT_COLUMN_HINTS):
            return header
    return headers[0]


class CSVProcessor(DataProcessor):
    """Turns CSV text into one record per row."""

    kind = "csv"

    def process(self, raw: str, config: dict[str, Any] | None = None) -> ProcessingResult:
        config = config or {}

        if not raw or not raw.strip():
            return ProcessingResult.failure("Empty CSV file")

        lines = raw.strip().splitlines()
        headers = parse_csv_line(lines[0])
        text_column = resolve_text_column(headers, config.get("text_column"))

        records: list[DataRecord] = []
        errors: list[str] = []

        for i in range(1, len(lines)):
            values = parse_csv_line(lines[i])
            if len(values) != len(headers):
                errors.append(f"Row {i + 1}: Column count mismatch")
                continue

            row = dict(zip(headers, values))
            content = row.get(text_column) or ""
            if not content.strip():
                errors.append(f"Row {i + 1}: Empty content in text column")
                continue

            records.append(self.make_record(
                i,
                content,
                {**row, "source_row": i + 1, "text_column": text_column},
            ))

        logger.debug(f"CSV processed: {len(records)} records, {len(errors)} errors")

        return self.build_result(records, errors, {
            "columns": headers,
            "data_types": self.get_schema(records),
            "sample_data": [r.metadata for r in records[:SAMPLE_SIZE]],
        })

    def validate(self, raw: Any) -> bool:
        return isinstance(raw, str) and len(raw.strip()) > 0
