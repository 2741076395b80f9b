# =============================================================================
# ingestion/json_processor.py - JSON Processor
# =============================================================================
# Accepts either an array of objects (one record per element) or a single
# object (one record). Text is pulled out with extract_text_content().
#
# A document that doesn't parse fails as a whole; an element with no
# usable text is reported as "Item <index>: No text content found".
# =============================================================================

from __future__ import annotations

import json
import logging
from typing import Any

from core.models.ingestion import DataRecord, ProcessingResult
from ingestion.base import DataProcessor, extract_text_content

logger = logging.getLogger(__name__)

SAMPLE_SIZE = 5


class JSONProcessor(DataProcessor):
    """Turns a JSON document into records."""

    kind = "json"

    def process(self, raw: str, config: dict[str, Any] | None = None) -> ProcessingResult:
        config = config or {}

        try:
            data = json.loads(raw)
        except (json.JSONDecodeError, TypeError) as e:
            return ProcessingResult.failure(f"Invalid JSON: {e}")

        text_field = config.get("text_field")
        records: list[DataRecord] = []
        errors: list[str] = []

        if isinstance(data, list):
            for index, item in enumerate(data):
                content = extract_text_content(item, text_field)
                if not content.strip():
                    errors.append(f"Item {index}: No text content found")
                    continue
                metadata = {**item, "source_index": index} if isinstance(item, dict) else {"source_index": index}
                records.append(self.make_record(index, content, metadata))
        elif isinstance(data, dict):
            content = extract_text_content(data, text_field)
            if content.strip():
                records.append(self.make_record("single", content, dict(data)))
            else:
                errors.append("No text content found in JSON object")
        else:
            errors.append("JSON document must be an object or an array of objects")

        logger.debug(f"JSON processed: {len(records)} records, {len(errors)} errors")

        return self.build_result(records, errors, {
            "data_types": self.get_schema(records),
            "sample_data": [r.metadata for r in records[:SAMPLE_SIZE]],
        })

    def validate(self, raw: Any) -> bool:
        try:
            json.loads(raw)
        except (json.JSONDecodeError, TypeError):
            return False
        return True
