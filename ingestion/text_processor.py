# =============================================================================
# ingestion/text_processor.py - Plain Text Processor
# =============================================================================
# Splits free text into records. config["split_by"] picks the mode:
#
#   chunk (default)  Sliding window of chunk_size characters, advancing by
#                    chunk_size - overlap. Defaults 1000 / 100. The trailing
#                    partial window is kept if it has any non-blank text.
#   paragraph        Split on blank lines
#   sentence         Split on runs of . ! ?
#
# Every record carries its word_count; chunk records also carry their
# start_index / end_index character offsets.
# =============================================================================

from __future__ import annotations

import re
from typing import Any

from core.models.ingestion import DataRecord, ProcessingResult
from ingestion.base import DataProcessor

DEFAULT_CHUNK_SIZE = 1000
DEFAULT_OVERLAP = 100
SPLIT_MODES = ("chunk", "paragraph", "sentence")

PARAGRAPH_BREAK = re.compile(r"\n\s*\n")
SENTENCE_BREAK = re.compile(r"[.!?]+")


def _word_count(text: str) -> int:
    return len(text.split())


class TextProcessor(DataProcessor):
    """Turns plain text into chunk, paragraph or sentence records."""

    kind = "text"

    def process(self, raw: str, config: dict[str, Any] | None = None) -> ProcessingResult:
        config = config or {}
        split_by = config.get("split_by") or "chunk"

        if split_by not in SPLIT_MODES:
            return ProcessingResult.failure(
                f"Unknown split_by '{split_by}', expected one of: {', '.join(SPLIT_MODES)}"
            )

        chunk_size = int(config.get("chunk_size") or DEFAULT_CHUNK_SIZE)
        overlap = config.get("overlap")
        overlap = DEFAULT_OVERLAP if overlap is None else int(overlap)

        if split_by == "chunk":
            if chunk_size <= 0 or overlap < 0 or overlap >= chunk_size:
                return ProcessingResult.failure(
                    f"Invalid chunking: overlap ({overlap}) must be smaller than chunk_size ({chunk_size})"
                )
            records = self._split_chunks(raw, chunk_size, overlap)
        elif split_by == "paragraph":
            records = self._split_pieces(raw, PARAGRAPH_BREAK, "paragraph", "para")
        else:
            records = self._split_pieces(raw, SENTENCE_BREAK, "sentence", "sent")

        metadata: dict[str, Any] = {
            "original_length": len(raw),
            "total_words": _word_count(raw),
            "split_method": split_by,
        }
        if split_by == "chunk":
            metadata["chunk_size"] = chunk_size

        errors = [] if records else ["No text content found"]
        return self.build_result(records, errors, metadata)

    def _split_chunks(self, text: str, chunk_size: int, overlap: int) -> list[DataRecord]:
        records = []
        step = chunk_size - overlap

        for start in range(0, len(text), step):
            chunk = text[start:start + chunk_size]
            if not chunk.strip():
                continue
            records.append(self.make_record(f"chunk_{start}", chunk, {
                "type": "chunk",
                "start_index": start,
                "end_index": start + len(chunk),
                "word_count": _word_count(chunk),
            }))

        return records

    def _split_pieces(
        self,
        text: str,
        pattern: re.Pattern,
        piece_type: str,
        tag: str,
    ) -> list[DataRecord]:
        pieces = [p for p in pattern.split(text) if p.strip()]
        return [
            self.make_record(f"{tag}_{index}", piece, {
                "type": piece_type,
                "index": index,
                "word_count": _word_count(piece),
            })
            for index, piece in enumerate(pieces)
        ]

    def validate(self, raw: Any) -> bool:
        return isinstance(raw, str) and len(raw.strip()) > 0

    def get_schema(self, records: list[DataRecord]) -> dict[str, str]:
        return {"type": "string", "index": "number", "word_count": "number"}
