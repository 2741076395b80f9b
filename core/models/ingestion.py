# =============================================================================
# core/models/ingestion.py - Ingestion Output Schemas
# =============================================================================
# Every data processor (CSV, JSON, text, API) normalizes its input into the
# same ProcessingResult:
#
#   {
#       "success": true,
#       "records": [{"id": ..., "content": ..., "metadata": {...}, "processed_at": ...}],
#       "total_records": 1,
#       "errors": ["Row 3: Empty content in text column"],
#       "metadata": {"columns": [...], "data_types": {...}, "sample_data": [...]}
#   }
#
# Per-record problems land in `errors`; only an unusable input as a whole
# produces success=False with no records.
# =============================================================================

from typing import Any

from pydantic import BaseModel, Field


class DataRecord(BaseModel):
    """One normalized unit of text produced by a processor."""
    id: str
    content: str
    metadata: dict[str, Any] = Field(default_factory=dict)
    processed_at: str


class ProcessingResult(BaseModel):
    """Uniform output of every data processor."""
    success: bool
    records: list[DataRecord] = Field(default_factory=list)
    total_records: int = 0
    errors: list[str] = Field(default_factory=list)
    metadata: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def failure(cls, error: str) -> "ProcessingResult":
        """Whole-input failure: no records, one error."""
        return cls(success=False, records=[], total_records=0, errors=[error], metadata={})


class PreviewResult(BaseModel):
    """Bounded view of a ProcessingResult for the data-source preview step."""
    total_records: int
    preview_records: list[DataRecord] = Field(default_factory=list)
    metadata: dict[str, Any] = Field(default_factory=dict)
    errors: list[str] = Field(default_factory=list)
    is_preview: bool = True
