# =============================================================================
# core/models/analytics.py - Analytics Schemas
# =============================================================================
# One analytics row exists per (deployment_id, date). Its counters are
# upserted on every deployed-endpoint call; avg_response_time is a running
# mean updated in place, never recomputed from raw history.
# =============================================================================

from pydantic import BaseModel, Field


class AnalyticsRecord(BaseModel):
    """Daily counters for one deployment."""
    deployment_id: str
    date: str = Field(..., description="Calendar day, YYYY-MM-DD (UTC)")
    request_count: int = Field(default=0, ge=0)
    success_count: int = Field(default=0, ge=0)
    error_count: int = Field(default=0, ge=0)
    avg_response_time: float = Field(default=0.0, ge=0.0)


class DailyUsage(BaseModel):
    """One point of the per-day series in an analytics summary."""
    date: str
    request_count: int
    success_count: int
    error_count: int
    avg_response_time: float


class AnalyticsSummary(BaseModel):
    """
    Aggregate over a window of analytics rows.

    avg_response_time is weighted by each day's request_count.
    """
    total_requests: int = 0
    total_successes: int = 0
    total_errors: int = 0
    success_rate: float = Field(default=0.0, description="Percent, 0-100")
    error_rate: float = Field(default=0.0, description="Percent, 0-100")
    avg_response_time: float = 0.0
    daily: list[DailyUsage] = Field(default_factory=list)
