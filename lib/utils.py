# =============================================================================
# lib/utils.py - Shared Utilities
# =============================================================================
# Common utilities used across the application:
# - UUID normalization for Supabase queries
# - UTC timestamp helpers (ISO strings, calendar day keys)
# - JSON sanitizing for pandas/numpy values
# - ApplicationError, the base class for library/service errors
# =============================================================================

import math
from datetime import datetime, timezone
from typing import Any
from uuid import UUID

import numpy as np
import pandas as pd


# =============================================================================
# UUID Utilities
# =============================================================================

def normalize_uuid(value: str | UUID) -> str:
    """
    Normalize a UUID to string format.

    Example:
        deployment_id = normalize_uuid(uuid_obj)  # "550e8400-..."
        deployment_id = normalize_uuid("550e8400-...")  # "550e8400-..."
    """
    return str(value) if isinstance(value, UUID) else value


# =============================================================================
# Time Utilities
# =============================================================================

def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def utc_now_iso() -> str:
    """Current UTC time as an ISO-8601 string."""
    return utc_now().isoformat()


def utc_today() -> str:
    """
    Current UTC calendar day as YYYY-MM-DD.

    Analytics rows are keyed by (deployment_id, date) using this value.
    """
    return utc_now().date().isoformat()


# =============================================================================
# Numeric Utilities
# =============================================================================

def round_half_up(value: float, digits: int = 0) -> float:
    """
    Round halves away from zero for positive values (2.5 -> 3).

    Python's round() rounds halves to even; reported ratios and averages
    use the conventional half-up rule instead.
    """
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


# =============================================================================
# JSON Sanitizing
# =============================================================================

def sanitize_value(value: Any) -> Any:
    """Convert numpy/pandas scalars to JSON-serializable Python types."""
    if value is None or (isinstance(value, float) and np.isnan(value)):
        return None
    if isinstance(value, (np.integer,)):
        return int(value)
    if isinstance(value, (np.floating,)):
        return None if np.isnan(value) else float(value)
    if isinstance(value, np.bool_):
        return bool(value)
    if isinstance(value, pd.Timestamp):
        return value.isoformat()
    if hasattr(value, "item"):  # Generic numpy scalar
        return value.item()
    return value


def sanitize_rows(rows: list[dict]) -> list[dict]:
    """Sanitize all values in a list of row dicts."""
    return [
        {k: sanitize_value(v) for k, v in row.items()}
        for row in rows
    ]


# =============================================================================
# Base Error Class
# =============================================================================

class ApplicationError(Exception):
    """
    Base error class for application-specific errors.

    Provides actionable error messages: errors should tell HOW to fix,
    not just WHAT failed.

    Attributes:
        code: Error code for categorization
        message: Human-readable error message
        suggestion: Actionable suggestion for fixing the error
        details: Additional context for debugging

    Example:
        class ProviderError(ApplicationError):
            def __init__(self, message: str, **kwargs):
                super().__init__(message, code="PROVIDER_ERROR", **kwargs)
    """

    def __init__(
        self,
        message: str,
        code: str = "APPLICATION_ERROR",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.details = details or {}

    def __str__(self) -> str:
        return self.message

    def describe(self) -> str:
        """Long form with code and suggestion, for logs."""
        result = f"[{self.code}] {self.message}"
        if self.suggestion:
            result += f"\n  Suggestion: {self.suggestion}"
        return result

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for API responses."""
        return {
            "code": self.code,
            "message": self.message,
            "suggestion": self.suggestion,
            "details": self.details,
        }
