# =============================================================================
# core/services/analytics_service.py - Deployment Analytics
# =============================================================================
# One row per (deployment_id, date) in the `analytics` table.
#
# record_request() is a read-then-write: it reads today's row, computes the
# new counters and running mean, then writes them back. Two concurrent
# requests for the same deployment can read the same snapshot, and the
# later write wins. Failures are logged and swallowed so a telemetry fault
# never fails the request being counted.
#
# summarize() aggregates a window of rows with pandas for the management
# analytics endpoint.
# =============================================================================

import logging
from datetime import timedelta
from typing import Any
from uuid import UUID

import pandas as pd

from lib.supabase_client import SupabaseClient
from lib.utils import normalize_uuid, round_half_up, sanitize_rows, sanitize_value, utc_now, utc_today
from core.models.analytics import AnalyticsSummary, DailyUsage

logger = logging.getLogger(__name__)

COUNTER_COLUMNS = ["request_count", "success_count", "error_count"]


def compute_running_average(count: int, average: float, sample: float) -> float:
    """
    Fold one more sample into a running mean, rounded half-up to 2 places.

    Example:
        compute_running_average(2, 100, 50)  # 83.33
    """
    return round_half_up((average * count + sample) / (count + 1), 2)


class AnalyticsService:
    """Service for reading and updating daily deployment analytics."""

    @staticmethod
    def seed_day(deployment_id: str | UUID, date: str | None = None) -> None:
        """Insert a zeroed row for `date` (today by default)."""
        client = SupabaseClient.get_client()
        client.table("analytics").insert({
            "deployment_id": normalize_uuid(deployment_id),
            "date": date or utc_today(),
            "request_count": 0,
            "success_count": 0,
            "error_count": 0,
            "avg_response_time": 0,
        }).execute()

    @staticmethod
    def record_request(
        deployment_id: str | UUID,
        success: bool,
        processing_time: int,
    ) -> None:
        """
        Count one deployed-endpoint call in today's row.

        Never raises: any store failure is logged at ERROR and dropped.
        """
        deployment_id_str = normalize_uuid(deployment_id)
        today = utc_today()

        try:
            existing = SupabaseClient.fetch_analytics_row(deployment_id_str, today)
            client = SupabaseClient.get_client()

            if existing:
                count = existing.get("request_count") or 0
                average = float(existing.get("avg_response_time") or 0)
                (
                    client.table("analytics")
                    .update({
                        "request_count": count + 1,
                        "success_count": (existing.get("success_count") or 0) + (1 if success else 0),
                        "error_count": (existing.get("error_count") or 0) + (0 if success else 1),
                        "avg_response_time": compute_running_average(count, average, processing_time),
                    })
                    .eq("deployment_id", deployment_id_str)
                    .eq("date", today)
                    .execute()
                )
            else:
                client.table("analytics").insert({
                    "deployment_id": deployment_id_str,
                    "date": today,
                    "request_count": 1,
                    "success_count": 1 if success else 0,
                    "error_count": 0 if success else 1,
                    "avg_response_time": processing_time,
                }).execute()

        except Exception as e:
            logger.error(f"Analytics update failed for deployment {deployment_id_str}: {e}")

    @staticmethod
    def list_for_user(
        user_id: UUID | str,
        project_id: str | UUID | None = None,
        days: int = 30,
    ) -> list[dict[str, Any]]:
        """
        Analytics rows for the user's deployments within the last `days` days.

        Args:
            user_id: Only deployments of this user's projects
            project_id: Optionally narrow to one project
            days: Window size, counted back from today (UTC)

        Returns:
            Rows with a nested `deployments` dict, newest day first
        """
        client = SupabaseClient.get_client()
        start_date = (utc_now() - timedelta(days=days)).date().isoformat()

        query = (
            client.table("analytics")
            .select("*, deployments!inner(id, project_id, projects!inner(user_id, name))")
            .eq("deployments.projects.user_id", normalize_uuid(user_id))
            .gte("date", start_date)
        )
        if project_id:
            query = query.eq("deployments.project_id", normalize_uuid(project_id))

        response = query.order("date", desc=True).execute()
        return response.data or []

    @staticmethod
    def summarize(rows: list[dict[str, Any]]) -> AnalyticsSummary:
        """
        Aggregate analytics rows.

        Rows for the same day (several deployments) are summed into one
        daily point; response times are weighted by request_count.
        """
        if not rows:
            return AnalyticsSummary()

        df = pd.DataFrame(rows)
        for column in COUNTER_COLUMNS + ["avg_response_time"]:
            if column not in df.columns:
                df[column] = 0
        df[COUNTER_COLUMNS] = df[COUNTER_COLUMNS].fillna(0).astype(int)
        df["avg_response_time"] = df["avg_response_time"].fillna(0).astype(float)
        df["weighted_time"] = df["avg_response_time"] * df["request_count"]

        daily = (
            df.groupby("date", as_index=False)[COUNTER_COLUMNS + ["weighted_time"]]
            .sum()
            .sort_values("date")
        )

        # pandas hands back numpy scalars; the summary model wants plain ints
        total_requests = sanitize_value(df["request_count"].sum())
        total_successes = sanitize_value(df["success_count"].sum())
        total_errors = sanitize_value(df["error_count"].sum())

        def _percent(part: int) -> float:
            return round_half_up(part / total_requests * 100, 2) if total_requests else 0.0

        def _mean_time(weighted: float, requests: int) -> float:
            return round_half_up(weighted / requests, 2) if requests else 0.0

        return AnalyticsSummary(
            total_requests=total_requests,
            total_successes=total_successes,
            total_errors=total_errors,
            success_rate=_percent(total_successes),
            error_rate=_percent(total_errors),
            avg_response_time=_mean_time(sanitize_value(df["weighted_time"].sum()), total_requests),
            daily=[
                DailyUsage(
                    date=str(row["date"]),
                    request_count=row["request_count"],
                    success_count=row["success_count"],
                    error_count=row["error_count"],
                    avg_response_time=_mean_time(row["weighted_time"], row["request_count"]),
                )
                for row in sanitize_rows(daily.to_dict("records"))
            ],
        )
