# =============================================================================
# app/routers/analytics.py - Analytics Query Endpoint
# =============================================================================

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from app.auth import AuthUser, get_current_user
from core.services.analytics_service import AnalyticsService

router = APIRouter()


@router.get("")
async def get_analytics(
    project_id: Annotated[UUID | None, Query(description="Only this project's deployments")] = None,
    days: Annotated[int, Query(ge=1, le=365, description="Window in days, back from today")] = 30,
    user: AuthUser = Depends(get_current_user),
):
    """
    Daily analytics rows for the caller's deployments, plus a summary.

    The summary sums counters across deployments and weights response
    times by request count.
    """
    rows = AnalyticsService.list_for_user(
        user.id,
        project_id=str(project_id) if project_id else None,
        days=days,
    )
    summary = AnalyticsService.summarize(rows)

    return {
        "success": True,
        "data": {
            "analytics": rows,
            "summary": summary.model_dump(),
        },
    }
