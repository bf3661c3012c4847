"""Statistics API routes."""

from datetime import date
from typing import Any, Optional

from fastapi import APIRouter, Depends
from typing_extensions import Annotated

from bizledger.api.dependencies import CommonDependencies, get_common_deps
from bizledger.api.errors import success_response

router = APIRouter(prefix="/analytics", tags=["analytics"])


@router.get("/statistics")
async def get_statistics(
    deps: Annotated[CommonDependencies, Depends(get_common_deps)],
    period: str = "month",
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
) -> dict[str, Any]:
    """
    Income and expense totals per calendar bucket.

    Args:
        period: 'day', 'week', 'month' or 'year'
    """
    buckets = await deps.analytics.get_statistics(period, date_from, date_to)
    return success_response(data=buckets)


@router.get("/expenses-by-category")
async def get_expenses_by_category(
    deps: Annotated[CommonDependencies, Depends(get_common_deps)],
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
) -> dict[str, Any]:
    return success_response(data=await deps.analytics.get_expenses_by_category(date_from, date_to))


@router.get("/summary")
async def get_summary(
    deps: Annotated[CommonDependencies, Depends(get_common_deps)],
) -> dict[str, Any]:
    """Lifetime totals and balance."""
    return success_response(data=await deps.analytics.get_summary())
