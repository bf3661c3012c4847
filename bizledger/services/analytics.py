"""Analytics service - aggregate statistics over the operations ledger."""

from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from bizledger.config.categories import DEFAULT_CATEGORIES
from bizledger.database import Database
from bizledger.database.main import PERIOD_FORMATS
from bizledger.errors import ValidationError

logger = logging.getLogger(__name__)


class AnalyticsService:
    """Read-side aggregations: period buckets, category rollup, lifetime summary."""

    def __init__(self, db: Database):
        self._db = db

    async def get_statistics(
        self,
        period: str = "month",
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> list[dict]:
        """
        Group operations into calendar buckets.

        Args:
            period: 'day', 'week', 'month' or 'year'
            date_from: Inclusive lower bound
            date_to: Inclusive upper bound

        Returns:
            One row per bucket, most recent first, with total_income,
            total_expense, income_count and expense_count
        """
        if period not in PERIOD_FORMATS:
            raise ValidationError(f"period must be one of: {', '.join(PERIOD_FORMATS)}")
        return await self._db.get_period_statistics(period, date_from, date_to)

    async def get_expenses_by_category(
        self,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> list[dict]:
        """
        Per-category expense count, sum and average, largest first.

        Categories with no expense are excluded. If the category-driven query
        comes back empty although expenses exist in range, the rollup is
        recomputed from the operations side.
        """
        if await self._db.count_categories() == 0:
            await self._db.seed_categories(DEFAULT_CATEGORIES)
            logger.info(f"Seeded {len(DEFAULT_CATEGORIES)} default categories")

        result = await self._db.get_expenses_by_category(date_from, date_to)
        if result:
            return result

        if await self._db.count_expenses(date_from, date_to) > 0:
            logger.info("Category rollup empty while expenses exist, using joined fallback")
            return await self._db.get_expenses_by_category_joined(date_from, date_to)

        return []

    async def get_summary(self) -> dict:
        """Lifetime totals with balance = total_income - total_expense."""
        summary = await self._db.get_summary()
        total_income = summary.get("total_income") or 0
        total_expense = summary.get("total_expense") or 0
        summary["total_income"] = total_income
        summary["total_expense"] = total_expense
        summary["balance"] = total_income - total_expense
        return summary
