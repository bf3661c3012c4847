"""Tests for AnalyticsService aggregations."""

from datetime import date

import pytest

from bizledger.config.categories import DEFAULT_CATEGORIES
from bizledger.errors import ValidationError


class TestStatistics:
    @pytest.mark.asyncio
    async def test_monthly_buckets(self, analytics, operations, category_ids):
        await operations.create_operation("income", 3000, operation_date=date(2026, 9, 2))
        await operations.create_operation("income", 5000, operation_date=date(2026, 10, 2))
        await operations.create_operation("expense", 1200, None, category_ids["Software"], date(2026, 10, 4))

        buckets = await analytics.get_statistics("month")

        assert [b["period"] for b in buckets] == ["2026-10", "2026-09"]
        assert buckets[0]["total_income"] == 5000
        assert buckets[0]["total_expense"] == 1200
        assert buckets[0]["income_count"] == 1
        assert buckets[0]["expense_count"] == 1

    @pytest.mark.asyncio
    async def test_date_range(self, analytics, operations):
        await operations.create_operation("income", 3000, operation_date=date(2026, 9, 2))
        await operations.create_operation("income", 5000, operation_date=date(2026, 10, 2))

        buckets = await analytics.get_statistics("day", date(2026, 10, 1), date(2026, 10, 31))

        assert [b["period"] for b in buckets] == ["2026-10-02"]

    @pytest.mark.asyncio
    async def test_unknown_period_rejected(self, analytics):
        with pytest.raises(ValidationError, match="period must be one of"):
            await analytics.get_statistics("fortnight")

    @pytest.mark.asyncio
    async def test_empty_ledger_has_no_buckets(self, analytics):
        assert await analytics.get_statistics("year") == []


class TestExpensesByCategory:
    @pytest.mark.asyncio
    async def test_rollup(self, analytics, operations, category_ids):
        office = category_ids["Office Supplies"]
        await operations.create_operation("expense", 10000, None, office, date(2026, 10, 1))
        await operations.create_operation("expense", 5000, None, office, date(2026, 10, 2))
        await operations.create_operation("income", 20000, operation_date=date(2026, 10, 2))

        rows = await analytics.get_expenses_by_category()

        assert rows == [
            {
                "id": office,
                "name": "Office Supplies",
                "operations_count": 2,
                "total_amount": 15000,
                "avg_amount": 7500,
            }
        ]

    @pytest.mark.asyncio
    async def test_sorted_largest_first(self, analytics, operations, category_ids):
        await operations.create_operation("expense", 100, None, category_ids["Office Supplies"], date(2026, 10, 1))
        await operations.create_operation("expense", 900, None, category_ids["Software"], date(2026, 10, 1))

        rows = await analytics.get_expenses_by_category()

        assert [r["name"] for r in rows] == ["Software", "Office Supplies"]

    @pytest.mark.asyncio
    async def test_seeds_default_categories_when_none_exist(self, analytics, db):
        assert await analytics.get_expenses_by_category() == []

        names = {c["name"] for c in await db.get_categories()}
        assert names == set(DEFAULT_CATEGORIES)

    @pytest.mark.asyncio
    async def test_joined_fallback_when_primary_is_empty(self, analytics, db, category_ids):
        await db.insert_operation("expense", 400, None, category_ids["Software"], "2026-10-01")
        db.get_expenses_by_category = _empty_rollup

        rows = await analytics.get_expenses_by_category()

        assert [(r["name"], r["total_amount"]) for r in rows] == [("Software", 400)]


class TestSummary:
    @pytest.mark.asyncio
    async def test_balance(self, analytics, operations, category_ids):
        await operations.create_operation("income", 50000, operation_date=date(2026, 10, 1))
        await operations.create_operation("expense", 20000, None, category_ids["Software"], date(2026, 10, 2))

        summary = await analytics.get_summary()

        assert summary["total_income"] == 50000
        assert summary["total_expense"] == 20000
        assert summary["balance"] == 30000

    @pytest.mark.asyncio
    async def test_empty_ledger(self, analytics):
        summary = await analytics.get_summary()
        assert summary["balance"] == 0


async def _empty_rollup(date_from=None, date_to=None):
    return []
