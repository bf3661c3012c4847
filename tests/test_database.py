"""Tests for database operations.

These tests verify the intended behavior of the Database class:
1. Connection management and schema migration
2. Operation and category persistence
3. Statistics queries
4. Analysis, forecast and chat history persistence
"""

import os
import tempfile

import pytest

from bizledger.database import Database
from bizledger.errors import DuplicateError, StorageError


class TestDatabaseConnection:
    """Tests for database connection management."""

    @pytest.mark.asyncio
    async def test_connect_creates_file(self):
        """Connecting creates the database file."""
        with tempfile.TemporaryDirectory() as tmpdir:
            db_path = os.path.join(tmpdir, "nested", "test.db")
            db = Database(db_path)
            await db.connect()

            assert os.path.exists(db_path)

            await db.close()

    @pytest.mark.asyncio
    async def test_connect_is_idempotent(self, db):
        """Multiple connect calls are safe."""
        await db.connect()
        await db.connect()

    def test_conn_property_raises_before_connect(self):
        """Accessing conn before connect raises error."""
        db = Database("unused.db")
        with pytest.raises(RuntimeError, match="not connected"):
            _ = db.conn

    @pytest.mark.asyncio
    async def test_migrate_creates_tables(self, db):
        tables = await db.get_table_names()
        for table in ["categories", "operations", "ai_analyses", "ai_forecasts", "ai_chat_history"]:
            assert table in tables

    @pytest.mark.asyncio
    async def test_migrate_is_repeatable(self, db):
        await db.migrate()
        assert "operations" in await db.get_table_names()

    @pytest.mark.asyncio
    async def test_foreign_keys_enabled(self, db):
        row = await db.fetch_one("PRAGMA foreign_keys")
        assert row["foreign_keys"] == 1


class TestOperations:
    """Tests for operation persistence."""

    @pytest.mark.asyncio
    async def test_insert_and_get_with_category_name(self, db, category_ids):
        op_id = await db.insert_operation("expense", 15000, "Paper", category_ids["Office Supplies"], "2026-10-01")

        op = await db.get_operation(op_id)
        assert op["amount"] == 15000
        assert op["category_name"] == "Office Supplies"
        assert op["operation_date"] == "2026-10-01"

    @pytest.mark.asyncio
    async def test_get_missing_operation_returns_none(self, db):
        assert await db.get_operation(999) is None

    @pytest.mark.asyncio
    async def test_newest_first_with_id_tiebreak(self, db):
        first = await db.insert_operation("income", 100, None, None, "2026-10-01")
        second = await db.insert_operation("income", 200, None, None, "2026-10-01")
        older = await db.insert_operation("income", 300, None, None, "2026-09-01")

        ops = await db.get_operations()
        assert [op["id"] for op in ops] == [second, first, older]

    @pytest.mark.asyncio
    async def test_filters(self, db, category_ids):
        await db.insert_operation("income", 100, None, None, "2026-10-01")
        await db.insert_operation("expense", 50, None, category_ids["Software"], "2026-10-05")
        await db.insert_operation("expense", 70, None, category_ids["Office Supplies"], "2026-09-05")

        assert len(await db.get_operations(type="expense")) == 2
        assert len(await db.get_operations(category_id=category_ids["Software"])) == 1
        assert len(await db.get_operations(date_from="2026-10-01", date_to="2026-10-31")) == 2
        assert len(await db.get_operations(limit=1, offset=1)) == 1
        assert len(await db.get_operations(offset=2)) == 1

    @pytest.mark.asyncio
    async def test_non_positive_amount_rejected_by_schema(self, db):
        with pytest.raises(StorageError):
            await db.insert_operation("income", 0, None, None, "2026-10-01")

    @pytest.mark.asyncio
    async def test_update_keeps_omitted_fields(self, db):
        op_id = await db.insert_operation("income", 100, "Invoice", None, "2026-10-01")

        changed = await db.update_operation(op_id, None, 250, None, None, None)

        op = await db.get_operation(op_id)
        assert changed == 1
        assert op["amount"] == 250
        assert op["description"] == "Invoice"
        assert op["operation_date"] == "2026-10-01"

    @pytest.mark.asyncio
    async def test_delete_returns_rowcount(self, db):
        op_id = await db.insert_operation("income", 100, None, None, "2026-10-01")
        assert await db.delete_operation(op_id) == 1
        assert await db.delete_operation(op_id) == 0


class TestCategories:
    """Tests for category persistence."""

    @pytest.mark.asyncio
    async def test_categories_sorted_by_name(self, db):
        await db.insert_category("Software")
        await db.insert_category("Accounting")

        names = [c["name"] for c in await db.get_categories()]
        assert names == ["Accounting", "Software"]

    @pytest.mark.asyncio
    async def test_duplicate_name_raises_duplicate_error(self, db):
        await db.insert_category("Internet")
        with pytest.raises(DuplicateError, match="already exists"):
            await db.insert_category("Internet")

    @pytest.mark.asyncio
    async def test_failed_insert_keeps_pending_writes(self, db):
        """A constraint failure must not roll back other uncommitted statements on the connection."""
        await db.insert_category("Internet")
        await db.conn.execute("INSERT INTO categories (name) VALUES ('Pending')")

        with pytest.raises(DuplicateError):
            await db.insert_category("Internet")
        await db.conn.commit()

        names = [c["name"] for c in await db.get_categories()]
        assert names == ["Internet", "Pending"]

    @pytest.mark.asyncio
    async def test_seed_skips_existing(self, db):
        await db.insert_category("Internet")
        await db.seed_categories(["Internet", "Software"])
        assert await db.count_categories() == 2

    @pytest.mark.asyncio
    async def test_delete_category_nulls_operations(self, db, category_ids):
        op_id = await db.insert_operation("expense", 500, None, category_ids["Software"], "2026-10-01")

        await db.delete_category(category_ids["Software"])

        op = await db.get_operation(op_id)
        assert op is not None
        assert op["category_id"] is None


class TestStatistics:
    """Tests for aggregate queries."""

    @pytest.mark.asyncio
    async def test_monthly_buckets_newest_first(self, db):
        await db.insert_operation("income", 1000, None, None, "2026-09-10")
        await db.insert_operation("income", 2000, None, None, "2026-10-10")

        buckets = await db.get_period_statistics("month")
        assert [b["period"] for b in buckets] == ["2026-10", "2026-09"]
        assert buckets[0]["total_income"] == 2000
        assert buckets[0]["total_expense"] == 0

    @pytest.mark.asyncio
    async def test_expenses_by_category_excludes_empty(self, db, category_ids):
        await db.insert_operation("expense", 10000, None, category_ids["Office Supplies"], "2026-10-01")
        await db.insert_operation("expense", 5000, None, category_ids["Office Supplies"], "2026-10-02")

        rows = await db.get_expenses_by_category()
        assert len(rows) == 1
        assert rows[0]["name"] == "Office Supplies"
        assert rows[0]["operations_count"] == 2
        assert rows[0]["total_amount"] == 15000
        assert rows[0]["avg_amount"] == 7500

    @pytest.mark.asyncio
    async def test_summary_on_empty_ledger(self, db):
        summary = await db.get_summary()
        assert summary["total_income"] == 0
        assert summary["total_expense"] == 0
        assert summary["first_operation_date"] is None

    @pytest.mark.asyncio
    async def test_monthly_totals_since(self, db):
        await db.insert_operation("income", 100, None, None, "2026-06-01")
        await db.insert_operation("income", 200, None, None, "2026-08-01")
        await db.insert_operation("expense", 50, None, None, "2026-08-03")

        rows = await db.get_monthly_totals("2026-07-01")
        assert {(r["month"], r["type"], r["total_amount"]) for r in rows} == {
            ("2026-08", "income", 200),
            ("2026-08", "expense", 50),
        }


class TestAnalyses:
    """Tests for generated artifact persistence."""

    @pytest.mark.asyncio
    async def test_insert_decodes_data_context(self, db):
        analysis_id = await db.insert_analysis("economy_tips", "Title", "Body", 12, {"a": 1}, "provider")

        analysis = await db.get_analysis(analysis_id)
        assert analysis["data_context"] == {"a": 1}
        assert analysis["source"] == "provider"
        assert analysis["is_favorite"] is False

    @pytest.mark.asyncio
    async def test_list_filters_by_type_newest_first(self, db):
        first = await db.insert_analysis("forecast", "F1", "Body")
        await db.insert_analysis("economy_tips", "E1", "Body")
        second = await db.insert_analysis("forecast", "F2", "Body")

        rows = await db.get_analyses(type="forecast")
        assert [r["id"] for r in rows] == [second, first]

    @pytest.mark.asyncio
    async def test_delete_by_type_returns_count(self, db):
        await db.insert_analysis("forecast", "F1", "Body")
        await db.insert_analysis("forecast", "F2", "Body")
        await db.insert_analysis("economy_tips", "E1", "Body")

        assert await db.delete_analyses_by_type("forecast") == 2
        assert await db.count_analyses() == 1

    @pytest.mark.asyncio
    async def test_toggle_favorite(self, db):
        analysis_id = await db.insert_analysis("forecast", "F1", "Body")

        assert await db.toggle_favorite(analysis_id) is True
        assert [a["id"] for a in await db.get_favorite_analyses()] == [analysis_id]
        assert await db.toggle_favorite(analysis_id) is False
        assert await db.toggle_favorite(999) is None

    @pytest.mark.asyncio
    async def test_forecast_confidence_range_enforced(self, db):
        with pytest.raises(StorageError):
            await db.insert_forecast("2026-11-01", "monthly", 100, 50, 1.5)

    @pytest.mark.asyncio
    async def test_chat_history_metadata_decoded(self, db):
        await db.insert_chat_turn("hi", "hello", "general", {"intent": "greeting"}, 0)

        history = await db.get_chat_history()
        assert history[0]["metadata"] == {"intent": "greeting"}
