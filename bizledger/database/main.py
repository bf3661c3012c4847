"""
Database - Single source of truth for all database operations.

Usage:
    db = Database("data/bizledger.db")
    await db.connect()
    await db.migrate()
    operations = await db.get_operations(type="expense", limit=20)
"""

import json
import logging
from datetime import date
from pathlib import Path
from typing import Any, Optional, Sequence

import aiosqlite

from bizledger.database.schemas import SCHEMA
from bizledger.errors import DuplicateError, StorageError

logger = logging.getLogger(__name__)

# strftime() formats for statistics buckets
PERIOD_FORMATS = {
    "day": "%Y-%m-%d",
    "week": "%Y-%W",
    "month": "%Y-%m",
    "year": "%Y",
}

_OPERATION_SELECT = """
    SELECT o.*, c.name AS category_name
    FROM operations o
    LEFT JOIN categories c ON o.category_id = c.id
"""


def _iso(value: date | str | None) -> Optional[str]:
    """Normalize a date argument to YYYY-MM-DD text."""
    if value is None:
        return None
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


class Database:
    """Async SQLite store with parameterized query primitives."""

    def __init__(self, path: str | Path):
        self._path = Path(path)
        self._connection: Optional[aiosqlite.Connection] = None

    @property
    def path(self) -> Path:
        return self._path

    @property
    def conn(self) -> aiosqlite.Connection:
        """Get database connection."""
        if not self._connection:
            raise RuntimeError("Database not connected. Call connect() first.")
        return self._connection

    async def connect(self) -> "Database":
        """Open the connection. Schema is applied separately by migrate()."""
        if self._connection is None:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._connection = await aiosqlite.connect(self._path)
            self._connection.row_factory = aiosqlite.Row
            await self._connection.execute("PRAGMA journal_mode=WAL")
            await self._connection.execute("PRAGMA busy_timeout=30000")
            await self._connection.execute("PRAGMA foreign_keys=ON")
        return self

    async def migrate(self) -> None:
        """Create tables and indexes if they do not exist."""
        await self.conn.executescript(SCHEMA)
        await self.conn.commit()
        logger.info(f"Schema applied to {self._path}")

    async def close(self):
        """Close database connection."""
        if self._connection:
            await self._connection.close()
            self._connection = None

    # -------------------------------------------------------------------------
    # Primitives
    # -------------------------------------------------------------------------

    async def execute(self, sql: str, params: Sequence[Any] = ()) -> aiosqlite.Cursor:
        """Run a write statement and commit. Returns the cursor (lastrowid, rowcount)."""
        try:
            cursor = await self.conn.execute(sql, params)
            await self.conn.commit()
            return cursor
        except aiosqlite.IntegrityError as e:
            message = str(e)
            if "UNIQUE" in message:
                raise DuplicateError("Record already exists") from e
            raise StorageError(f"Constraint violation: {message}") from e
        except aiosqlite.Error as e:
            raise StorageError(f"Database error: {e}") from e

    async def fetch_one(self, sql: str, params: Sequence[Any] = ()) -> Optional[dict]:
        """Run a query and return the first row as a dict."""
        try:
            cursor = await self.conn.execute(sql, params)
            row = await cursor.fetchone()
        except aiosqlite.Error as e:
            raise StorageError(f"Database error: {e}") from e
        return dict(row) if row else None

    async def fetch_all(self, sql: str, params: Sequence[Any] = ()) -> list[dict]:
        """Run a query and return all rows as dicts."""
        try:
            cursor = await self.conn.execute(sql, params)
            rows = await cursor.fetchall()
        except aiosqlite.Error as e:
            raise StorageError(f"Database error: {e}") from e
        return [dict(row) for row in rows]

    async def get_table_names(self) -> list[str]:
        rows = await self.fetch_all("SELECT name FROM sqlite_master WHERE type = 'table' ORDER BY name")
        return [row["name"] for row in rows if not row["name"].startswith("sqlite_")]

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    async def get_operation(self, operation_id: int) -> Optional[dict]:
        """Get an operation with its category name."""
        return await self.fetch_one(_OPERATION_SELECT + " WHERE o.id = ?", (operation_id,))

    async def get_operations(
        self,
        type: Optional[str] = None,
        category_id: Optional[int] = None,
        date_from: date | str | None = None,
        date_to: date | str | None = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> list[dict]:
        """
        Get operations with optional filters, newest first.

        Args:
            type: 'income' or 'expense'
            category_id: Filter by category
            date_from: Operations on or after this date (YYYY-MM-DD)
            date_to: Operations on or before this date (YYYY-MM-DD)
            limit: Maximum number of operations to return
            offset: Number of operations to skip

        Returns:
            List of operation dicts including category_name
        """
        query = _OPERATION_SELECT + " WHERE 1=1"
        params: list[Any] = []

        if type:
            query += " AND o.type = ?"
            params.append(type)

        if category_id is not None:
            query += " AND o.category_id = ?"
            params.append(category_id)

        if date_from:
            query += " AND o.operation_date >= ?"
            params.append(_iso(date_from))

        if date_to:
            query += " AND o.operation_date <= ?"
            params.append(_iso(date_to))

        query += " ORDER BY o.operation_date DESC, o.created_at DESC, o.id DESC"

        if limit is not None or offset:
            # LIMIT -1 is unbounded in SQLite
            query += " LIMIT ? OFFSET ?"
            params.extend([-1 if limit is None else limit, offset or 0])

        return await self.fetch_all(query, params)

    async def count_operations(self) -> int:
        row = await self.fetch_one("SELECT COUNT(*) AS cnt FROM operations")
        return row["cnt"] if row else 0

    async def insert_operation(
        self,
        type: str,
        amount: float,
        description: Optional[str],
        category_id: Optional[int],
        operation_date: date | str,
    ) -> int:
        """Insert an operation and return its id."""
        cursor = await self.execute(
            """INSERT INTO operations (type, amount, description, category_id, operation_date)
               VALUES (?, ?, ?, ?, ?)""",
            (type, amount, description, category_id, _iso(operation_date)),
        )
        return cursor.lastrowid

    async def update_operation(
        self,
        operation_id: int,
        type: Optional[str],
        amount: Optional[float],
        description: Optional[str],
        category_id: Optional[int],
        operation_date: date | str | None,
    ) -> int:
        """
        Update an operation in place.

        None keeps the stored value for every field except category_id,
        which is always written as given.

        Returns:
            Number of rows changed
        """
        cursor = await self.execute(
            """UPDATE operations SET
                   type = COALESCE(?, type),
                   amount = COALESCE(?, amount),
                   description = COALESCE(?, description),
                   category_id = ?,
                   operation_date = COALESCE(?, operation_date),
                   updated_at = datetime('now')
               WHERE id = ?""",
            (type, amount, description, category_id, _iso(operation_date), operation_id),
        )
        return cursor.rowcount

    async def delete_operation(self, operation_id: int) -> int:
        """Hard delete an operation. Returns number of rows removed."""
        cursor = await self.execute("DELETE FROM operations WHERE id = ?", (operation_id,))
        return cursor.rowcount

    # -------------------------------------------------------------------------
    # Categories
    # -------------------------------------------------------------------------

    async def get_categories(self) -> list[dict]:
        """Get all categories, alphabetical."""
        return await self.fetch_all("SELECT * FROM categories ORDER BY name")

    async def get_category(self, category_id: int) -> Optional[dict]:
        return await self.fetch_one("SELECT * FROM categories WHERE id = ?", (category_id,))

    async def count_categories(self) -> int:
        row = await self.fetch_one("SELECT COUNT(*) AS cnt FROM categories")
        return row["cnt"] if row else 0

    async def insert_category(self, name: str) -> int:
        """Insert a category. Duplicate names raise StorageError."""
        cursor = await self.execute("INSERT INTO categories (name) VALUES (?)", (name,))
        return cursor.lastrowid

    async def seed_categories(self, names: Sequence[str]) -> None:
        """Insert categories, skipping names that already exist."""
        for name in names:
            await self.conn.execute("INSERT OR IGNORE INTO categories (name) VALUES (?)", (name,))
        await self.conn.commit()

    async def delete_category(self, category_id: int) -> int:
        """Delete a category. Referencing operations keep existing with a null category."""
        cursor = await self.execute("DELETE FROM categories WHERE id = ?", (category_id,))
        return cursor.rowcount

    # -------------------------------------------------------------------------
    # Statistics
    # -------------------------------------------------------------------------

    async def get_period_statistics(
        self,
        period: str,
        date_from: date | str | None = None,
        date_to: date | str | None = None,
    ) -> list[dict]:
        """Income/expense totals and counts per calendar bucket, newest first."""
        query = """
            SELECT
                strftime(?, o.operation_date) AS period,
                COALESCE(SUM(CASE WHEN o.type = 'income' THEN o.amount ELSE 0 END), 0) AS total_income,
                COALESCE(SUM(CASE WHEN o.type = 'expense' THEN o.amount ELSE 0 END), 0) AS total_expense,
                COUNT(CASE WHEN o.type = 'income' THEN 1 END) AS income_count,
                COUNT(CASE WHEN o.type = 'expense' THEN 1 END) AS expense_count
            FROM operations o
            WHERE 1=1
        """
        params: list[Any] = [PERIOD_FORMATS[period]]

        if date_from:
            query += " AND o.operation_date >= ?"
            params.append(_iso(date_from))

        if date_to:
            query += " AND o.operation_date <= ?"
            params.append(_iso(date_to))

        query += " GROUP BY period ORDER BY period DESC"
        return await self.fetch_all(query, params)

    async def get_expenses_by_category(
        self,
        date_from: date | str | None = None,
        date_to: date | str | None = None,
    ) -> list[dict]:
        """Per-category expense rollup over all categories, zero totals filtered out."""
        query = """
            SELECT
                c.id,
                c.name,
                COUNT(o.id) AS operations_count,
                COALESCE(SUM(o.amount), 0) AS total_amount,
                COALESCE(AVG(o.amount), 0) AS avg_amount
            FROM categories c
            LEFT JOIN operations o ON c.id = o.category_id AND o.type = 'expense'
            WHERE 1=1
        """
        params: list[Any] = []

        if date_from:
            query += " AND o.operation_date >= ?"
            params.append(_iso(date_from))

        if date_to:
            query += " AND o.operation_date <= ?"
            params.append(_iso(date_to))

        query += " GROUP BY c.id, c.name HAVING total_amount > 0 ORDER BY total_amount DESC"
        return await self.fetch_all(query, params)

    async def get_expenses_by_category_joined(
        self,
        date_from: date | str | None = None,
        date_to: date | str | None = None,
    ) -> list[dict]:
        """Per-category expense rollup driven from the operations side (inner join)."""
        query = """
            SELECT
                c.id,
                c.name,
                COUNT(o.id) AS operations_count,
                SUM(o.amount) AS total_amount,
                AVG(o.amount) AS avg_amount
            FROM operations o
            JOIN categories c ON o.category_id = c.id
            WHERE o.type = 'expense'
        """
        params: list[Any] = []

        if date_from:
            query += " AND o.operation_date >= ?"
            params.append(_iso(date_from))

        if date_to:
            query += " AND o.operation_date <= ?"
            params.append(_iso(date_to))

        query += " GROUP BY c.id, c.name ORDER BY total_amount DESC"
        return await self.fetch_all(query, params)

    async def count_expenses(
        self,
        date_from: date | str | None = None,
        date_to: date | str | None = None,
    ) -> int:
        query = "SELECT COUNT(*) AS cnt FROM operations WHERE type = 'expense'"
        params: list[Any] = []
        if date_from:
            query += " AND operation_date >= ?"
            params.append(_iso(date_from))
        if date_to:
            query += " AND operation_date <= ?"
            params.append(_iso(date_to))
        row = await self.fetch_one(query, params)
        return row["cnt"] if row else 0

    async def get_summary(self) -> dict:
        """Lifetime totals, counts and first/last operation dates."""
        row = await self.fetch_one(
            """SELECT
                   COALESCE(SUM(CASE WHEN type = 'income' THEN amount ELSE 0 END), 0) AS total_income,
                   COALESCE(SUM(CASE WHEN type = 'expense' THEN amount ELSE 0 END), 0) AS total_expense,
                   COUNT(CASE WHEN type = 'income' THEN 1 END) AS income_count,
                   COUNT(CASE WHEN type = 'expense' THEN 1 END) AS expense_count,
                   MIN(operation_date) AS first_operation_date,
                   MAX(operation_date) AS last_operation_date
               FROM operations"""
        )
        return row or {}

    async def get_monthly_totals(self, since: date | str) -> list[dict]:
        """Monthly totals per operation type since a date, oldest month first."""
        return await self.fetch_all(
            """SELECT
                   strftime('%Y-%m', operation_date) AS month,
                   type,
                   SUM(amount) AS total_amount,
                   COUNT(*) AS count
               FROM operations
               WHERE operation_date >= ?
               GROUP BY month, type
               ORDER BY month""",
            (_iso(since),),
        )

    # -------------------------------------------------------------------------
    # Analyses
    # -------------------------------------------------------------------------

    @staticmethod
    def _decode_analysis(row: dict) -> dict:
        if row.get("data_context"):
            try:
                row["data_context"] = json.loads(row["data_context"])
            except (json.JSONDecodeError, TypeError):
                pass
        row["is_favorite"] = bool(row.get("is_favorite"))
        return row

    async def insert_analysis(
        self,
        type: str,
        title: str,
        content: str,
        tokens: int = 0,
        data_context: Optional[dict] = None,
        source: str = "local",
    ) -> int:
        """Persist an analysis artifact and return its id."""
        cursor = await self.execute(
            """INSERT INTO ai_analyses (type, title, content, tokens, data_context, source)
               VALUES (?, ?, ?, ?, ?, ?)""",
            (
                type,
                title,
                content,
                tokens,
                json.dumps(data_context, ensure_ascii=False, default=str) if data_context is not None else None,
                source,
            ),
        )
        return cursor.lastrowid

    async def get_analyses(self, type: Optional[str] = None, limit: int = 10) -> list[dict]:
        """Get analyses, newest first."""
        query = "SELECT * FROM ai_analyses"
        params: list[Any] = []
        if type:
            query += " WHERE type = ?"
            params.append(type)
        query += " ORDER BY created_at DESC, id DESC LIMIT ?"
        params.append(limit)
        rows = await self.fetch_all(query, params)
        return [self._decode_analysis(row) for row in rows]

    async def get_analysis(self, analysis_id: int) -> Optional[dict]:
        row = await self.fetch_one("SELECT * FROM ai_analyses WHERE id = ?", (analysis_id,))
        return self._decode_analysis(row) if row else None

    async def count_analyses(self, type: Optional[str] = None) -> int:
        if type:
            row = await self.fetch_one("SELECT COUNT(*) AS cnt FROM ai_analyses WHERE type = ?", (type,))
        else:
            row = await self.fetch_one("SELECT COUNT(*) AS cnt FROM ai_analyses")
        return row["cnt"] if row else 0

    async def delete_analysis(self, analysis_id: int) -> int:
        cursor = await self.execute("DELETE FROM ai_analyses WHERE id = ?", (analysis_id,))
        return cursor.rowcount

    async def delete_analyses_by_type(self, type: str) -> int:
        cursor = await self.execute("DELETE FROM ai_analyses WHERE type = ?", (type,))
        return cursor.rowcount

    async def toggle_favorite(self, analysis_id: int) -> Optional[bool]:
        """Flip the favorite flag. Returns the new value, or None if the analysis is absent."""
        row = await self.fetch_one("SELECT is_favorite FROM ai_analyses WHERE id = ?", (analysis_id,))
        if row is None:
            return None
        new_value = 0 if row["is_favorite"] else 1
        await self.execute("UPDATE ai_analyses SET is_favorite = ? WHERE id = ?", (new_value, analysis_id))
        return bool(new_value)

    async def get_favorite_analyses(self) -> list[dict]:
        rows = await self.fetch_all("SELECT * FROM ai_analyses WHERE is_favorite = 1 ORDER BY created_at DESC, id DESC")
        return [self._decode_analysis(row) for row in rows]

    # -------------------------------------------------------------------------
    # Forecasts
    # -------------------------------------------------------------------------

    async def insert_forecast(
        self,
        forecast_date: date | str,
        forecast_type: str,
        predicted_income: float,
        predicted_expense: float,
        confidence_level: float,
        assumptions: Optional[str] = None,
        recommendations: Optional[str] = None,
    ) -> int:
        cursor = await self.execute(
            """INSERT INTO ai_forecasts
               (forecast_date, forecast_type, predicted_income, predicted_expense,
                confidence_level, assumptions, recommendations)
               VALUES (?, ?, ?, ?, ?, ?, ?)""",
            (
                _iso(forecast_date),
                forecast_type,
                predicted_income,
                predicted_expense,
                confidence_level,
                assumptions,
                recommendations,
            ),
        )
        return cursor.lastrowid

    async def get_forecasts(self, limit: int = 10) -> list[dict]:
        return await self.fetch_all(
            "SELECT * FROM ai_forecasts ORDER BY created_at DESC, id DESC LIMIT ?",
            (limit,),
        )

    # -------------------------------------------------------------------------
    # Chat history
    # -------------------------------------------------------------------------

    async def insert_chat_turn(
        self,
        user_message: str,
        ai_response: str,
        context_type: str,
        metadata: Optional[dict] = None,
        tokens_used: int = 0,
    ) -> int:
        cursor = await self.execute(
            """INSERT INTO ai_chat_history (user_message, ai_response, context_type, metadata, tokens_used)
               VALUES (?, ?, ?, ?, ?)""",
            (
                user_message,
                ai_response,
                context_type,
                json.dumps(metadata or {}, ensure_ascii=False),
                tokens_used,
            ),
        )
        return cursor.lastrowid

    async def get_chat_history(self, limit: int = 50) -> list[dict]:
        rows = await self.fetch_all(
            "SELECT * FROM ai_chat_history ORDER BY created_at DESC, id DESC LIMIT ?",
            (limit,),
        )
        for row in rows:
            try:
                row["metadata"] = json.loads(row["metadata"]) if row.get("metadata") else {}
            except (json.JSONDecodeError, TypeError):
                pass
        return rows
