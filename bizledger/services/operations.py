"""Operations service - validated CRUD over operations and categories."""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Callable, Optional

from bizledger.config.categories import OPERATION_TYPES
from bizledger.database import Database
from bizledger.errors import DuplicateError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)


class OperationsService:
    """Business rules for income/expense operations and expense categories.

    Income never carries a category; expense requires one on creation.
    """

    def __init__(self, db: Database, today: Callable[[], date] = date.today):
        self._db = db
        self._today = today

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    async def list_operations(
        self,
        type: Optional[str] = None,
        category_id: Optional[int] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> list[dict]:
        if type is not None and type not in OPERATION_TYPES:
            raise ValidationError('Operation type must be "income" or "expense"')
        if limit is not None and limit < 0:
            raise ValidationError("limit must not be negative")
        if offset is not None and offset < 0:
            raise ValidationError("offset must not be negative")
        return await self._db.get_operations(
            type=type,
            category_id=category_id,
            date_from=date_from,
            date_to=date_to,
            limit=limit,
            offset=offset,
        )

    async def get_operation(self, operation_id: int) -> dict:
        operation = await self._db.get_operation(operation_id)
        if operation is None:
            raise NotFoundError("Operation not found")
        return operation

    async def create_operation(
        self,
        type: Optional[str],
        amount: Optional[float],
        description: Optional[str] = None,
        category_id: Optional[int] = None,
        operation_date: Optional[date] = None,
    ) -> dict:
        """
        Create an operation.

        Raises:
            ValidationError: invalid type, non-positive amount, missing or
                unknown category on an expense
        """
        if type not in OPERATION_TYPES:
            raise ValidationError('Operation type must be "income" or "expense"')
        if amount is None or amount <= 0:
            raise ValidationError("Amount must be greater than 0")

        if type == "income":
            category_id = None
        else:
            if category_id is None:
                raise ValidationError("Category is required for expenses")
            await self._require_category(category_id)

        operation_id = await self._db.insert_operation(
            type=type,
            amount=float(amount),
            description=description or None,
            category_id=category_id,
            operation_date=operation_date or self._today(),
        )
        logger.info(f"Created {type} operation {operation_id} for {amount}")
        return await self.get_operation(operation_id)

    async def update_operation(self, operation_id: int, **changes: Any) -> dict:
        """
        Partially update an operation.

        Fields absent from ``changes`` (or given as None) keep their stored
        value. The category is recomputed from the resulting type: income
        always clears it; when the type is part of the update the supplied
        category is used as-is (None when omitted); otherwise a supplied
        category replaces the stored one and an omitted one is kept.
        """
        existing = await self._db.get_operation(operation_id)
        if existing is None:
            raise NotFoundError("Operation not found")

        new_type = changes.get("type")
        amount = changes.get("amount")
        supplied_category = changes.get("category_id")

        if new_type is not None and new_type not in OPERATION_TYPES:
            raise ValidationError('Operation type must be "income" or "expense"')
        if amount is not None and amount <= 0:
            raise ValidationError("Amount must be greater than 0")

        effective_type = new_type or existing["type"]
        if effective_type == "income":
            category_id = None
        elif new_type is not None:
            category_id = supplied_category
        elif supplied_category is not None:
            category_id = supplied_category
        else:
            category_id = existing["category_id"]

        if category_id is not None and category_id != existing["category_id"]:
            await self._require_category(category_id)

        changed = await self._db.update_operation(
            operation_id,
            type=new_type,
            amount=float(amount) if amount is not None else None,
            description=changes.get("description"),
            category_id=category_id,
            operation_date=changes.get("operation_date"),
        )
        if changed == 0:
            raise NotFoundError("Operation not found")
        return await self.get_operation(operation_id)

    async def delete_operation(self, operation_id: int) -> None:
        removed = await self._db.delete_operation(operation_id)
        if removed == 0:
            raise NotFoundError("Operation not found")
        logger.info(f"Deleted operation {operation_id}")

    # -------------------------------------------------------------------------
    # Categories
    # -------------------------------------------------------------------------

    async def list_categories(self) -> list[dict]:
        return await self._db.get_categories()

    async def create_category(self, name: Optional[str]) -> dict:
        """
        Create a category with a trimmed, non-empty, unique name.

        Raises:
            ValidationError: empty name
            DuplicateError: a category with this name already exists
        """
        name = (name or "").strip()
        if not name:
            raise ValidationError("Category name is required")

        try:
            category_id = await self._db.insert_category(name)
        except DuplicateError as e:
            raise DuplicateError(f'Category "{name}" already exists') from e

        return await self._db.get_category(category_id)

    async def _require_category(self, category_id: int) -> None:
        if await self._db.get_category(category_id) is None:
            raise ValidationError(f"Category {category_id} does not exist")
