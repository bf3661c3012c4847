"""Request bodies for the HTTP API.

Fields are optional at the model level so that business-rule violations
(missing amount, wrong type) are reported by the services with their own
messages.
"""

from datetime import date
from typing import Any, Optional

from pydantic import BaseModel, Field


class OperationCreate(BaseModel):
    """Request to record an income or expense."""

    type: Optional[str] = Field(None, description="'income' or 'expense'")
    amount: Optional[float] = Field(None, description="Positive amount")
    description: Optional[str] = None
    category_id: Optional[int] = Field(None, description="Required for expenses, ignored for income")
    operation_date: Optional[date] = Field(None, description="Defaults to today")


class OperationUpdate(BaseModel):
    """Partial update of an operation. Omitted fields keep their value."""

    type: Optional[str] = None
    amount: Optional[float] = None
    description: Optional[str] = None
    category_id: Optional[int] = None
    operation_date: Optional[date] = None


class CategoryCreate(BaseModel):
    name: Optional[str] = None


class ChatRequest(BaseModel):
    message: Optional[str] = None
    context: Optional[str] = Field("general", description="economy, report, forecast or general")


class AnalysisCreate(BaseModel):
    """Manually stored analysis."""

    type: Optional[str] = None
    title: Optional[str] = None
    content: Optional[str] = None
    data_context: Optional[dict[str, Any]] = None
