"""AI analysis service - data collection, generation, persistence and retrieval.

Every generation follows the same path: collect data for a calendar
window; if there is none, answer with a static message and persist
nothing; otherwise render the local report, ask the provider for its
version when one is configured, and persist the artifact tagged with
where its text came from ('provider', 'local' or 'fallback').
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Callable, Optional

from bizledger.config import analysis as rules
from bizledger.config.categories import UNCATEGORIZED
from bizledger.config.prompts import (
    ANALYSIS_KEYWORDS,
    CANNED_RESPONSES,
    CONTEXTS,
    FALLBACK_RESPONSES,
    SYSTEM_PROMPTS,
)
from bizledger.database import Database
from bizledger.errors import NotFoundError, ProviderError, StorageError, ValidationError
from bizledger.providers import MistralProvider
from bizledger.services import intents
from bizledger.services.analytics import AnalyticsService
from bizledger.services.periods import MONTH_NAMES, add_months, month_period, period_for
from bizledger.services.reports import (
    INSUFFICIENT_FORECAST,
    NO_DATA_ECONOMY,
    NO_DATA_QUARTER,
    CategoryTotal,
    ForecastProjection,
    PeriodData,
    ReportRenderer,
)
from bizledger.settings import Settings

logger = logging.getLogger(__name__)

SOURCE_PROVIDER = "provider"
SOURCE_LOCAL = "local"
SOURCE_FALLBACK = "fallback"
SOURCE_MANUAL = "manual"


@dataclass
class GenerationResult:
    """Outcome of one analysis request."""

    type: str
    content: str
    source: str = SOURCE_LOCAL
    tokens: int = 0
    has_data: bool = True
    saved: bool = False
    saved_id: Optional[int] = None
    details: dict = field(default_factory=dict)

    @property
    def is_fallback(self) -> bool:
        return self.source == SOURCE_FALLBACK

    def to_dict(self) -> dict:
        return {
            "type": self.type,
            "content": self.content,
            "source": self.source,
            "is_fallback": self.is_fallback,
            "tokens": self.tokens,
            "has_data": self.has_data,
            "saved": self.saved,
            "saved_id": self.saved_id,
            **self.details,
        }


@dataclass
class ChatReply:
    response: str
    context: str
    source: str
    tokens: int = 0
    intent: Optional[str] = None

    @property
    def is_fallback(self) -> bool:
        return self.source == SOURCE_FALLBACK

    def to_dict(self) -> dict:
        return {
            "response": self.response,
            "context": self.context,
            "source": self.source,
            "is_fallback": self.is_fallback,
            "tokens": self.tokens,
            "intent": self.intent,
        }


class AIService:
    """Orchestrates financial analyses over the ledger and the completion provider."""

    def __init__(
        self,
        db: Database,
        analytics: AnalyticsService,
        provider: MistralProvider,
        settings: Settings,
        today: Callable[[], date] = date.today,
    ):
        self._db = db
        self._analytics = analytics
        self._provider = provider
        self._settings = settings
        self._today = today
        self.renderer = ReportRenderer(
            currency_symbol=settings.currency_symbol,
            small_expense_threshold=settings.small_expense_threshold,
            frequent_small_expense_warning=settings.frequent_small_expense_warning,
        )

    # -------------------------------------------------------------------------
    # Data collection
    # -------------------------------------------------------------------------

    async def collect_period_data(self, kind: str = "month") -> PeriodData:
        """
        Gather operations and expense rollups for the current month or quarter.

        Returns:
            PeriodData with totals, the top categories by expense, the five
            largest expenses and the number of small expenses
        """
        period = period_for(kind, self._today())
        operations = await self._db.get_operations(date_from=period.start, date_to=period.end)

        data = PeriodData(period=period, operations=operations[:20])
        by_category: dict[str, CategoryTotal] = {}
        expenses = []

        for op in operations:
            if op["type"] == "income":
                data.total_income += op["amount"]
                data.income_count += 1
                continue

            data.total_expense += op["amount"]
            data.expense_count += 1
            expenses.append(op)
            name = op.get("category_name") or UNCATEGORIZED
            bucket = by_category.setdefault(name, CategoryTotal(name=name, total=0.0, count=0))
            bucket.total += op["amount"]
            bucket.count += 1

        data.categories = sorted(by_category.values(), key=lambda c: c.total, reverse=True)[
            : self._settings.top_categories_limit
        ]
        data.top_expenses = [
            {
                "amount": op["amount"],
                "description": op.get("description"),
                "category": op.get("category_name") or UNCATEGORIZED,
                "date": op["operation_date"],
            }
            for op in sorted(expenses, key=lambda o: o["amount"], reverse=True)[: rules.TOP_EXPENSES_LIMIT]
        ]
        data.frequent_small_expenses = sum(
            1 for op in expenses if op["amount"] < self._settings.small_expense_threshold
        )
        return data

    # -------------------------------------------------------------------------
    # Generation
    # -------------------------------------------------------------------------

    async def _generate(self, context: str, local_text: str, prompt: str) -> tuple[str, str, int]:
        """Ask the provider for the text; use the local rendering when it cannot answer."""
        if not self._provider.configured:
            return local_text, SOURCE_LOCAL, 0
        try:
            completion = await self._provider.complete(SYSTEM_PROMPTS[context], prompt)
        except ProviderError as e:
            logger.warning(f"Provider failed for {context} analysis, using local report: {e}")
            return local_text, SOURCE_FALLBACK, 0
        return completion.text, SOURCE_PROVIDER, completion.tokens

    async def _save(self, result: GenerationResult, title: str, data_context: dict) -> GenerationResult:
        """Persist a generated artifact. A storage failure leaves the result unsaved."""
        data_context = {**data_context, "source": result.source, "is_fallback": result.is_fallback}
        try:
            result.saved_id = await self._db.insert_analysis(
                type=result.type,
                title=title,
                content=result.content,
                tokens=result.tokens,
                data_context=data_context,
                source=result.source,
            )
            result.saved = True
        except StorageError:
            logger.exception(f"Could not persist {result.type} analysis")
        return result

    async def analyze_economy(self) -> GenerationResult:
        """Savings analysis for the current month."""
        data = await self.collect_period_data("month")
        if not data.has_data:
            return GenerationResult(
                type=rules.ECONOMY_TIPS,
                content=NO_DATA_ECONOMY,
                has_data=False,
                details={"period": data.period.to_dict(), "statistics": data.statistics()},
            )

        local_text = self.renderer.economy_analysis(data)
        text, source, tokens = await self._generate("economy", local_text, self.renderer.economy_prompt(data))
        insights = self.renderer.economy_insights(data)

        result = GenerationResult(
            type=rules.ECONOMY_TIPS,
            content=text,
            source=source,
            tokens=tokens,
            details={
                "period": data.period.to_dict(),
                "statistics": data.statistics(),
                "insights": insights,
                "categories": [{"name": c.name, "total": c.total, "count": c.count} for c in data.categories],
                "top_expenses": data.top_expenses,
            },
        )
        return await self._save(
            result,
            title=f"Savings analysis for {data.period.label}",
            data_context={
                "period": data.period.to_dict(),
                "statistics": data.statistics(),
                "top_categories": [c.name for c in data.categories[: rules.CRITICAL_CATEGORIES_LIMIT]],
                "insights": insights,
            },
        )

    async def quarter_report(self) -> GenerationResult:
        """Financial report for the current calendar quarter."""
        data = await self.collect_period_data("quarter")
        if not data.has_data:
            return GenerationResult(
                type=rules.QUARTER_REPORT,
                content=NO_DATA_QUARTER,
                has_data=False,
                details={"period": data.period.to_dict(), "statistics": data.statistics()},
            )

        local_text = self.renderer.quarter_report(data)
        text, source, tokens = await self._generate("report", local_text, self.renderer.quarter_prompt(data))
        savings_rate = self.renderer.savings_rate(data)

        result = GenerationResult(
            type=rules.QUARTER_REPORT,
            content=text,
            source=source,
            tokens=tokens,
            details={
                "period": data.period.to_dict(),
                "statistics": data.statistics(),
                "savings_rate": round(savings_rate, 4),
                "positive_balance": data.balance > 0,
                "top_category": data.categories[0].name if data.categories else None,
            },
        )
        return await self._save(
            result,
            title=f"Quarterly report {data.period.label}",
            data_context={
                "period": data.period.to_dict(),
                "statistics": data.statistics(),
                "categories": [{"name": c.name, "total": c.total} for c in data.categories],
                "savings_rate": round(savings_rate, 4),
            },
        )

    async def _monthly_history(self, today: date) -> list[dict]:
        """Income/expense totals of up to three whole months before the current one."""
        since = add_months(today, -rules.FORECAST_HISTORY_MONTHS)
        current_key = f"{today:%Y-%m}"
        months: dict[str, dict] = {}
        for row in await self._db.get_monthly_totals(since):
            if row["month"] >= current_key:
                continue
            month = months.setdefault(row["month"], {"month": row["month"], "income": 0.0, "expense": 0.0})
            month[row["type"]] = row["total_amount"]
        return [months[key] for key in sorted(months)]

    async def forecast(self) -> GenerationResult:
        """Next-month projection from the current month and recent history."""
        today = self._today()
        history = await self._monthly_history(today)
        current = await self.collect_period_data("month")

        if not history and not current.has_data:
            return GenerationResult(type=rules.FORECAST, content=INSUFFICIENT_FORECAST, has_data=False)

        projection = ForecastProjection(
            forecast_date=add_months(today, 1),
            history=history,
            current_income=current.total_income,
            current_expense=current.total_expense,
            predicted_income=round(current.total_income * rules.FORECAST_INCOME_GROWTH),
            predicted_expense=round(current.total_expense * rules.FORECAST_EXPENSE_GROWTH),
            confidence=rules.FORECAST_CONFIDENCE,
            monitor_categories=[c.name for c in current.categories[: rules.CRITICAL_CATEGORIES_LIMIT]],
        )

        local_text = self.renderer.forecast(projection)
        text, source, tokens = await self._generate("forecast", local_text, self.renderer.forecast_prompt(projection))

        forecast_id = None
        try:
            forecast_id = await self._db.insert_forecast(
                forecast_date=projection.forecast_date,
                forecast_type="monthly",
                predicted_income=projection.predicted_income,
                predicted_expense=projection.predicted_expense,
                confidence_level=projection.confidence,
                assumptions=json.dumps(
                    {
                        "income_growth": rules.FORECAST_INCOME_GROWTH,
                        "expense_growth": rules.FORECAST_EXPENSE_GROWTH,
                        "history_months": len(history),
                    }
                ),
                recommendations=text,
            )
        except StorageError:
            logger.exception("Could not persist forecast record")

        result = GenerationResult(
            type=rules.FORECAST,
            content=text,
            source=source,
            tokens=tokens,
            details={"projection": projection.to_dict(), "forecast_id": forecast_id},
        )
        forecast_month = projection.forecast_date
        return await self._save(
            result,
            title=f"Financial forecast for {MONTH_NAMES[forecast_month.month - 1]} {forecast_month.year}",
            data_context={"projection": projection.to_dict(), "forecast_id": forecast_id},
        )

    # -------------------------------------------------------------------------
    # Chat
    # -------------------------------------------------------------------------

    async def chat(self, message: Optional[str], context: Optional[str] = "general") -> ChatReply:
        """
        Answer a chat message.

        With a configured provider the message (enriched with a data snapshot
        when it asks about the numbers) goes to the provider, and any provider
        failure is answered from the fallback table. Without one, the message
        is answered locally by the intent rules.
        """
        message = (message or "").strip()
        if not message:
            raise ValidationError("Message is required")
        if context not in CONTEXTS:
            context = "general"

        if self._provider.configured:
            reply = await self._chat_with_provider(message, context)
            has_data = None
        else:
            data = None
            try:
                data = await self.collect_period_data("month")
            except StorageError as e:
                logger.warning(f"No data context for chat: {e}")
            has_data = bool(data and data.has_data)
            intent = intents.classify(message, has_data)
            reply = ChatReply(
                response=await self._answer_locally(intent, data),
                context=context,
                source=SOURCE_LOCAL,
                intent=intent,
            )

        await self._log_chat(message, reply, has_data)
        return reply

    async def _chat_with_provider(self, message: str, context: str) -> ChatReply:
        enriched = await self._enrich_message(message)
        try:
            completion = await self._provider.complete(SYSTEM_PROMPTS[context], enriched)
        except ProviderError as e:
            logger.warning(f"Provider failed for chat ({context}), using fallback: {e}")
            return ChatReply(response=FALLBACK_RESPONSES[context], context=context, source=SOURCE_FALLBACK)
        return ChatReply(
            response=completion.text,
            context=context,
            source=SOURCE_PROVIDER,
            tokens=completion.tokens,
        )

    async def _enrich_message(self, message: str) -> str:
        """Prefix a compact statistics snapshot when the message asks about the data."""
        text = message.lower()
        if not any(keyword in text for keyword in ANALYSIS_KEYWORDS):
            return message

        period = month_period(self._today())
        try:
            categories = await self._analytics.get_expenses_by_category(period.start, period.end)
            buckets = await self._analytics.get_statistics("month", period.start, period.end)
        except StorageError as e:
            logger.warning(f"Could not build data snapshot for chat: {e}")
            return message

        month = buckets[0] if buckets else {"total_income": 0, "total_expense": 0}
        top = ", ".join(f"{c['name']}: {self.renderer.money(c['total_amount'])}" for c in categories[:3])
        snapshot = (
            "USER DATA CONTEXT:\n"
            f"- Expense categories this month: {len(categories)}\n"
            f"- Top 3 categories: {top or 'none'}\n"
            f"- Total expenses this month: {self.renderer.money(month['total_expense'])}\n"
            f"- Profit this month: {self.renderer.money(month['total_income'] - month['total_expense'])}\n"
        )
        return f"{snapshot}\nUSER QUESTION: {message}"

    async def _answer_locally(self, intent: str, data: Optional[PeriodData]) -> str:
        if data is not None and data.has_data:
            if intent == intents.ECONOMY:
                return self.renderer.economy_analysis(data)
            if intent == intents.REPORT:
                return self.renderer.quarter_report(await self.collect_period_data("quarter"))
            if intent == intents.FORECAST:
                trend = "positive trend" if data.balance >= 0 else "expenses need optimising"
                return (
                    "I can make a forecast from your data. Use the monthly forecast action for details.\n\n"
                    f"In short: {trend}."
                )
            if intent == intents.EXPENSE_QUERY:
                top = ", ".join(c.name for c in data.categories[: rules.CRITICAL_CATEGORIES_LIMIT])
                return (
                    f"This month you spent {self.renderer.money(data.total_expense)}.\n"
                    f"Main categories: {top or 'none'}."
                )
        return CANNED_RESPONSES.get(intent, CANNED_RESPONSES["default"])

    async def _log_chat(self, message: str, reply: ChatReply, has_data: Optional[bool]) -> None:
        """Record the turn. Failures are logged and never reach the caller."""
        try:
            await self._db.insert_chat_turn(
                user_message=message,
                ai_response=reply.response,
                context_type=reply.context,
                metadata={
                    "timestamp": datetime.now().isoformat(timespec="seconds"),
                    "has_data": has_data,
                    "intent": reply.intent,
                    "source": reply.source,
                    "is_fallback": reply.is_fallback,
                },
                tokens_used=reply.tokens,
            )
        except StorageError:
            logger.exception("Could not save chat history")

    async def chat_history(self, limit: int = 50) -> list[dict]:
        _check_limit(limit)
        return await self._db.get_chat_history(limit)

    # -------------------------------------------------------------------------
    # Saved analyses
    # -------------------------------------------------------------------------

    async def list_analyses(self, type: Optional[str] = None, limit: int = 10) -> list[dict]:
        _check_limit(limit)
        return await self._db.get_analyses(type=type, limit=limit)

    async def get_analysis(self, analysis_id: int) -> dict:
        analysis = await self._db.get_analysis(analysis_id)
        if analysis is None:
            raise NotFoundError("Analysis not found")
        return analysis

    async def delete_analysis(self, analysis_id: int) -> None:
        if await self._db.delete_analysis(analysis_id) == 0:
            raise NotFoundError("Analysis not found")
        logger.info(f"Deleted analysis {analysis_id}")

    async def delete_analyses_by_type(self, type: str) -> int:
        deleted = await self._db.delete_analyses_by_type(type)
        logger.info(f"Deleted {deleted} analyses of type {type}")
        return deleted

    async def toggle_favorite(self, analysis_id: int) -> bool:
        value = await self._db.toggle_favorite(analysis_id)
        if value is None:
            raise NotFoundError("Analysis not found")
        return value

    async def list_favorites(self) -> list[dict]:
        return await self._db.get_favorite_analyses()

    async def add_analysis(
        self,
        type: Optional[str],
        title: Optional[str],
        content: Optional[str],
        data_context: Optional[dict[str, Any]] = None,
    ) -> dict:
        """Store an analysis supplied by the caller (manual or test entries)."""
        if not (type or "").strip() or not (title or "").strip() or not (content or "").strip():
            raise ValidationError("Type, title and content are required")
        analysis_id = await self._db.insert_analysis(
            type=type.strip(),
            title=title.strip(),
            content=content,
            data_context={"manual": True, **(data_context or {})},
            source=SOURCE_MANUAL,
        )
        return await self.get_analysis(analysis_id)

    async def list_forecasts(self, limit: int = 10) -> list[dict]:
        _check_limit(limit)
        return await self._db.get_forecasts(limit)

    # -------------------------------------------------------------------------
    # Snapshots and diagnostics
    # -------------------------------------------------------------------------

    async def refresh_data(self) -> dict:
        """Recompute the data snapshot that analyses are built from."""
        expense_categories = await self._analytics.get_expenses_by_category()
        operations = await self._db.get_operations()
        categories = await self._db.get_categories()

        return {
            "operations_count": len(operations),
            "categories_count": len(categories),
            "expense_categories": len(expense_categories),
            "total_expenses": sum(c["total_amount"] for c in expense_categories),
            "last_updated": datetime.now().isoformat(timespec="seconds"),
            "sample_data": {
                "top_expense_categories": expense_categories[:3],
                "recent_operations": [
                    {
                        "id": op["id"],
                        "type": op["type"],
                        "amount": op["amount"],
                        "description": op.get("description"),
                        "category": op.get("category_name"),
                    }
                    for op in operations[:5]
                ],
            },
        }

    async def test_provider(self) -> dict:
        """Send a short greeting to the provider and report how it answered."""
        reply = await self._chat_with_provider("Hello! Are you working?", "general")
        return {
            "configured": self._provider.configured,
            "model": self._provider.model,
            "source": reply.source,
            "is_fallback": reply.is_fallback,
            "tokens": reply.tokens,
            "preview": reply.response[:100],
        }


def _check_limit(limit: int) -> None:
    if limit < 1 or limit > 500:
        raise ValidationError("limit must be between 1 and 500")
