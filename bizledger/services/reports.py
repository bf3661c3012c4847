"""
Report rendering - structured analysis data in, Markdown text out.

Nothing here touches the database or the provider. The AI service
collects PeriodData / ForecastProjection and uses ReportRenderer both
for the locally generated reports and for the prompts sent to the
completion provider.
"""

import json
from dataclasses import asdict, dataclass, field
from datetime import date
from typing import Any

from bizledger.config import analysis as rules
from bizledger.services.periods import Period


@dataclass
class CategoryTotal:
    name: str
    total: float
    count: int


@dataclass
class PeriodData:
    """Everything an analysis needs about one calendar window."""

    period: Period
    total_income: float = 0.0
    total_expense: float = 0.0
    income_count: int = 0
    expense_count: int = 0
    categories: list[CategoryTotal] = field(default_factory=list)
    top_expenses: list[dict] = field(default_factory=list)
    frequent_small_expenses: int = 0
    operations: list[dict] = field(default_factory=list)  # newest first, capped for the provider prompt

    @property
    def balance(self) -> float:
        return self.total_income - self.total_expense

    @property
    def operations_count(self) -> int:
        return self.income_count + self.expense_count

    @property
    def has_data(self) -> bool:
        return self.operations_count > 0

    def statistics(self) -> dict:
        return {
            "total_operations": self.operations_count,
            "total_income": self.total_income,
            "total_expense": self.total_expense,
            "balance": self.balance,
            "income_count": self.income_count,
            "expense_count": self.expense_count,
        }

    def category_share(self, category: CategoryTotal) -> int:
        """Percentage of total expense, rounded."""
        if self.total_expense <= 0:
            return 0
        return round(category.total / self.total_expense * 100)

    def to_dict(self) -> dict:
        return {
            "period": self.period.to_dict(),
            "statistics": self.statistics(),
            "categories": [asdict(c) for c in self.categories],
            "top_expenses": self.top_expenses,
            "frequent_small_expenses": self.frequent_small_expenses,
            "recent_operations": [
                {
                    "date": op["operation_date"],
                    "type": op["type"],
                    "amount": op["amount"],
                    "category": op.get("category_name"),
                    "description": op.get("description"),
                }
                for op in self.operations
            ],
        }


@dataclass
class ForecastProjection:
    """Next-month projection carried as numbers, rendered to text afterwards."""

    forecast_date: date
    history: list[dict]
    current_income: float
    current_expense: float
    predicted_income: float
    predicted_expense: float
    confidence: float
    monitor_categories: list[str]

    @property
    def current_balance(self) -> float:
        return self.current_income - self.current_expense

    @property
    def predicted_profit(self) -> float:
        return self.predicted_income - self.predicted_expense

    def to_dict(self) -> dict:
        data = asdict(self)
        data["forecast_date"] = self.forecast_date.isoformat()
        data["current_balance"] = self.current_balance
        data["predicted_profit"] = self.predicted_profit
        return data


NO_DATA_ECONOMY = (
    "📊 **Expense analysis**\n\n"
    "You have no operations for the current month yet.\n\n"
    "**What you can do:**\n"
    "1. Add a few income and expense operations\n"
    "2. Assign categories to expenses\n"
    "3. Fill in descriptions for a better analysis\n\n"
    "Once there is data I can give concrete savings recommendations."
)

NO_DATA_QUARTER = (
    "📈 **Quarterly financial report**\n\n"
    "There were no operations in the current quarter.\n\n"
    "**Recommendations:**\n"
    "1. Start recording income and expenses\n"
    "2. Add operations regularly\n"
    "3. Assign categories for a better analysis\n\n"
    "Once data accumulates I can provide detailed reports."
)

INSUFFICIENT_FORECAST = (
    "🔮 **Financial forecast for next month**\n\n"
    "Not enough data for a forecast.\n\n"
    "**What to do:**\n"
    "1. Add operations for the current month\n"
    "2. Keep records regularly\n"
    "3. After a month there will be enough data to forecast"
)


class ReportRenderer:
    """Renders analyses and provider prompts in one currency."""

    def __init__(
        self,
        currency_symbol: str = "₽",
        small_expense_threshold: float = 1000.0,
        frequent_small_expense_warning: int = 10,
    ):
        self.currency_symbol = currency_symbol
        self.small_expense_threshold = small_expense_threshold
        self.frequent_small_expense_warning = frequent_small_expense_warning

    def money(self, amount: float) -> str:
        """Format an amount with thousands separators and no decimals."""
        return f"{amount:,.0f} {self.currency_symbol}"

    # -------------------------------------------------------------------------
    # Economy tips
    # -------------------------------------------------------------------------

    def economy_analysis(self, data: PeriodData) -> str:
        lines = [
            f"📊 **Expense analysis for {data.period.label}**",
            "",
            "**Key figures:**",
            f"• Total expenses: {self.money(data.total_expense)}",
            f"• Total income: {self.money(data.total_income)}",
            f"• Balance: {self.money(data.balance)}",
            f"• Operations: {data.operations_count}",
            "",
        ]

        if data.categories:
            lines.append(f"**Expenses by category (top {rules.SUMMARY_CATEGORIES_LIMIT}):**")
            for index, category in enumerate(data.categories[: rules.SUMMARY_CATEGORIES_LIMIT], start=1):
                lines.append(
                    f"{index}. {category.name}: {self.money(category.total)} "
                    f"({data.category_share(category)}%, {category.count} operations)"
                )
            lines.append("")

        if data.top_expenses:
            lines.append("**Largest expenses:**")
            for index, expense in enumerate(data.top_expenses, start=1):
                description = expense.get("description") or "No description"
                lines.append(f"{index}. {self.money(expense['amount'])} - {description} ({expense['category']})")
            lines.append("")

        if data.frequent_small_expenses > self.frequent_small_expense_warning:
            lines.append(
                f"⚠️ **Attention:** you have {data.frequent_small_expenses} small expenses "
                f"(under {self.money(self.small_expense_threshold)}). They can add up to a significant amount."
            )
            lines.append("")

        lines.append("**Recommendations:**")
        recommendations = self.economy_recommendations(data)
        lines.extend(f"{index}. {text}" for index, text in enumerate(recommendations, start=1))

        lines.extend(
            [
                "",
                "**Next steps:**",
                "• Set a monthly budget for key categories",
                "• Track progress every week",
                "• Use the forecast to plan ahead",
            ]
        )
        return "\n".join(lines)

    def economy_recommendations(self, data: PeriodData) -> list[str]:
        """Rule-based recommendations for the economy analysis."""
        if not data.categories:
            return [
                "Start assigning categories to expenses for a more detailed analysis.",
                "Fill in operation descriptions so recommendations can be more precise.",
            ]

        recommendations = []
        top = data.categories[0]
        share = data.category_share(top)
        if share > rules.DOMINANT_CATEGORY_PCT:
            recommendations.append(f"**{top.name}** takes {share}% of your expenses. Consider reducing it.")

        if data.total_expense > data.total_income * rules.EXPENSE_INCOME_RATIO:
            recommendations.append(
                f"Expenses exceed {round(rules.EXPENSE_INCOME_RATIO * 100)}% of income. "
                "Consider raising your savings rate."
            )

        if data.frequent_small_expenses > 0:
            recommendations.append("Group small purchases together for better control over spending.")

        if not recommendations:
            recommendations.append("Your spending structure looks balanced. Keep tracking it monthly.")
        return recommendations

    def economy_insights(self, data: PeriodData) -> dict:
        return {
            "critical_categories": [c.name for c in data.categories[: rules.CRITICAL_CATEGORIES_LIMIT]],
            "potential_savings": round(data.total_expense * rules.POTENTIAL_SAVINGS_RATE),
            "large_expenses_count": len(data.top_expenses),
            "frequent_small_expenses": data.frequent_small_expenses,
        }

    # -------------------------------------------------------------------------
    # Quarter report
    # -------------------------------------------------------------------------

    @staticmethod
    def savings_rate(data: PeriodData) -> float:
        if data.total_income <= 0:
            return 0.0
        return data.balance / data.total_income

    def quarter_report(self, data: PeriodData) -> str:
        rate = self.savings_rate(data)
        lines = [
            "📈 **Quarterly financial report**",
            f"Period: {data.period.start:%d %B %Y} - {data.period.end:%d %B %Y}",
            "",
            "**Financial results:**",
            f"• Total income: {self.money(data.total_income)}",
            f"• Total expenses: {self.money(data.total_expense)}",
            f"• Net result: {self.money(data.balance)}",
            f"• Savings rate: {round(rate * 100)}%",
            f"• Operations: {data.operations_count}",
            "",
        ]

        if data.categories:
            lines.append("**Expense structure:**")
            for index, category in enumerate(data.categories, start=1):
                lines.append(
                    f"{index}. {category.name}: {self.money(category.total)} ({data.category_share(category)}%)"
                )
            lines.append("")

        lines.append("**Performance:**")
        if data.balance > 0:
            lines.append("✅ Positive financial result")
            if rate > rules.EXCELLENT_SAVINGS_RATE:
                lines.append(f"• Excellent savings rate (above {round(rules.EXCELLENT_SAVINGS_RATE * 100)}%)")
        else:
            lines.append("⚠️ Negative balance. Review the structure of your expenses.")

        lines.extend(["", "**Recommendations for next quarter:**"])
        recommendations = []
        if data.categories:
            recommendations.append(f'Watch the "{data.categories[0].name}" category, it is the most expensive')
        recommendations.extend(
            [
                "Plan large purchases in advance",
                "Track budget progress regularly",
                "Consider investing part of your savings",
            ]
        )
        lines.extend(f"{index}. {text}" for index, text in enumerate(recommendations, start=1))
        return "\n".join(lines)

    # -------------------------------------------------------------------------
    # Forecast
    # -------------------------------------------------------------------------

    def forecast(self, projection: ForecastProjection) -> str:
        lines = ["🔮 **Financial forecast for next month**", ""]

        if projection.history:
            lines.append(f"**Historical data ({len(projection.history)} months):**")
            for month in projection.history:
                lines.append(
                    f"• {month['month']}: income {self.money(month['income'])}, "
                    f"expenses {self.money(month['expense'])}"
                )
            lines.append("")

        lines.extend(
            [
                "**Current month:**",
                f"• Income: {self.money(projection.current_income)}",
                f"• Expenses: {self.money(projection.current_expense)}",
                f"• Balance: {self.money(projection.current_balance)}",
                "",
                f"**Forecast for {projection.forecast_date:%B %Y}:**",
                f"• Expected income: {self.money(projection.predicted_income)} "
                f"(±{rules.FORECAST_INCOME_MARGIN_PCT}%)",
                f"• Expected expenses: {self.money(projection.predicted_expense)} "
                f"(±{rules.FORECAST_EXPENSE_MARGIN_PCT}%)",
                f"• Projected profit: {self.money(projection.predicted_profit)}",
                f"• Confidence: {round(projection.confidence * 100)}%",
                "",
                "**Recommendations:**",
                "1. Keep the current income structure",
            ]
        )
        if projection.monitor_categories:
            lines.append(f"2. Watch expense growth in: {', '.join(projection.monitor_categories)}")
        else:
            lines.append("2. Assign categories to expenses to see where spending grows")
        lines.append("3. Build a reserve covering 3-6 months of expenses")
        return "\n".join(lines)

    # -------------------------------------------------------------------------
    # Provider prompts
    # -------------------------------------------------------------------------

    @staticmethod
    def _json(payload: Any) -> str:
        return json.dumps(payload, ensure_ascii=False, indent=2, default=str)

    def economy_prompt(self, data: PeriodData) -> str:
        return (
            "Analyse these REAL business expenses and give savings recommendations.\n\n"
            f"EXPENSE DATA:\n{self._json(data.to_dict())}\n\n"
            f"Amounts are in {self.currency_symbol}. Be concrete and use the figures."
        )

    def quarter_prompt(self, data: PeriodData) -> str:
        return (
            "Write a quarterly financial report.\n\n"
            f"QUARTER DATA:\n{self._json(data.to_dict())}\n\n"
            "STRUCTURE:\n"
            "1. Quarter overview\n"
            "2. Key figures\n"
            "3. Expenses by category\n"
            "4. Trends\n"
            "5. Conclusions and recommendations\n\n"
            f"Amounts are in {self.currency_symbol}. Be specific and professional."
        )

    def forecast_prompt(self, projection: ForecastProjection) -> str:
        return (
            "Explain this financial forecast for next month.\n\n"
            f"PROJECTION:\n{self._json(projection.to_dict())}\n\n"
            "Keep the projected figures exactly as given. Describe the assumptions, "
            "potential risks, recommendations and checkpoints to track. "
            f"Amounts are in {self.currency_symbol}."
        )
