"""Tests for period windows and report rendering."""

from datetime import date

from bizledger.services.periods import add_months, month_period, quarter_period
from bizledger.services.reports import CategoryTotal, PeriodData, ReportRenderer


def _data(income: float, expense: float, categories=None) -> PeriodData:
    return PeriodData(
        period=month_period(date(2026, 10, 19)),
        total_income=income,
        total_expense=expense,
        income_count=1 if income else 0,
        expense_count=1 if expense else 0,
        categories=categories or [],
    )


class TestPeriods:
    def test_month_period(self):
        period = month_period(date(2026, 2, 14))
        assert period.start == date(2026, 2, 1)
        assert period.end == date(2026, 2, 28)
        assert period.label == "February 2026"

    def test_quarter_period(self):
        period = quarter_period(date(2026, 5, 3))
        assert period.start == date(2026, 4, 1)
        assert period.end == date(2026, 6, 30)
        assert period.label == "Q2 2026"

    def test_add_months_crosses_years(self):
        assert add_months(date(2026, 1, 31), -3) == date(2025, 10, 1)
        assert add_months(date(2026, 12, 5), 1) == date(2027, 1, 1)


class TestRenderer:
    def test_money_format(self):
        assert ReportRenderer().money(1234567.4) == "1,234,567 ₽"
        assert ReportRenderer(currency_symbol="$").money(50) == "50 $"

    def test_savings_rate_without_income(self):
        assert ReportRenderer.savings_rate(_data(0, 500)) == 0.0

    def test_dominant_category_recommendation(self):
        data = _data(10000, 9000, [CategoryTotal("Software", 6000, 2), CategoryTotal("Internet", 3000, 1)])

        recommendations = ReportRenderer().economy_recommendations(data)

        assert recommendations[0].startswith("**Software** takes 67%")
        assert any("Expenses exceed 80% of income" in r for r in recommendations)

    def test_balanced_spending(self):
        categories = [CategoryTotal(name, 250, 1) for name in "ABCD"]
        data = _data(10000, 1000, categories)

        assert ReportRenderer().economy_recommendations(data) == [
            "Your spending structure looks balanced. Keep tracking it monthly."
        ]

    def test_negative_quarter(self):
        report = ReportRenderer().quarter_report(_data(1000, 5000))
        assert "Negative balance" in report
        assert "Savings rate: -400%" in report
