"""
Analysis Configuration - Heuristic constants used by the report generators.
"""

# Economy tips
POTENTIAL_SAVINGS_RATE = 0.15  # Estimated savings as a share of total expense
DOMINANT_CATEGORY_PCT = 30  # Flag a category above this share of expenses
EXPENSE_INCOME_RATIO = 0.8  # Flag expenses above this share of income
TOP_EXPENSES_LIMIT = 5
SUMMARY_CATEGORIES_LIMIT = 5
CRITICAL_CATEGORIES_LIMIT = 3

# Quarter report
EXCELLENT_SAVINGS_RATE = 0.2

# Forecast
FORECAST_HISTORY_MONTHS = 3
FORECAST_INCOME_GROWTH = 1.05
FORECAST_EXPENSE_GROWTH = 1.03
FORECAST_CONFIDENCE = 0.7
FORECAST_INCOME_MARGIN_PCT = 10
FORECAST_EXPENSE_MARGIN_PCT = 15

# Analysis types
ECONOMY_TIPS = "economy_tips"
QUARTER_REPORT = "quarter_report"
FORECAST = "forecast"
