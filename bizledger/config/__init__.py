"""
Bizledger Configuration Package

Contains configuration constants and defaults.
"""

from bizledger.config.analysis import (
    FORECAST_CONFIDENCE,
    FORECAST_EXPENSE_GROWTH,
    FORECAST_INCOME_GROWTH,
    POTENTIAL_SAVINGS_RATE,
)
from bizledger.config.categories import DEFAULT_CATEGORIES, UNCATEGORIZED
from bizledger.config.prompts import FALLBACK_RESPONSES, SYSTEM_PROMPTS

__all__ = [
    "DEFAULT_CATEGORIES",
    "UNCATEGORIZED",
    "POTENTIAL_SAVINGS_RATE",
    "FORECAST_INCOME_GROWTH",
    "FORECAST_EXPENSE_GROWTH",
    "FORECAST_CONFIDENCE",
    "SYSTEM_PROMPTS",
    "FALLBACK_RESPONSES",
]
