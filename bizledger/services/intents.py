"""Keyword intent classifier for chat messages.

Rules are checked in order and the first match wins, so a message such as
"report on my expenses" resolves to ``report`` rather than ``expense_query``.
Data-driven intents are skipped when the current month has no operations.
"""

from dataclasses import dataclass

ECONOMY = "economy"
REPORT = "report"
FORECAST = "forecast"
EXPENSE_QUERY = "expense_query"
GREETING = "greeting"
HELP = "help"
DEFAULT = "default"


@dataclass(frozen=True)
class IntentRule:
    intent: str
    keywords: tuple[str, ...]
    requires_data: bool


INTENT_RULES: tuple[IntentRule, ...] = (
    IntentRule(ECONOMY, ("where to save", "saving", "econom"), requires_data=True),
    IntentRule(REPORT, ("report", "statistic"), requires_data=True),
    IntentRule(FORECAST, ("forecast", "expect", "predict"), requires_data=True),
    IntentRule(EXPENSE_QUERY, ("spent", "expenses", "how much did"), requires_data=True),
    IntentRule(GREETING, ("hello", "good morning", "good afternoon", "good evening"), requires_data=False),
    IntentRule(HELP, ("help",), requires_data=False),
)


def classify(message: str, has_data: bool) -> str:
    """Return the intent of the first matching rule, or ``default``."""
    text = message.lower()
    for rule in INTENT_RULES:
        if rule.requires_data and not has_data:
            continue
        if any(keyword in text for keyword in rule.keywords):
            return rule.intent
    return DEFAULT
