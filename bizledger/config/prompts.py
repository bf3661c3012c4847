"""
Prompt Configuration - System instructions per chat context and the
offline fallback table used when the completion provider is unavailable.
"""

CONTEXTS = ("economy", "report", "forecast", "general")

SYSTEM_PROMPTS = {
    "economy": (
        "You are a financial consultant. Analyse expenses and give concrete savings "
        "recommendations. Be practical, use figures and clear steps."
    ),
    "report": (
        "You are a financial analyst. Produce structured reports with headings, "
        "bullet points and clear conclusions."
    ),
    "forecast": (
        "You are a financial forecaster. Make realistic forecasts and state the "
        "assumptions and risks behind them."
    ),
    "general": (
        "You are a financial assistant for a small business. Answer briefly, "
        "informatively and professionally. Help with finances, budgeting and planning."
    ),
}

FALLBACK_RESPONSES = {
    "economy": (
        "## Savings recommendations\n\n"
        "The AI service is temporarily unavailable. Review optional spending, "
        "renegotiate recurring payments and group small purchases together."
    ),
    "report": (
        "# Financial report\n\n"
        "The AI service is temporarily unavailable. Use the quarterly report "
        "action to get a report built from your own data."
    ),
    "forecast": (
        "## Forecast\n\n"
        "The AI service is temporarily unavailable. Use the forecast action "
        "to get a projection built from your own data."
    ),
    "general": (
        "I am your financial assistant. The AI service is temporarily unavailable, "
        "please try again later or use the analysis actions."
    ),
}

# Keywords that make a chat message worth enriching with a data snapshot
ANALYSIS_KEYWORDS = ("analy", "data", "expens", "spend", "saving", "econom")

# Canned answers used when no data is available
CANNED_RESPONSES = {
    "greeting": (
        "Hello! I am your financial assistant. I can analyse your expenses, "
        "suggest where to save or make a forecast."
    ),
    "help": (
        "I can:\n"
        "• Analyse your expenses and suggest savings\n"
        "• Build a quarterly financial report\n"
        "• Forecast next month\n"
        "• Answer questions about your finances\n\n"
        "Use the quick actions or ask a specific question."
    ),
    "default": (
        "I am a financial assistant and can help analyse your financial data. "
        "Ask a specific question or use the quick actions."
    ),
}
