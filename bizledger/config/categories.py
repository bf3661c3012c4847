"""
Categories Configuration - Default expense buckets.

Seeded when the categories table is empty so the category rollup
always has something to join against.
"""

DEFAULT_CATEGORIES = [
    "Accounting",
    "Office Supplies",
    "Fiscal Data Operator",
    "Software",
    "Internet",
    "One-off",
]

# Label used for expenses whose category was removed
UNCATEGORIZED = "Uncategorized"

OPERATION_TYPES = ("income", "expense")
