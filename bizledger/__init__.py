"""
Bizledger - Small-business finance tracker.

Usage:
    from bizledger import Database, Settings

    db = Database("data/bizledger.db")
    await db.connect()
    await db.migrate()
"""

from bizledger.database import Database
from bizledger.settings import Settings, get_settings
from bizledger.version import VERSION

__all__ = ["Database", "Settings", "get_settings", "VERSION"]
