"""
Database Package

Provides database access for the Bizledger application.
"""

from bizledger.database.main import Database
from bizledger.database.schemas import SCHEMA

__all__ = ["Database", "SCHEMA"]
