"""Application services."""

from bizledger.services.ai import AIService
from bizledger.services.analytics import AnalyticsService
from bizledger.services.operations import OperationsService
from bizledger.services.reports import ReportRenderer

__all__ = ["AIService", "AnalyticsService", "OperationsService", "ReportRenderer"]
