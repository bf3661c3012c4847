"""API routers for Bizledger.

Each router handles a specific domain of the API.
"""

from bizledger.api.routers.ai import router as ai_router
from bizledger.api.routers.analytics import router as analytics_router
from bizledger.api.routers.operations import categories_router
from bizledger.api.routers.operations import router as operations_router
from bizledger.api.routers.system import banner_router
from bizledger.api.routers.system import router as system_router

__all__ = [
    "ai_router",
    "analytics_router",
    "banner_router",
    "categories_router",
    "operations_router",
    "system_router",
]
