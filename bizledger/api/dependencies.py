"""FastAPI dependencies for API routers.

Provides common dependencies that can be injected into route handlers.
"""

from dataclasses import dataclass

from fastapi import Request

from bizledger.database import Database
from bizledger.providers import MistralProvider
from bizledger.services import AIService, AnalyticsService, OperationsService
from bizledger.settings import Settings


@dataclass
class CommonDependencies:
    """Common dependencies used across API routes.

    Usage:
        @router.get("/endpoint")
        async def my_endpoint(deps: Annotated[CommonDependencies, Depends(get_common_deps)]):
            operations = await deps.operations.list_operations()
            # ...
    """

    db: Database
    settings: Settings
    provider: MistralProvider
    operations: OperationsService
    analytics: AnalyticsService
    ai: AIService


async def build_common_deps(settings: Settings) -> CommonDependencies:
    """Open the database, apply the schema and wire the services together."""
    db = Database(settings.database_path)
    await db.connect()
    await db.migrate()

    provider = MistralProvider(settings)
    analytics = AnalyticsService(db)
    return CommonDependencies(
        db=db,
        settings=settings,
        provider=provider,
        operations=OperationsService(db),
        analytics=analytics,
        ai=AIService(db, analytics, provider, settings),
    )


async def get_common_deps(request: Request) -> CommonDependencies:
    """Return the instances created by the application lifespan."""
    return request.app.state.deps
