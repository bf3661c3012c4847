"""AI analysis API routes.

Generation endpoints always answer with ``success: true``; when the
completion provider is unavailable the payload carries locally rendered
text and ``is_fallback: true``.
"""

from typing import Any, Optional

from fastapi import APIRouter, Depends
from typing_extensions import Annotated

from bizledger.api.dependencies import CommonDependencies, get_common_deps
from bizledger.api.errors import success_response
from bizledger.api.models import AnalysisCreate, ChatRequest

router = APIRouter(prefix="/ai", tags=["ai"])


# Generation


@router.post("/analyze-economy")
async def analyze_economy(
    deps: Annotated[CommonDependencies, Depends(get_common_deps)],
) -> dict[str, Any]:
    """Savings analysis for the current month."""
    result = await deps.ai.analyze_economy()
    return success_response(data=result.to_dict())


@router.get("/quarter-report")
async def quarter_report(
    deps: Annotated[CommonDependencies, Depends(get_common_deps)],
) -> dict[str, Any]:
    result = await deps.ai.quarter_report()
    return success_response(data=result.to_dict())


@router.get("/forecast")
async def forecast(
    deps: Annotated[CommonDependencies, Depends(get_common_deps)],
) -> dict[str, Any]:
    """Next-month projection."""
    result = await deps.ai.forecast()
    return success_response(data=result.to_dict())


@router.post("/chat")
async def chat(
    body: ChatRequest,
    deps: Annotated[CommonDependencies, Depends(get_common_deps)],
) -> dict[str, Any]:
    reply = await deps.ai.chat(body.message, body.context)
    return success_response(data=reply.to_dict())


@router.get("/chat/history")
async def chat_history(
    deps: Annotated[CommonDependencies, Depends(get_common_deps)],
    limit: int = 50,
) -> dict[str, Any]:
    return success_response(data=await deps.ai.chat_history(limit))


@router.get("/forecasts")
async def list_forecasts(
    deps: Annotated[CommonDependencies, Depends(get_common_deps)],
    limit: int = 10,
) -> dict[str, Any]:
    return success_response(data=await deps.ai.list_forecasts(limit))


# Saved analyses


@router.get("/analyses")
async def list_analyses(
    deps: Annotated[CommonDependencies, Depends(get_common_deps)],
    type: Optional[str] = None,
    limit: int = 10,
) -> dict[str, Any]:
    """List saved analyses, newest first."""
    return success_response(data=await deps.ai.list_analyses(type=type, limit=limit))


@router.get("/analyses/favorites")
async def list_favorites(
    deps: Annotated[CommonDependencies, Depends(get_common_deps)],
) -> dict[str, Any]:
    return success_response(data=await deps.ai.list_favorites())


@router.get("/analyses/{analysis_id}")
async def get_analysis(
    analysis_id: int,
    deps: Annotated[CommonDependencies, Depends(get_common_deps)],
) -> dict[str, Any]:
    return success_response(data=await deps.ai.get_analysis(analysis_id))


@router.delete("/analyses/{analysis_id}")
async def delete_analysis(
    analysis_id: int,
    deps: Annotated[CommonDependencies, Depends(get_common_deps)],
) -> dict[str, Any]:
    await deps.ai.delete_analysis(analysis_id)
    return success_response(message="Analysis deleted")


@router.post("/analyses/{analysis_id}/favorite")
async def toggle_favorite(
    analysis_id: int,
    deps: Annotated[CommonDependencies, Depends(get_common_deps)],
) -> dict[str, Any]:
    is_favorite = await deps.ai.toggle_favorite(analysis_id)
    return success_response(data={"id": analysis_id, "is_favorite": is_favorite})


@router.delete("/analyses/type/{analysis_type}")
async def delete_analyses_by_type(
    analysis_type: str,
    deps: Annotated[CommonDependencies, Depends(get_common_deps)],
) -> dict[str, Any]:
    """Delete every analysis of one type."""
    deleted = await deps.ai.delete_analyses_by_type(analysis_type)
    return success_response(data={"deleted": deleted}, message=f"Deleted {deleted} analyses")


@router.post("/test-add-analysis", status_code=201)
async def add_analysis(
    body: AnalysisCreate,
    deps: Annotated[CommonDependencies, Depends(get_common_deps)],
) -> dict[str, Any]:
    analysis = await deps.ai.add_analysis(body.type, body.title, body.content, body.data_context)
    return success_response(data=analysis, message="Analysis saved")


# Data and provider


@router.post("/refresh-data")
async def refresh_data(
    deps: Annotated[CommonDependencies, Depends(get_common_deps)],
) -> dict[str, Any]:
    """Recompute the data snapshot used by the analyses."""
    return success_response(data=await deps.ai.refresh_data(), message="Data refreshed")


@router.get("/provider/test")
async def test_provider(
    deps: Annotated[CommonDependencies, Depends(get_common_deps)],
) -> dict[str, Any]:
    return success_response(data=await deps.ai.test_provider())
