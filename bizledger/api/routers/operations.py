"""Operation and category API routes."""

from datetime import date
from typing import Any, Optional

from fastapi import APIRouter, Depends
from typing_extensions import Annotated

from bizledger.api.dependencies import CommonDependencies, get_common_deps
from bizledger.api.errors import success_response
from bizledger.api.models import CategoryCreate, OperationCreate, OperationUpdate

router = APIRouter(prefix="/operations", tags=["operations"])
categories_router = APIRouter(prefix="/categories", tags=["categories"])


@router.get("")
async def list_operations(
    deps: Annotated[CommonDependencies, Depends(get_common_deps)],
    type: Optional[str] = None,
    category_id: Optional[int] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    limit: Optional[int] = None,
    offset: Optional[int] = None,
) -> dict[str, Any]:
    """List operations, newest first."""
    operations = await deps.operations.list_operations(
        type=type,
        category_id=category_id,
        date_from=date_from,
        date_to=date_to,
        limit=limit,
        offset=offset,
    )
    return success_response(data=operations)


@router.post("", status_code=201)
async def create_operation(
    body: OperationCreate,
    deps: Annotated[CommonDependencies, Depends(get_common_deps)],
) -> dict[str, Any]:
    operation = await deps.operations.create_operation(
        type=body.type,
        amount=body.amount,
        description=body.description,
        category_id=body.category_id,
        operation_date=body.operation_date,
    )
    return success_response(data=operation, message="Operation created")


@router.get("/{operation_id}")
async def get_operation(
    operation_id: int,
    deps: Annotated[CommonDependencies, Depends(get_common_deps)],
) -> dict[str, Any]:
    return success_response(data=await deps.operations.get_operation(operation_id))


@router.put("/{operation_id}")
async def update_operation(
    operation_id: int,
    body: OperationUpdate,
    deps: Annotated[CommonDependencies, Depends(get_common_deps)],
) -> dict[str, Any]:
    """Update the supplied fields of an operation."""
    operation = await deps.operations.update_operation(operation_id, **body.model_dump(exclude_unset=True))
    return success_response(data=operation, message="Operation updated")


@router.delete("/{operation_id}")
async def delete_operation(
    operation_id: int,
    deps: Annotated[CommonDependencies, Depends(get_common_deps)],
) -> dict[str, Any]:
    await deps.operations.delete_operation(operation_id)
    return success_response(message="Operation deleted")


# Categories router endpoints


@categories_router.get("")
async def list_categories(
    deps: Annotated[CommonDependencies, Depends(get_common_deps)],
) -> dict[str, Any]:
    """List expense categories by name."""
    return success_response(data=await deps.operations.list_categories())


@categories_router.post("", status_code=201)
async def create_category(
    body: CategoryCreate,
    deps: Annotated[CommonDependencies, Depends(get_common_deps)],
) -> dict[str, Any]:
    category = await deps.operations.create_category(body.name)
    return success_response(data=category, message="Category created")
