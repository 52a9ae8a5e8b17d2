"""Category routes. Categories are addressed by name."""

from fastapi import APIRouter, Query, status

from ..database import Engine
from ..models import CategoryPayload, CategoryRename, MutationResponse, mutation_response

router = APIRouter(tags=["categories"])


@router.post(
    "/addCategory",
    response_model=MutationResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
)
async def add_category(payload: CategoryPayload, engine: Engine):
    """Create a category, or bring back a deleted one with the same name."""
    result = engine.add_category(payload.model_dump(exclude_unset=True))
    return mutation_response(result)


@router.delete(
    "/deleteCategory/{name}",
    response_model=MutationResponse,
    response_model_exclude_none=True,
)
async def delete_category(
    name: str,
    engine: Engine,
    session: str | None = Query(None),
    deleteforever: str | None = Query(None),
):
    """Soft-delete a category, or remove it for good with ``deleteforever=true``."""
    result = engine.delete_category(name, session=session, forever=deleteforever == "true")
    return mutation_response(result)


@router.put(
    "/updateCategory/{old_name}",
    response_model=MutationResponse,
    response_model_exclude_none=True,
)
async def update_category(old_name: str, payload: CategoryRename, engine: Engine):
    """Rename a category; notes and tasks filed under it follow."""
    result = engine.rename_category(old_name, payload.newName)
    return mutation_response(result)
