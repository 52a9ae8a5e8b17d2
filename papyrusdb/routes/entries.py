"""Note and task routes.

Notes and tasks live in one keyspace; the task routes differ only in the
kind they pass to the engine.
"""

from fastapi import APIRouter, Query

from ..database import Engine
from ..models import MutationResponse, NotePayload, TaskPayload, mutation_response

router = APIRouter(tags=["entries"])


@router.post("/addNote", response_model=MutationResponse, response_model_exclude_none=True)
async def add_note(payload: NotePayload, engine: Engine):
    """Create a note, or update it in place when the id already exists."""
    result = engine.add_entry(payload.model_dump(exclude_unset=True), is_task=False)
    return mutation_response(result)


@router.post("/addTask", response_model=MutationResponse, response_model_exclude_none=True)
async def add_task(payload: TaskPayload, engine: Engine):
    """Create a task, or update it in place when the id already exists."""
    result = engine.add_entry(payload.model_dump(exclude_unset=True), is_task=True)
    return mutation_response(result)


@router.delete(
    "/deleteNote/{entry_id}",
    response_model=MutationResponse,
    response_model_exclude_none=True,
)
async def delete_note(
    entry_id: str,
    engine: Engine,
    session: str | None = Query(None),
    deleteforever: str | None = Query(None),
):
    """Soft-delete a note, or remove it for good with ``deleteforever=true``."""
    result = engine.delete_entry(entry_id, session=session, forever=deleteforever == "true")
    return mutation_response(result)


@router.delete(
    "/deleteTask/{entry_id}",
    response_model=MutationResponse,
    response_model_exclude_none=True,
)
async def delete_task(
    entry_id: str,
    engine: Engine,
    session: str | None = Query(None),
    deleteforever: str | None = Query(None),
):
    """Soft-delete a task, or remove it for good with ``deleteforever=true``."""
    result = engine.delete_entry(
        entry_id, session=session, forever=deleteforever == "true", is_task=True
    )
    return mutation_response(result)
