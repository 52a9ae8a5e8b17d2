"""Whole-store sync routes: full fetch and bulk wipe."""

from fastapi import APIRouter, Query

from ..database import Engine
from ..logging_config import get_logger
from ..models import MutationResponse, SnapshotResponse, mutation_response

logger = get_logger("papyrusdb.sync")
router = APIRouter(tags=["sync"])


@router.get("/getAll", response_model=SnapshotResponse)
async def get_all(engine: Engine):
    """
    Return every note, task and category, deleted ones included.

    Devices need the tombstones to learn about deletes made elsewhere.
    """
    snapshot = engine.get_all()
    logger.info(
        f"FETCH | notes={len(snapshot['notes'])} tasks={len(snapshot['tasks'])} "
        f"categories={len(snapshot['categories'])}"
    )
    return SnapshotResponse(**snapshot)


@router.delete("/deleteAll", response_model=MutationResponse, response_model_exclude_none=True)
async def delete_all(engine: Engine, session: str | None = Query(None)):
    """Mark every unprotected entry and every category deleted for ``session``."""
    return mutation_response(engine.delete_all(session))
