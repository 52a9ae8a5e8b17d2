"""Status route: lets a device check the server key before syncing."""

from fastapi import APIRouter

from .. import __version__
from ..models import StatusResponse

router = APIRouter(tags=["status"])


@router.get("/status", response_model=StatusResponse)
async def status():
    """Liveness check. Reaching this handler means the key was accepted."""
    return StatusResponse(version=__version__, message="Server key accepted.")
