"""Pydantic models for API requests and responses.

Request models declare every field optional except the ones an operation
requires; handlers dump them with ``exclude_unset`` so the engine can tell
"field omitted" from "field sent".
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

# =============================================================================
# Note / Task Models
# =============================================================================


class TaskItem(BaseModel):
    """One checklist line of a task."""
    text: str = ""
    checked: bool = False


class EntryPayload(BaseModel):
    """Fields shared by notes and tasks. Unknown fields are dropped."""
    model_config = ConfigDict(extra="ignore")

    id: str | None = None
    title: str | None = None
    timestamp: str | None = None
    category: str | None = None
    pinned: bool | None = None
    protected: bool | None = None
    password: str | None = None  # Opaque, set by the client
    bg: str | None = None


class NotePayload(EntryPayload):
    """Request to add or update a note."""
    content: str


class TaskPayload(EntryPayload):
    """Request to add or update a task."""
    content: str | None = None
    items: list[TaskItem] | None = None


# =============================================================================
# Category Models
# =============================================================================


class CategoryPayload(BaseModel):
    """Request to add or reactivate a category."""
    model_config = ConfigDict(extra="ignore")

    name: str | None = None
    id: str | None = None
    icon: str | None = None
    color: str | None = None
    userDefined: bool | None = None


class CategoryRename(BaseModel):
    """Request to rename a category."""
    newName: str | None = None


# =============================================================================
# Responses
# =============================================================================


class StatusResponse(BaseModel):
    """Liveness and key check."""
    ok: bool = True
    service: str = "papyrusdb"
    version: str
    message: str


class SnapshotResponse(BaseModel):
    """Every record in the store, tombstones included."""
    ok: bool = True
    notes: list[dict[str, Any]] = Field(default_factory=list)
    tasks: list[dict[str, Any]] = Field(default_factory=list)
    categories: list[dict[str, Any]] = Field(default_factory=list)


class MutationResponse(BaseModel):
    """Result of a mutation; unset optional fields are left out of the JSON."""
    ok: bool = True
    message: str | None = None
    id: str | None = None
    newId: str | None = None
    deleted: Literal["soft", "permanent"] | None = None
    ignored: bool | None = None
    reason: str | None = None


class ErrorResponse(BaseModel):
    """Error envelope."""
    ok: bool = False
    error: str


def mutation_response(result) -> MutationResponse:
    """Build the response envelope from an engine ``SyncResult``."""
    if result.ignored:
        return MutationResponse(ignored=True, reason=result.message, message=result.message)
    return MutationResponse(
        message=result.message,
        id=result.id,
        newId=result.new_id,
        deleted=result.deleted,
    )
