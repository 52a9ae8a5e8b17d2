"""Reconciliation engine for multi-device sync.

Several devices sharing one account add, edit and delete the same notes,
tasks and categories without any central lock. The rules here keep them
converging on one state:

- Deletes are soft first. A deleted entity becomes a tombstone
  (``isDeleted=True``) that every device still sees, tagged with the
  ``deleteSession`` of the device that deleted it.
- A permanent delete replayed with the session that made the tombstone
  is a duplicate and is ignored.
- An add against a note/task tombstone is refused, so an edit made on a
  stale device cannot resurrect something deleted elsewhere. Categories
  differ: adding a category whose name is a tombstone reactivates it.
- A bulk wipe must be attributed to a session and never touches
  password-protected notes/tasks.

Every mutating call writes its changes and then flushes the store once.
There is no locking and no rollback: callers are expected to run one
operation at a time.
"""

from dataclasses import dataclass
from typing import Any, Literal

from .errors import (
    ConflictError,
    DeletedConflictError,
    NotFoundError,
    ValidationError,
)
from .logging_config import get_logger, log_sync_operation
from .normalize import (
    entry_kind,
    generate_category_id,
    generate_entry_id,
    normalize,
    normalize_category,
)
from .store import CATEGORIES, NOTES, EntityStore

logger = get_logger("reconcile")


@dataclass
class SyncResult:
    """Outcome of a successful mutation."""

    message: str
    id: str | None = None
    new_id: str | None = None
    deleted: Literal["soft", "permanent"] | None = None
    ignored: bool = False


def _check_segment(value: str | None, what: str) -> None:
    # Store keys are slash-joined paths
    if not value:
        raise ValidationError(f"{what} is required.")
    if "/" in value:
        raise ValidationError(f"{what} cannot contain '/'.")


def _entry_key(entry_id: str) -> str:
    return f"{NOTES}/{entry_id}"


def _category_key(name: str) -> str:
    return f"{CATEGORIES}/{name}"


class SyncEngine:
    """Applies sync operations to an ``EntityStore``."""

    def __init__(self, store: EntityStore):
        self.store = store

    # =========================================================================
    # Reads
    # =========================================================================

    def get_all(self) -> dict[str, list[dict[str, Any]]]:
        """Every note, task and category, tombstones included, normalized."""
        notes, tasks = [], []
        for record in (self.store.get(NOTES) or {}).values():
            kind = entry_kind(record)
            (tasks if kind == "task" else notes).append(normalize(record, kind))
        categories = [
            normalize_category(c) for c in (self.store.get(CATEGORIES) or {}).values()
        ]
        return {"notes": notes, "tasks": tasks, "categories": categories}

    def category_exists(self, name: str) -> bool:
        """Whether an active (non-deleted) category holds ``name``."""
        category = self.store.get(_category_key(name))
        return bool(category) and not category.get("isDeleted")

    # =========================================================================
    # Notes and tasks
    # =========================================================================

    def add_entry(self, payload: dict[str, Any], is_task: bool = False) -> SyncResult:
        """Create or update a note/task.

        ``payload`` holds only the fields the client sent. Updates merge it
        over the stored record; an update that does not restate
        ``protected`` drops protection and the password.
        """
        kind = "task" if is_task else "note"
        new_id = None
        entry_id = payload.get("id")
        if not entry_id:
            entry_id = new_id = generate_entry_id()
        _check_segment(entry_id, "Id")
        key = _entry_key(entry_id)

        existing = self.store.get(key)
        if existing and existing.get("isDeleted"):
            log_sync_operation("add", kind, entry_id, False, "target is deleted")
            raise DeletedConflictError(
                f"{kind.capitalize()} ID \"{entry_id}\" was deleted and cannot be updated."
            )

        if existing:
            merged = {**existing, **payload, "id": entry_id}
            if "protected" not in payload:
                merged["protected"] = False
                merged["password"] = None
            record = normalize(merged, kind)
            action = "updated"
        else:
            record = normalize({**payload, "id": entry_id}, kind)
            action = "added"

        self.store.set(key, record)
        self.store.save_now()
        log_sync_operation("add", kind, entry_id, True, action)
        return SyncResult(
            id=entry_id,
            new_id=new_id,
            message=f"{kind.capitalize()} ID \"{entry_id}\" {action}.",
        )

    def delete_entry(
        self,
        entry_id: str,
        session: str | None = None,
        forever: bool = False,
        is_task: bool = False,
    ) -> SyncResult:
        """Soft- or permanently delete a note/task."""
        kind = "task" if is_task else "note"
        _check_segment(entry_id, "Id")
        key = _entry_key(entry_id)
        if not self.store.has(key):
            log_sync_operation("delete", kind, entry_id, False, "not found")
            raise NotFoundError(f"{kind.capitalize()} not found.")
        label = f"{kind.capitalize()} ID \"{entry_id}\""
        return self._delete(key, kind, label, session, forever)

    # =========================================================================
    # Categories
    # =========================================================================

    def add_category(self, payload: dict[str, Any]) -> SyncResult:
        """Create a category, or reactivate its tombstone."""
        name = payload.get("name")
        if not name:
            raise ValidationError("Category name is required.")
        _check_segment(name, "Category name")
        if self.category_exists(name):
            log_sync_operation("add", "category", name, False, "already active")
            raise ConflictError("An active category with this name already exists.")

        key = _category_key(name)
        existing = self.store.get(key)
        record = normalize_category(payload)
        if existing and existing.get("isDeleted"):
            # ids never change once assigned
            record["id"] = existing.get("id") or record["id"]
            record["isDeleted"] = False
            record["deleteSession"] = None
            logger.info(f"Category \"{name}\" reactivated")
        if not record["id"]:
            record["id"] = generate_category_id()

        self.store.set(key, record)
        self.store.save_now()
        log_sync_operation("add", "category", name, True, record["id"])
        return SyncResult(
            id=record["id"],
            message="Category added/reactivated.",
        )

    def delete_category(
        self,
        name: str,
        session: str | None = None,
        forever: bool = False,
    ) -> SyncResult:
        """Soft- or permanently delete a category by name."""
        _check_segment(name, "Category name")
        key = _category_key(name)
        if not self.store.has(key):
            log_sync_operation("delete", "category", name, False, "not found")
            raise NotFoundError("Category not found.")
        return self._delete(key, "category", f"Category \"{name}\"", session, forever)

    def rename_category(self, old_name: str, new_name: str | None) -> SyncResult:
        """Move a category to a new name and repoint every note/task at it.

        The writes are flushed together at the end; a crash in between can
        leave entries pointing at a name with no category record.
        """
        _check_segment(old_name, "Category name")
        old_key = _category_key(old_name)
        if not self.store.has(old_key):
            raise NotFoundError("Category to rename not found.")
        if not new_name:
            raise ValidationError("New category name is required.")
        _check_segment(new_name, "Category name")
        if self.category_exists(new_name):
            log_sync_operation("rename", "category", old_name, False, f"{new_name} exists")
            raise ConflictError(f"New name \"{new_name}\" already exists.")

        category = self.store.get(old_key)
        renamed = {**category, "name": new_name}
        self.store.delete(old_key)
        self.store.set(_category_key(new_name), renamed)

        moved = 0
        for entry_id, entry in (self.store.get(NOTES) or {}).items():
            if entry.get("category") == old_name:
                entry["category"] = new_name
                self.store.set(_entry_key(entry_id), entry)
                moved += 1

        self.store.save_now()
        log_sync_operation("rename", "category", old_name, True, f"-> {new_name}, {moved} entries")
        return SyncResult(
            id=category.get("id"),
            message=f"Category \"{old_name}\" renamed to \"{new_name}\" and entries updated.",
        )

    # =========================================================================
    # Bulk wipe
    # =========================================================================

    def delete_all(self, session: str | None) -> SyncResult:
        """Tombstone every unprotected note/task and every category.

        Entries carrying a password are skipped whatever their
        ``protected`` flag says.
        """
        if not session:
            raise ValidationError("Session ID is missing.")

        wiped = skipped = 0
        for entry_id, entry in (self.store.get(NOTES) or {}).items():
            if entry.get("password"):
                skipped += 1
                continue
            entry["isDeleted"] = True
            entry["deleteSession"] = session
            self.store.set(_entry_key(entry_id), normalize(entry, entry_kind(entry)))
            wiped += 1

        categories = self.store.get(CATEGORIES) or {}
        for name, category in categories.items():
            category["isDeleted"] = True
            category["deleteSession"] = session
            self.store.set(_category_key(name), normalize_category(category))

        self.store.save_now()
        logger.info(
            f"WIPE | session={session} | entries={wiped} skipped={skipped} "
            f"categories={len(categories)}"
        )
        return SyncResult(
            message="Notes (unprotected), tasks and categories marked as deleted.",
        )

    # =========================================================================
    # Shared delete path
    # =========================================================================

    def _delete(
        self,
        key: str,
        kind: str,
        label: str,
        session: str | None,
        forever: bool,
    ) -> SyncResult:
        record = self.store.get(key)
        name = key.split("/", 1)[1]

        if forever:
            recorded = record.get("deleteSession")
            if session and recorded and session == recorded:
                log_sync_operation("purge", kind, name, True, f"ignored, same session {session}")
                return SyncResult(
                    ignored=True,
                    message="Operation ignored (same session).",
                )
            self.store.delete(key)
            self.store.save_now()
            log_sync_operation("purge", kind, name, True)
            return SyncResult(deleted="permanent", message=f"{label} deleted.")

        record["isDeleted"] = True
        record["deleteSession"] = session or None
        self.store.set(key, record)
        self.store.save_now()
        log_sync_operation("delete", kind, name, True, f"session={session}")
        return SyncResult(deleted="soft", message=f"{label} marked as deleted.")
