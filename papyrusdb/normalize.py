"""Record normalizers and identifier generators.

A normalizer takes a raw, possibly partial record and returns a complete
canonical one: every field present, every optional field defaulted,
unknown fields dropped. Normalizing an already normalized record returns
it unchanged.

Notes and tasks share one shape, told apart by ``isTask``.
"""

import random
import re
import string
import time
import uuid
from datetime import datetime, timezone
from typing import Any, Literal

Kind = Literal["note", "task", "category"]

# Wire defaults understood by the Papyrus client
DEFAULT_NOTE_CATEGORY = "Général"
DEFAULT_NOTE_CONTENT = "Pas de contenu"
DEFAULT_TASK_TITLE = "Nouvelle tâche"
DEFAULT_TASK_CATEGORY = "Tâches"
DEFAULT_TASK_BG = "bg-task-default"
DEFAULT_CATEGORY_ICON = "ri-folder-line"
DEFAULT_CATEGORY_COLOR = "bg-gray-500"

TITLE_LENGTH = 60
ELLIPSIS = "..."
_TITLE_STRIP = re.compile(r"^[#*\-\s>!`]+|[\n\r]+$")

_ID_SUFFIX_CHARS = string.digits + string.ascii_lowercase


def now_iso() -> str:
    """Current UTC time as an ISO-8601 string."""
    return datetime.now(timezone.utc).isoformat()


def generate_entry_id() -> str:
    """Note/task id: epoch milliseconds plus a 4-char base-36 suffix.

    Collisions are unlikely, not impossible.
    """
    suffix = "".join(random.choices(_ID_SUFFIX_CHARS, k=4))
    return f"{int(time.time() * 1000)}_{suffix}"


def generate_category_id() -> str:
    """Stable category id (cat_ + 12 char hex)."""
    return f"cat_{uuid.uuid4().hex[:12]}"


def derive_title(content: str) -> str:
    """Title for a note that has none: the cleaned first 60 characters."""
    title = _TITLE_STRIP.sub("", content[:TITLE_LENGTH]).strip()
    if len(content) > TITLE_LENGTH:
        title += ELLIPSIS
    return title


def _as_bool(value: Any, default: bool = False) -> bool:
    return value if isinstance(value, bool) else default


def _as_str(value: Any) -> str | None:
    """Non-empty strings pass through; anything else becomes None."""
    return value if isinstance(value, str) and value else None


def _normalize_items(items: Any) -> list[dict[str, Any]]:
    if not isinstance(items, list):
        return []
    normalized = []
    for item in items:
        if isinstance(item, str):
            item = {"text": item}
        if not isinstance(item, dict):
            continue
        text = item.get("text")
        normalized.append({
            "text": text if isinstance(text, str) else "",
            "checked": _as_bool(item.get("checked")),
        })
    return normalized


def normalize_entry(raw: dict[str, Any], is_task: bool = False) -> dict[str, Any]:
    """Canonical note or task record."""
    content = raw.get("content") if isinstance(raw.get("content"), str) else ""

    if is_task:
        title = _as_str(raw.get("title")) or DEFAULT_TASK_TITLE
        category = _as_str(raw.get("category")) or DEFAULT_TASK_CATEGORY
        bg = _as_str(raw.get("bg")) or DEFAULT_TASK_BG
    else:
        content = content or DEFAULT_NOTE_CONTENT
        title = raw.get("title") if isinstance(raw.get("title"), str) else ""
        title = title or derive_title(content)
        category = _as_str(raw.get("category")) or DEFAULT_NOTE_CATEGORY
        bg = _as_str(raw.get("bg"))

    record = {
        "id": raw.get("id"),
        "title": title,
        "content": content,
        "timestamp": _as_str(raw.get("timestamp")) or now_iso(),
        "category": category,
        "pinned": _as_bool(raw.get("pinned")),
        "protected": _as_bool(raw.get("protected")),
        # Set by the client; never interpreted here
        "password": _as_str(raw.get("password")),
        "isDeleted": bool(raw.get("isDeleted")),
        "deleteSession": _as_str(raw.get("deleteSession")),
        "isTask": is_task,
        "bg": bg,
    }
    if is_task:
        record["items"] = _normalize_items(raw.get("items"))
    return record


def normalize_note(raw: dict[str, Any]) -> dict[str, Any]:
    return normalize_entry(raw, is_task=False)


def normalize_task(raw: dict[str, Any]) -> dict[str, Any]:
    return normalize_entry(raw, is_task=True)


def normalize_category(raw: dict[str, Any]) -> dict[str, Any]:
    """Canonical category record."""
    name = raw.get("name")
    return {
        "id": _as_str(raw.get("id")),
        "name": name if isinstance(name, str) else "",
        "icon": _as_str(raw.get("icon")) or DEFAULT_CATEGORY_ICON,
        "color": _as_str(raw.get("color")) or DEFAULT_CATEGORY_COLOR,
        "userDefined": _as_bool(raw.get("userDefined"), default=True),
        "isDeleted": bool(raw.get("isDeleted")),
        "deleteSession": _as_str(raw.get("deleteSession")),
    }


def normalize(raw: dict[str, Any], kind: Kind) -> dict[str, Any]:
    """Dispatch on ``kind``; stored notes/tasks may also be told apart by ``isTask``."""
    if not isinstance(raw, dict):
        raw = {}
    if kind == "category":
        return normalize_category(raw)
    return normalize_entry(raw, is_task=(kind == "task"))


def entry_kind(record: dict[str, Any]) -> Kind:
    """Kind of a stored note/task record."""
    return "task" if record.get("isTask") else "note"
