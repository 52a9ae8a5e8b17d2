"""Startup migrations for the entity store.

Each migration is idempotent: it inspects records, fixes the ones that
need it, and flushes only when something changed.
"""

from .logging_config import get_logger
from .normalize import generate_category_id
from .store import CATEGORIES, EntityStore

logger = get_logger("migrations")


def backfill_category_ids(store: EntityStore) -> int:
    """Give every legacy category record an ``id``.

    Returns:
        Number of categories that were updated.
    """
    updated = 0
    for name, category in (store.get(CATEGORIES) or {}).items():
        if not isinstance(category, dict) or category.get("id"):
            continue
        category["id"] = generate_category_id()
        store.set(f"{CATEGORIES}/{name}", category)
        updated += 1
        logger.debug(f"Category \"{name}\" assigned id {category['id']}")

    if updated:
        store.save_now()
        logger.info(f"Backfilled ids on {updated} categories")
    return updated


MIGRATIONS = [backfill_category_ids]


def run_migrations(store: EntityStore) -> dict[str, int]:
    """Run every migration once, in order."""
    return {migration.__name__: migration(store) for migration in MIGRATIONS}
