"""Migrate command for PapyrusDB CLI - runs store migrations by hand."""

from typing import TYPE_CHECKING

from ...config import Settings
from ...migrations import run_migrations
from ...store import open_store

if TYPE_CHECKING:
    import argparse


def cmd_migrate(args: "argparse.Namespace", settings: Settings) -> int:
    """Open the configured store and apply pending migrations."""
    store = open_store(settings)
    results = run_migrations(store)
    changed = sum(results.values())
    for name, count in results.items():
        print(f"  {name}: {count} record(s) updated")
    if changed:
        print(f"✓ Store migrated ({store.path})")
    else:
        print(f"✓ Store already up to date ({store.path})")
    return 0
