"""Tests for startup migrations."""

from unittest.mock import MagicMock

from papyrusdb.migrations import backfill_category_ids, run_migrations
from papyrusdb.store import JsonFileStore


class TestBackfillCategoryIds:
    """Legacy categories get ids exactly once."""

    def test_assigns_missing_ids(self, store, store_path):
        store.set("categories/Work", {"name": "Work", "icon": "ri-folder-line"})
        store.set("categories/Home", {"name": "Home", "id": "cat_existing"})

        updated = backfill_category_ids(store)

        assert updated == 1
        work = store.get("categories/Work")
        assert work["id"].startswith("cat_")
        assert work["icon"] == "ri-folder-line"
        assert store.get("categories/Home")["id"] == "cat_existing"
        # Flushed
        assert JsonFileStore(store_path).get("categories/Work")["id"] == work["id"]

    def test_second_run_is_noop(self, store):
        store.set("categories/Work", {"name": "Work"})
        backfill_category_ids(store)
        first_id = store.get("categories/Work")["id"]

        assert backfill_category_ids(store) == 0
        assert store.get("categories/Work")["id"] == first_id

    def test_no_flush_when_nothing_changed(self):
        store = MagicMock()
        store.get.return_value = {"Work": {"name": "Work", "id": "cat_1"}}

        assert backfill_category_ids(store) == 0
        store.save_now.assert_not_called()
        store.set.assert_not_called()

    def test_single_flush_for_many_records(self):
        store = MagicMock()
        store.get.return_value = {name: {"name": name} for name in ("A", "B", "C")}

        assert backfill_category_ids(store) == 3
        assert store.set.call_count == 3
        store.save_now.assert_called_once()

    def test_run_migrations_reports_counts(self, store):
        store.set("categories/Work", {"name": "Work"})
        assert run_migrations(store) == {"backfill_category_ids": 1}


class TestStartupMigration:
    """The app runs migrations when it starts."""

    def test_lifespan_backfills_legacy_categories(self, tmp_path, monkeypatch, auth_headers):
        from fastapi.testclient import TestClient

        from papyrusdb.config import get_settings
        from papyrusdb.database import reset_store
        from papyrusdb.main import app

        legacy = JsonFileStore(tmp_path / "papyrus-data.json")
        legacy.set("categories/Old", {"name": "Old"})
        legacy.save_now()

        monkeypatch.setenv("PAPYRUS_DB_DIR", str(tmp_path))
        monkeypatch.setattr("papyrusdb.main.configure_logging", lambda level: None)
        reset_store()
        get_settings.cache_clear()
        try:
            with TestClient(app) as client:
                response = client.get("/getAll", headers=auth_headers)
        finally:
            reset_store()
            get_settings.cache_clear()

        [category] = response.json()["categories"]
        assert category["name"] == "Old"
        assert category["id"].startswith("cat_")
        on_disk = JsonFileStore(tmp_path / "papyrus-data.json").get("categories/Old")
        assert on_disk["id"] == category["id"]
