"""Unit tests for settings loading."""

from pathlib import Path

from url_cleaner.config import Settings
from url_cleaner.storage import InMemoryURLStore, SQLiteURLStore, create_store


class TestSettings:
    """Tests for Settings and store selection."""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("URL_CLEANER_STORE_BACKEND", raising=False)
        settings = Settings(_env_file=None)
        assert settings.store_backend == "memory"
        assert settings.default_page_size == 50
        assert settings.export_page_size == 10000
        assert settings.max_page_size >= settings.export_page_size

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("URL_CLEANER_STORE_BACKEND", "sqlite")
        monkeypatch.setenv("URL_CLEANER_DEFAULT_PAGE_SIZE", "25")
        monkeypatch.setenv("URL_CLEANER_DATABASE_PATH", "/tmp/urls.db")
        settings = Settings(_env_file=None)
        assert settings.store_backend == "sqlite"
        assert settings.default_page_size == 25
        assert settings.database_path == Path("/tmp/urls.db")

    def test_create_store_memory(self):
        assert isinstance(create_store(Settings(_env_file=None, store_backend="memory")), InMemoryURLStore)

    def test_create_store_sqlite(self, tmp_path):
        store = create_store(Settings(_env_file=None, store_backend="sqlite", database_path=tmp_path / "x.db"))
        try:
            assert isinstance(store, SQLiteURLStore)
            assert (tmp_path / "x.db").exists()
        finally:
            store.close()
