"""Tests for settings resolution."""

from doctable.core.config import (
    DEFAULT_DATABASE_URL,
    DEFAULT_ID_FIELD,
    Settings,
    get_database_url,
)


class TestSettings:
    """Tests for Settings.from_env()."""

    def test_defaults(self):
        settings = Settings.from_env({})
        assert settings.database_url == DEFAULT_DATABASE_URL
        assert settings.echo is False
        assert settings.id_field == DEFAULT_ID_FIELD

    def test_reads_environment_mapping(self):
        settings = Settings.from_env(
            {
                "DOCTABLE_URL": "postgresql://localhost/docs",
                "DOCTABLE_ECHO": "Yes",
                "DOCTABLE_ID_FIELD": "uuid",
            }
        )
        assert settings.database_url == "postgresql://localhost/docs"
        assert settings.echo is True
        assert settings.id_field == "uuid"

    def test_falsy_echo_values(self):
        for value in ("", "0", "false", "off", "nope"):
            assert Settings.from_env({"DOCTABLE_ECHO": value}).echo is False

    def test_empty_values_fall_back(self):
        settings = Settings.from_env({"DOCTABLE_URL": "", "DOCTABLE_ID_FIELD": ""})
        assert settings.database_url == DEFAULT_DATABASE_URL
        assert settings.id_field == DEFAULT_ID_FIELD

    def test_reads_process_environment(self, monkeypatch):
        monkeypatch.setenv("DOCTABLE_URL", "sqlite:///env.db")
        assert Settings.from_env().database_url == "sqlite:///env.db"


class TestGetDatabaseUrl:
    """Tests for URL priority."""

    def test_explicit_url_wins(self, monkeypatch):
        monkeypatch.setenv("DOCTABLE_URL", "sqlite:///env.db")
        assert get_database_url("sqlite:///explicit.db") == "sqlite:///explicit.db"

    def test_environment_used(self, monkeypatch):
        monkeypatch.setenv("DOCTABLE_URL", "sqlite:///env.db")
        assert get_database_url(None) == "sqlite:///env.db"

    def test_default(self, monkeypatch):
        monkeypatch.delenv("DOCTABLE_URL", raising=False)
        assert get_database_url(None) == DEFAULT_DATABASE_URL
