import pytest

from todo_api.settings import Settings, get_settings, parse_database_url

_ENV = [
    "PERSISTENCE_BACKEND",
    "DATABASE_URL",
    "DB_TIMEOUT_SECONDS",
    "CORS_ALLOW_ORIGINS",
    "ENABLE_BASIC_AUTH",
    "BASIC_AUTH_USERNAME",
    "BASIC_AUTH_PASSWORD",
    "ENABLE_SECRETS",
    "HOST",
    "PORT",
    "LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in _ENV:
        monkeypatch.delenv(name, raising=False)


class TestGetSettings:
    def test_defaults(self):
        s = get_settings()
        assert s == Settings()
        assert s.sqlite_db_path == "./data/todos.db"

    def test_overrides(self, monkeypatch):
        monkeypatch.setenv("PERSISTENCE_BACKEND", "MEMORY")
        monkeypatch.setenv("DATABASE_URL", "sqlite:////var/lib/todos.db")
        monkeypatch.setenv("CORS_ALLOW_ORIGINS", "http://a.test, http://b.test")
        monkeypatch.setenv("ENABLE_BASIC_AUTH", "yes")
        monkeypatch.setenv("BASIC_AUTH_USERNAME", "admin")
        monkeypatch.setenv("BASIC_AUTH_PASSWORD", "pw")
        monkeypatch.setenv("ENABLE_SECRETS", "off")
        monkeypatch.setenv("PORT", "9000")
        s = get_settings()
        assert s.persistence_backend == "memory"
        assert s.sqlite_db_path == "/var/lib/todos.db"
        assert s.cors_allow_origins == ["http://a.test", "http://b.test"]
        assert s.enable_basic_auth is True
        assert (s.basic_auth_username, s.basic_auth_password) == ("admin", "pw")
        assert s.enable_secrets is False
        assert s.port == 9000

    def test_credentials_ignored_when_auth_disabled(self, monkeypatch):
        monkeypatch.setenv("BASIC_AUTH_USERNAME", "admin")
        monkeypatch.setenv("BASIC_AUTH_PASSWORD", "pw")
        s = get_settings()
        assert s.basic_auth_username is None
        assert s.basic_auth_password is None

    def test_bad_numbers_fall_back(self, monkeypatch):
        monkeypatch.setenv("PORT", "eighty")
        monkeypatch.setenv("DB_TIMEOUT_SECONDS", "soon")
        s = get_settings()
        assert s.port == 8080
        assert s.db_timeout_seconds == 5.0

    def test_bad_log_level_falls_back(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "VERBOSE")
        assert get_settings().log_level == "INFO"

    def test_log_level_is_normalized(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", " debug ")
        assert get_settings().log_level == "DEBUG"


class TestParseDatabaseUrl:
    def test_bare_path(self):
        assert parse_database_url("todos.db") == "todos.db"

    @pytest.mark.parametrize("url", ["postgres://localhost/db", "sqlite:///:memory:", "sqlite:///"])
    def test_rejected(self, url):
        with pytest.raises(ValueError):
            parse_database_url(url)
