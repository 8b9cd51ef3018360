"""Unit tests for environment variable overrides."""

from src.order_manager.runtime.config.config_data import ConfigData
from src.order_manager.runtime.settings import EnvironmentVariables


def _clear(monkeypatch):
    for name in ("APP_ENVIRONMENT", "LOG_LEVEL", "DATABASE_URL", "CORS_ORIGIN"):
        monkeypatch.delenv(name, raising=False)


def test_nothing_set_leaves_config_unchanged(tmp_path, monkeypatch):
    _clear(monkeypatch)
    monkeypatch.chdir(tmp_path)
    config = ConfigData()

    assert EnvironmentVariables().apply(config) == config


def test_overrides_are_applied_to_a_copy(tmp_path, monkeypatch):
    _clear(monkeypatch)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("APP_ENVIRONMENT", "production")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    monkeypatch.setenv("DATABASE_URL", "postgresql://orders@db/orders")
    monkeypatch.setenv("CORS_ORIGIN", "http://localhost:5173, https://shop.example.com")
    config = ConfigData()

    updated = EnvironmentVariables().apply(config)

    assert updated.app.environment == "production"
    assert updated.logging.level == "DEBUG"
    assert updated.database.url == "postgresql://orders@db/orders"
    assert updated.app.cors.origins == [
        "http://localhost:5173",
        "https://shop.example.com",
    ]
    assert config.app.environment == "development"


def test_reads_dotenv_file(tmp_path, monkeypatch):
    _clear(monkeypatch)
    monkeypatch.chdir(tmp_path)
    (tmp_path / ".env").write_text("LOG_LEVEL=ERROR\n")

    assert EnvironmentVariables().apply(ConfigData()).logging.level == "ERROR"


def test_empty_values_are_ignored(tmp_path, monkeypatch):
    _clear(monkeypatch)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("DATABASE_URL", "")

    assert EnvironmentVariables().apply(ConfigData()).database.url == ConfigData().database.url
