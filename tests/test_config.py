from collab_manager import settings
from collab_manager.api_log import config as api_log_config


def test_defaults(monkeypatch):
    for name in ("COLLAB_API_BASE_URL", "COLLAB_API_TIMEOUT_SECONDS", "COLLAB_VERIFY_SSL",
                 "COLLAB_CLIENT_REFRESH_SECONDS", "COLLAB_DEMO_FALLBACK"):
        monkeypatch.delenv(name, raising=False)
    config = settings.AppConfig.from_env()
    assert config.api_base_url == "https://app.auravisual.dk"
    assert config.timeout_seconds == 15
    assert config.verify_ssl is True
    assert config.client_refresh_seconds == 30
    assert config.demo_fallback is False


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("COLLAB_API_BASE_URL", "http://localhost:8000/")
    monkeypatch.setenv("COLLAB_VERIFY_SSL", "no")
    monkeypatch.setenv("COLLAB_CLIENT_REFRESH_SECONDS", "1")
    monkeypatch.setenv("COLLAB_API_TIMEOUT_SECONDS", "abc")
    monkeypatch.setenv("COLLAB_DEMO_FALLBACK", "true")
    config = settings.AppConfig.from_env()
    assert config.api_base_url == "http://localhost:8000"
    assert config.verify_ssl is False
    assert config.client_refresh_seconds == 5
    assert config.timeout_seconds == 15
    assert config.demo_fallback is True


def test_get_config_is_cached():
    assert settings.get_config() is settings.get_config()


def test_api_log_falls_back_to_app_database(monkeypatch, database_url):
    monkeypatch.setenv("API_LOG_RETENTION_DAYS", "0")
    config = api_log_config.ApiLogConfig.from_env()
    assert config.database_url == database_url
    assert config.retention_days == 1
    assert config.enabled is True

    monkeypatch.setenv("API_LOG_DATABASE_URL", "sqlite:///other.db")
    monkeypatch.setenv("API_LOG_ENABLED", "false")
    config = api_log_config.ApiLogConfig.from_env()
    assert config.database_url == "sqlite:///other.db"
    assert config.enabled is False
