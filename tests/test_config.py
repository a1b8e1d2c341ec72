from pathlib import Path

from config import DEFAULT_API_URL, Settings, load_settings


def test_load_settings_defaults() -> None:
    settings = load_settings({})
    assert settings == Settings()
    assert settings.api_url == DEFAULT_API_URL
    assert settings.port == 5123
    assert settings.token == ""


def test_load_settings_from_environment() -> None:
    settings = load_settings(
        {
            "MIKA_URL": "https://mika.example/api",
            "MIKA_TOKEN": "abc",
            "PORT": "8080",
            "EXPORT_DIR": "/tmp/ta-exports",
            "REQUEST_TIMEOUT_SECONDS": "5",
        }
    )
    assert settings.api_url == "https://mika.example/api"
    assert settings.token == "abc"
    assert settings.port == 8080
    assert settings.export_dir == Path("/tmp/ta-exports")
    assert settings.request_timeout == 5.0


def test_load_settings_legacy_url_variable() -> None:
    assert load_settings({"URL": "https://legacy.example"}).api_url == "https://legacy.example"
    both = load_settings({"URL": "https://legacy.example", "MIKA_URL": "https://new.example"})
    assert both.api_url == "https://new.example"
