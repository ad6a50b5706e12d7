import pytest

from extractly.config import Settings, parse_size


@pytest.mark.parametrize(
    "value, expected",
    [("10mb", 10 * 1024 * 1024), ("512kb", 512 * 1024), ("2048", 2048), ("1.5KB", 1536), (42, 42)],
)
def test_parse_size(value, expected):
    assert parse_size(value) == expected


def test_parse_size_rejects_garbage():
    with pytest.raises(ValueError):
        parse_size("lots")


def test_defaults(monkeypatch):
    for name in ("PORT", "CORS_ORIGIN", "RATE_LIMIT_WINDOW_MS", "MAX_BODY_SIZE", "GEMINI_API_KEY", "NODE_ENV"):
        monkeypatch.delenv(name, raising=False)
    settings = Settings.from_env()
    assert settings.port == 3000
    assert settings.rate_limit_window_ms == 900_000
    assert settings.max_body_size == 10 * 1024 * 1024
    assert "chrome-extension://*" in settings.cors_origins
    assert settings.gemini_api_key is None
    assert not settings.is_production


def test_from_env(monkeypatch):
    monkeypatch.setenv("PORT", "8080")
    monkeypatch.setenv("CORS_ORIGIN", "https://a.example.com, chrome-extension://*")
    monkeypatch.setenv("RATE_LIMIT_MAX_REQUESTS", "5")
    monkeypatch.setenv("MAX_BODY_SIZE", "1mb")
    monkeypatch.setenv("MAX_HTML_SIZE", "1000")
    monkeypatch.setenv("GEMINI_API_KEY", "abc")
    monkeypatch.setenv("NODE_ENV", "production")
    monkeypatch.setenv("SQL_ECHO", "true")

    settings = Settings.from_env()
    assert settings.port == 8080
    assert settings.cors_origins == ["https://a.example.com", "chrome-extension://*"]
    assert settings.rate_limit_max_requests == 5
    assert settings.max_body_size == 1024 * 1024
    assert settings.max_html_size == 1000
    assert settings.gemini_api_key == "abc"
    assert settings.is_production
    assert settings.sql_echo is True
