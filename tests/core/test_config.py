import pytest

from macscan_core.config import (
    DEFAULT_BUSINESS_NAME,
    DEFAULT_EMAIL_FROM,
    DEFAULT_RESEND_API_URL,
    Config,
    get_config,
    parse_cors_origins,
)


@pytest.mark.core
def test_config_defaults(monkeypatch):
    for name in ("RESEND_API_KEY", "RESEND_API_URL", "EMAIL_FROM", "BUSINESS_NAME"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("ENV", "test")
    monkeypatch.setenv("EMAIL_BACKEND", "log")
    monkeypatch.delenv("EMAIL_TIMEOUT_S", raising=False)

    config = Config.from_env()
    assert config.env == "test"
    assert config.email_backend == "log"
    assert config.resend_api_key is None
    assert config.resend_api_url == DEFAULT_RESEND_API_URL
    assert config.email_from == DEFAULT_EMAIL_FROM
    assert config.business_name == DEFAULT_BUSINESS_NAME
    assert config.email_timeout_s == 10.0


@pytest.mark.core
def test_config_missing_required(monkeypatch):
    monkeypatch.delenv("ADVISOR_EMAIL", raising=False)
    monkeypatch.setenv("ENV", " ")
    with pytest.raises(ValueError) as excinfo:
        Config.from_env()
    assert "ENV" in str(excinfo.value)
    assert "ADVISOR_EMAIL" in str(excinfo.value)


@pytest.mark.core
def test_config_rejects_unknown_backend(monkeypatch):
    monkeypatch.setenv("EMAIL_BACKEND", "smtp")
    with pytest.raises(ValueError):
        Config.from_env()


@pytest.mark.core
def test_config_resend_requires_key(monkeypatch):
    monkeypatch.setenv("EMAIL_BACKEND", "resend")
    monkeypatch.delenv("RESEND_API_KEY", raising=False)
    with pytest.raises(ValueError) as excinfo:
        Config.from_env()
    assert "RESEND_API_KEY" in str(excinfo.value)

    monkeypatch.setenv("RESEND_API_KEY", "re_test")
    config = Config.from_env()
    assert config.email_backend == "resend"
    assert config.resend_api_key == "re_test"


@pytest.mark.core
@pytest.mark.parametrize("value", ["0", "-1", "soon"])
def test_config_rejects_bad_timeout(monkeypatch, value):
    monkeypatch.setenv("EMAIL_TIMEOUT_S", value)
    with pytest.raises(ValueError):
        Config.from_env()


@pytest.mark.core
def test_get_config_is_cached(monkeypatch):
    first = get_config()
    monkeypatch.setenv("BUSINESS_NAME", "Changed")
    assert get_config() is first
    get_config.cache_clear()
    assert get_config().business_name == "Changed"


@pytest.mark.core
def test_parse_cors_origins():
    assert parse_cors_origins("https://a.example, https://b.example,", "prod") == (
        "https://a.example",
        "https://b.example",
    )
    assert parse_cors_origins(None, "local") == ("*",)
    assert parse_cors_origins("", "prod") == ()


@pytest.mark.core
def test_config_carries_cors_and_build_info(monkeypatch):
    monkeypatch.setenv("CORS_ALLOW_ORIGINS", "https://scanner.example")
    monkeypatch.setenv("MACSCAN_VERSION", "2.0.0")
    monkeypatch.delenv("GIT_COMMIT", raising=False)
    config = Config.from_env()
    assert config.cors_allow_origins == ("https://scanner.example",)
    assert config.version == "2.0.0"
    assert config.commit == "unknown"
