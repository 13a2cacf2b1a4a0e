from trademind.config import DEFAULT_MODEL, Config


def _clear(monkeypatch):
    for name in (
        "GEMINI_API_KEY",
        "API_KEY",
        "GEMINI_MODEL",
        "MAX_RETRIES",
        "RETRY_INITIAL_DELAY_MS",
        "HTTP_TIMEOUT",
        "USE_SEARCH_GROUNDING",
        "MARKET_TIMEZONE",
    ):
        monkeypatch.delenv(name, raising=False)


def test_defaults_without_key(monkeypatch, caplog):
    _clear(monkeypatch)

    config = Config.from_env()

    assert config.gemini_api_key is None
    assert config.gemini_model == DEFAULT_MODEL
    assert config.max_retries == 3
    assert config.retry_initial_delay_ms == 1000
    assert config.use_search_grounding is True
    assert "GEMINI_API_KEY not set" in caplog.text


def test_api_key_fallback(monkeypatch):
    _clear(monkeypatch)
    monkeypatch.setenv("API_KEY", " legacy-key ")

    assert Config.from_env().gemini_api_key == "legacy-key"


def test_overrides(monkeypatch):
    _clear(monkeypatch)
    monkeypatch.setenv("GEMINI_API_KEY", "key")
    monkeypatch.setenv("API_KEY", "ignored")
    monkeypatch.setenv("GEMINI_MODEL", "gemini-pro")
    monkeypatch.setenv("MAX_RETRIES", "5")
    monkeypatch.setenv("RETRY_INITIAL_DELAY_MS", "250")
    monkeypatch.setenv("HTTP_TIMEOUT", "  ")
    monkeypatch.setenv("USE_SEARCH_GROUNDING", "false")

    config = Config.from_env()

    assert config.gemini_api_key == "key"
    assert config.gemini_model == "gemini-pro"
    assert config.max_retries == 5
    assert config.retry_initial_delay_ms == 250
    assert config.http_timeout == 60
    assert config.use_search_grounding is False


def test_non_numeric_int_uses_default(monkeypatch, caplog):
    _clear(monkeypatch)
    monkeypatch.setenv("GEMINI_API_KEY", "key")
    monkeypatch.setenv("MAX_RETRIES", "abc")

    config = Config.from_env()

    assert config.max_retries == 3
    assert "MAX_RETRIES='abc' is not an integer" in caplog.text
