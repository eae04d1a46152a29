from finance_toolkit.config import DEFAULT_RATES_URL, Settings, load_settings


def test_defaults_without_environment():
    assert load_settings({}) == Settings()
    assert load_settings({}).rates_url == DEFAULT_RATES_URL


def test_environment_overrides():
    settings = load_settings(
        {
            "FINANCE_TOOLKIT_RATES_URL": "https://rates.test/latest",
            "FINANCE_TOOLKIT_RATE_CACHE_URL": "sqlite:///:memory:",
            "FINANCE_TOOLKIT_FETCH_TIMEOUT": "2.5",
            "FINANCE_TOOLKIT_MAX_EXTRA_MONTHS": "120",
            "FINANCE_TOOLKIT_LOG_LEVEL": "debug",
        }
    )
    assert settings.rates_url == "https://rates.test/latest"
    assert settings.rate_cache_url == "sqlite:///:memory:"
    assert settings.fetch_timeout == 2.5
    assert settings.max_extra_months == 120
    assert settings.log_level == "DEBUG"


def test_invalid_numbers_keep_defaults():
    settings = load_settings({"FINANCE_TOOLKIT_FETCH_TIMEOUT": "soon"})
    assert settings.fetch_timeout == 10.0
