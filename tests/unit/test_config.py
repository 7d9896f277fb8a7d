"""Unit tests for Settings."""

import pytest

from tichnuta.config import ConfigError, Settings


@pytest.mark.unit
class TestSettingsFromEnv:
    """Tests for Settings.from_env."""

    def test_defaults(self) -> None:
        settings = Settings.from_env({})

        assert settings.db_path == "tichnuta.db"
        assert settings.admin_token == ""
        assert settings.stripe_secret_key == ""
        assert settings.stripe_api_base == "https://api.stripe.com"
        assert settings.currency == "ils"

    def test_reads_environment(self) -> None:
        settings = Settings.from_env(
            {
                "TICHNUTA_DB_PATH": "/var/lib/tichnuta/site.db",
                "TICHNUTA_ADMIN_TOKEN": "secret",
                "STRIPE_SECRET_KEY": "sk_test_abc",
                "STRIPE_API_BASE": "http://localhost:12111/",
                "TICHNUTA_CURRENCY": "USD",
            }
        )

        assert settings.db_path == "/var/lib/tichnuta/site.db"
        assert settings.admin_token == "secret"
        assert settings.stripe_secret_key == "sk_test_abc"
        assert settings.stripe_api_base == "http://localhost:12111"
        assert settings.currency == "usd"

    @pytest.mark.parametrize("currency", ["shekel", "1ls", ""])
    def test_invalid_currency(self, currency: str) -> None:
        with pytest.raises(ConfigError):
            Settings.from_env({"TICHNUTA_CURRENCY": currency})
