"""Runtime configuration for the Tichnuta service."""

from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_DB_PATH = "tichnuta.db"
DEFAULT_STRIPE_API_BASE = "https://api.stripe.com"
DEFAULT_CURRENCY = "ils"


class ConfigError(Exception):
    """Raised when configuration is invalid."""


@dataclass
class Settings:
    """Service settings.

    Values come from the environment in production and are passed explicitly
    in tests.
    """

    db_path: str = DEFAULT_DB_PATH
    admin_token: str = ""
    stripe_secret_key: str = ""
    stripe_api_base: str = DEFAULT_STRIPE_API_BASE
    currency: str = DEFAULT_CURRENCY

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> Settings:
        """Build settings from environment variables.

        Args:
            environ: Mapping to read from. Defaults to ``os.environ``.

        Returns:
            Parsed settings.

        Raises:
            ConfigError: If the currency is not a three-letter ISO code.
        """
        env = os.environ if environ is None else environ
        currency = env.get("TICHNUTA_CURRENCY", DEFAULT_CURRENCY).lower()
        if len(currency) != 3 or not currency.isalpha():
            raise ConfigError(f"Invalid currency code: {currency!r}")

        return cls(
            db_path=env.get("TICHNUTA_DB_PATH", DEFAULT_DB_PATH),
            admin_token=env.get("TICHNUTA_ADMIN_TOKEN", ""),
            stripe_secret_key=env.get("STRIPE_SECRET_KEY", ""),
            stripe_api_base=env.get("STRIPE_API_BASE", DEFAULT_STRIPE_API_BASE).rstrip("/"),
            currency=currency,
        )
