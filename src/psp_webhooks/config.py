"""Environment-driven settings."""

import os

DEFAULT_PROVIDER_HTTP_TIMEOUT = 15.0
DEFAULT_WEBHOOK_RATE_LIMIT = "120/minute"
DEFAULT_DATABASE_URL = "sqlite+aiosqlite:///./psp_webhooks.db"

PROVIDER_BASE_URLS = {
    "juspay": {
        "test": ("JUSPAY_SANDBOX_URL", "https://sandbox.juspay.in"),
        "live": ("JUSPAY_LIVE_URL", "https://api.juspay.in"),
    },
    "hyperswitch": {
        "test": ("HYPERSWITCH_SANDBOX_URL", "https://sandbox.hyperswitch.io"),
        "live": ("HYPERSWITCH_LIVE_URL", "https://api.hyperswitch.io"),
    },
}


def get_provider_base_url(provider: str, environment: str = "test") -> str:
    """Resolve the API base URL of a provider for the given environment.

    Args:
        provider: Provider name ("juspay" or "hyperswitch").
        environment: "test" or "live".

    Returns:
        Base URL without a trailing slash.

    Raises:
        ValueError: If the provider or environment is unknown.
    """
    environments = PROVIDER_BASE_URLS.get(provider.lower())
    if environments is None:
        raise ValueError(f"Unsupported provider: {provider}")
    entry = environments.get(environment.lower())
    if entry is None:
        raise ValueError(f"Unsupported environment for {provider}: {environment}")
    env_var, default = entry
    return os.getenv(env_var, default).rstrip("/")


def get_provider_http_timeout() -> float:
    value = os.getenv("PROVIDER_HTTP_TIMEOUT")
    if not value:
        return DEFAULT_PROVIDER_HTTP_TIMEOUT
    try:
        return float(value)
    except ValueError:
        raise ValueError(f"PROVIDER_HTTP_TIMEOUT must be a number, got {value!r}")


def get_webhook_rate_limit() -> str:
    return os.getenv("WEBHOOK_RATE_LIMIT", DEFAULT_WEBHOOK_RATE_LIMIT)


def get_log_level() -> str:
    return os.getenv("LOG_LEVEL", "INFO").upper()


def get_database_url() -> str:
    """Database URL from DATABASE_URL, rewritten to an async driver.

    Defaults to a local SQLite file.
    """
    url = os.getenv("DATABASE_URL")
    if not url:
        return DEFAULT_DATABASE_URL
    for prefix in ("postgresql://", "postgres://"):
        if url.startswith(prefix):
            return "postgresql+asyncpg://" + url[len(prefix):]
    return url
