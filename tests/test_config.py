"""Tests for settings, logging helpers and the error taxonomy."""

import logging

import pytest

from psp_webhooks.config import (
    get_database_url,
    get_log_level,
    get_provider_base_url,
    get_provider_http_timeout,
    get_webhook_rate_limit,
)
from psp_webhooks.errors import (
    AuthenticationMissing,
    LedgerClientError,
    MalformedPayload,
    MissingExpectedField,
    ProviderConfigurationMissing,
    SourceVerificationFailed,
    UnexpectedProviderStatus,
    UpstreamTransportError,
)
from psp_webhooks.logging_utils import configure_logging, redact_log_value


class TestProviderBaseUrl:
    """Tests for get_provider_base_url."""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("JUSPAY_LIVE_URL", raising=False)
        monkeypatch.delenv("HYPERSWITCH_SANDBOX_URL", raising=False)
        assert get_provider_base_url("juspay", "live") == "https://api.juspay.in"
        assert get_provider_base_url("hyperswitch") == "https://sandbox.hyperswitch.io"

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("JUSPAY_SANDBOX_URL", "http://localhost:9000/")
        assert get_provider_base_url("juspay", "test") == "http://localhost:9000"

    @pytest.mark.parametrize("provider, environment", [("stripe", "test"), ("juspay", "staging")])
    def test_unknown(self, provider, environment):
        with pytest.raises(ValueError):
            get_provider_base_url(provider, environment)


class TestSettings:
    """Tests for the remaining env-driven settings."""

    def test_timeout_default(self, monkeypatch):
        monkeypatch.delenv("PROVIDER_HTTP_TIMEOUT", raising=False)
        assert get_provider_http_timeout() == 15.0

    def test_timeout_override(self, monkeypatch):
        monkeypatch.setenv("PROVIDER_HTTP_TIMEOUT", "2.5")
        assert get_provider_http_timeout() == 2.5

    def test_timeout_invalid(self, monkeypatch):
        monkeypatch.setenv("PROVIDER_HTTP_TIMEOUT", "soon")
        with pytest.raises(ValueError):
            get_provider_http_timeout()

    def test_rate_limit(self, monkeypatch):
        monkeypatch.setenv("WEBHOOK_RATE_LIMIT", "10/second")
        assert get_webhook_rate_limit() == "10/second"

    def test_log_level(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "debug")
        assert get_log_level() == "DEBUG"


class TestLoggingUtils:
    """Tests for logging helpers."""

    @pytest.mark.parametrize(
        "value, expected",
        [
            ("juspay_api_key", "**********_key"),
            ("abcd", "****"),
            ("", ""),
            (None, ""),
        ],
    )
    def test_redact_log_value(self, value, expected):
        assert redact_log_value(value) == expected

    def test_configure_logging(self, monkeypatch):
        calls = []
        monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.append(kwargs))

        configure_logging("WARNING")

        assert calls[0]["level"] == "WARNING"
        assert "%(name)s" in calls[0]["format"]


class TestErrorTaxonomy:
    """Tests for the HTTP mapping carried by each error."""

    def test_status_codes(self):
        assert AuthenticationMissing().status_code == 401
        assert SourceVerificationFailed().status_code == 400
        assert MissingExpectedField().status_code == 500
        assert MalformedPayload().status_code == 500
        assert LedgerClientError().status_code == 500
        assert UnexpectedProviderStatus("NEW", "juspay").status_code == 500

    def test_upstream_status_code(self):
        """Test provider status codes pass through and missing ones map to 424."""
        assert UpstreamTransportError("boom", provider_status_code=502).status_code == 502
        assert UpstreamTransportError("boom").status_code == 424

    def test_configuration_missing_is_missing_field(self):
        assert issubclass(ProviderConfigurationMissing, MissingExpectedField)
        assert ProviderConfigurationMissing().detail == "Deserialization Error"

    def test_unexpected_status_message(self):
        error = UnexpectedProviderStatus("NEW", "juspay")
        assert str(error) == (
            "Status received from juspay: NEW, is not expected. Please check the payment flow."
        )

    def test_message_defaults_to_detail(self):
        assert str(SourceVerificationFailed()) == "Source Verification Failed"


class TestDatabaseUrl:
    """Tests for get_database_url."""

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("postgresql://u:p@db/app", "postgresql+asyncpg://u:p@db/app"),
            ("postgres://u:p@db/app", "postgresql+asyncpg://u:p@db/app"),
            ("sqlite+aiosqlite:///:memory:", "sqlite+aiosqlite:///:memory:"),
        ],
    )
    def test_async_driver(self, monkeypatch, raw, expected):
        monkeypatch.setenv("DATABASE_URL", raw)
        assert get_database_url() == expected

    def test_default(self, monkeypatch):
        monkeypatch.delenv("DATABASE_URL", raising=False)
        assert get_database_url() == "sqlite+aiosqlite:///./psp_webhooks.db"
