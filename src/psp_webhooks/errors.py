"""Exception taxonomy for webhook processing.

Every error carries the HTTP status code the API layer answers with and a
public ``detail`` that is safe to return to the caller. The exception message
itself may contain internal information and is only logged.
"""

from typing import Optional


class WebhookProcessingError(Exception):
    """Base class for all terminal failures of a webhook invocation."""

    status_code: int = 500
    detail: str = "Internal Error"

    def __init__(self, message: str = "", detail: Optional[str] = None):
        super().__init__(message or self.detail)
        if detail is not None:
            self.detail = detail


class AuthenticationMissing(WebhookProcessingError):
    """No stored authentication context exists for the installation."""

    status_code = 401
    detail = "Failed fetching auth data, check your Saleor API URL"


class SourceVerificationFailed(WebhookProcessingError):
    """Webhook credentials did not match the configured provider credentials."""

    status_code = 400
    detail = "Source Verification Failed"


class UpstreamTransportError(WebhookProcessingError):
    """A call to the payment provider failed.

    ``provider_status_code`` is the HTTP status returned by the provider when
    one was received; transport-level failures leave it unset and map to 424.
    """

    detail = "Sync call failed"

    def __init__(self, message: str = "", provider_status_code: Optional[int] = None):
        super().__init__(message)
        self.provider_status_code = provider_status_code
        self.status_code = provider_status_code or 424


class UnexpectedProviderStatus(WebhookProcessingError):
    """A provider status string fell outside the known vocabulary."""

    detail = "Deserialization Error"

    def __init__(self, status: str, provider: str):
        super().__init__(
            f"Status received from {provider}: {status}, is not expected. "
            "Please check the payment flow."
        )
        self.status = status
        self.provider = provider


class MissingExpectedField(WebhookProcessingError):
    """A required value was absent after reconciliation or correlation."""

    detail = "Deserialization Error"


class ProviderConfigurationMissing(MissingExpectedField):
    """No provider credentials are configured for the resolved channel."""


class MalformedPayload(WebhookProcessingError):
    """The webhook body could not be parsed or its identifiers decoded."""

    detail = "Deserialization Error"


class LedgerClientError(WebhookProcessingError):
    """The platform ledger query or mutation failed."""

    detail = "Deserialization Error"
