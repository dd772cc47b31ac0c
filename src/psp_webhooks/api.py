"""HTTP endpoints for provider and ledger webhooks."""

import json
import logging
from contextlib import asynccontextmanager
from typing import Callable, Optional

import httpx
from fastapi import Depends, FastAPI, Header, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from sqlalchemy.ext.asyncio import AsyncSession

from .auth import limiter
from .config import get_provider_http_timeout, get_webhook_rate_limit
from .database import (
    InstallationAuthRepository,
    ProviderConfigurationRepository,
    close_db,
    get_db,
    init_db,
)
from .errors import (
    AuthenticationMissing,
    MalformedPayload,
    MissingExpectedField,
    UpstreamTransportError,
    WebhookProcessingError,
)
from .events import TransactionEventType
from .logging_utils import configure_logging
from .reconciliation import JuspayWebhookProcessor
from .webhooks import (
    TransactionActionRequestedEvent,
    TransactionActionResponse,
    failure_response,
    handle_cancelation_requested,
    handle_refund_requested,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    await init_db()
    app.state.http_client = httpx.AsyncClient(timeout=get_provider_http_timeout())
    try:
        yield
    finally:
        await app.state.http_client.aclose()
        await close_db()


app = FastAPI(title="PSP Webhooks", lifespan=lifespan)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


def get_http_client(request: Request) -> httpx.AsyncClient:
    return request.app.state.http_client


async def get_installation_store(db: AsyncSession = Depends(get_db)) -> InstallationAuthRepository:
    return InstallationAuthRepository(db)


async def get_configuration_store(db: AsyncSession = Depends(get_db)) -> ProviderConfigurationRepository:
    return ProviderConfigurationRepository(db)


@app.exception_handler(WebhookProcessingError)
async def webhook_processing_error_handler(request: Request, exc: WebhookProcessingError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.url.path} failed: {type(exc).__name__}: {exc}")
    else:
        logger.warning(f"{request.url.path} rejected: {type(exc).__name__}: {exc}")
    return JSONResponse(status_code=exc.status_code, content=exc.detail)


@app.post("/webhooks/juspay")
@limiter.limit(get_webhook_rate_limit())
async def juspay_webhook(
    request: Request,
    http_client: httpx.AsyncClient = Depends(get_http_client),
    installation_store: InstallationAuthRepository = Depends(get_installation_store),
    configuration_store: ProviderConfigurationRepository = Depends(get_configuration_store),
):
    """
    Receive a Juspay order webhook.

    The body is parsed here rather than by the framework so malformed payloads
    are reported generically. Answers "[OK]" when an event was reported, the
    event type is ignored, or a refund is still awaiting settlement.
    """
    logger.info("Received webhook from Juspay")
    body = await request.body()
    processor = JuspayWebhookProcessor(http_client, installation_store, configuration_store)
    outcome = await processor.process(body, dict(request.headers))
    logger.info(f"Juspay webhook {outcome.event_name} processed: {outcome.status.value}")
    return "[OK]"


async def _parse_action_event(request: Request) -> TransactionActionRequestedEvent:
    body = await request.body()
    try:
        return TransactionActionRequestedEvent.model_validate(json.loads(body))
    except (json.JSONDecodeError, UnicodeDecodeError, ValidationError) as e:
        raise MalformedPayload(f"Invalid transaction action payload: {e}") from e


async def _run_sync_webhook(
    request: Request,
    saleor_api_url: Optional[str],
    installation_store: InstallationAuthRepository,
    handler: Callable,
    failure_result: TransactionEventType,
    configuration_store: ProviderConfigurationRepository,
    http_client: httpx.AsyncClient,
):
    if not saleor_api_url:
        raise AuthenticationMissing("Missing saleor-api-url header")
    if await installation_store.get(saleor_api_url) is None:
        raise AuthenticationMissing(f"No auth data stored for {saleor_api_url}")

    event = await _parse_action_event(request)
    # Only provider and channel configuration failures become a failure result
    try:
        response: TransactionActionResponse = await handler(
            event, saleor_api_url, configuration_store, http_client
        )
    except (UpstreamTransportError, MissingExpectedField, MalformedPayload) as e:
        logger.warning(f"{request.url.path} failed for {event.transaction.id}: {e}")
        response = failure_response(event, failure_result, str(e))
    return response.to_response()


@app.post("/webhooks/saleor/transaction-cancelation-requested")
@limiter.limit(get_webhook_rate_limit())
async def transaction_cancelation_requested(
    request: Request,
    saleor_api_url: Optional[str] = Header(None),
    http_client: httpx.AsyncClient = Depends(get_http_client),
    installation_store: InstallationAuthRepository = Depends(get_installation_store),
    configuration_store: ProviderConfigurationRepository = Depends(get_configuration_store),
):
    """Cancel the transaction's Hyperswitch payment."""
    return await _run_sync_webhook(
        request,
        saleor_api_url,
        installation_store,
        handle_cancelation_requested,
        TransactionEventType.CANCEL_FAILURE,
        configuration_store,
        http_client,
    )


@app.post("/webhooks/saleor/transaction-refund-requested")
@limiter.limit(get_webhook_rate_limit())
async def transaction_refund_requested(
    request: Request,
    saleor_api_url: Optional[str] = Header(None),
    http_client: httpx.AsyncClient = Depends(get_http_client),
    installation_store: InstallationAuthRepository = Depends(get_installation_store),
    configuration_store: ProviderConfigurationRepository = Depends(get_configuration_store),
):
    """Request a Juspay refund for the transaction."""
    return await _run_sync_webhook(
        request,
        saleor_api_url,
        installation_store,
        handle_refund_requested,
        TransactionEventType.REFUND_FAILURE,
        configuration_store,
        http_client,
    )


@app.get("/health")
async def health():
    return {"status": "healthy", "service": "psp-webhooks"}
