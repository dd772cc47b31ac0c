"""Shared test fixtures and configuration."""

import base64
import json
import os
from types import SimpleNamespace
from typing import Any, Callable, Dict, List, Optional

import httpx
import pytest

# Set up test environment variables before importing modules
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("WEBHOOK_RATE_LIMIT", "1000/minute")

from psp_webhooks.database import (
    Base,
    InstallationAuth,
    ProviderConfiguration,
    create_async_engine,
    get_async_session_factory,
)
from psp_webhooks.events import CanonicalEvent
from psp_webhooks.saleor import (
    HistoryEvent,
    LedgerClient,
    TransactionDetails,
    TransactionEventReportResult,
)

SALEOR_API_URL = "https://shop.example.com/graphql/"
TRANSACTION_ID = "VHJhbnNhY3Rpb25JdGVtOjE="
CHANNEL_ID = "Q2hhbm5lbDox"
WEBHOOK_USERNAME = "juspay_webhook_user"
WEBHOOK_PASSWORD = "juspay_webhook_password"


class FakeInstallationStore:
    """In-memory stand-in for InstallationAuthRepository."""

    def __init__(self, auths: Optional[Dict[str, InstallationAuth]] = None):
        self.auths = auths or {}

    async def get(self, saleor_api_url: str) -> Optional[InstallationAuth]:
        return self.auths.get(saleor_api_url)


class FakeConfigurationStore:
    """In-memory stand-in for ProviderConfigurationRepository."""

    def __init__(self, configs: Optional[List[ProviderConfiguration]] = None):
        self.configs = configs or []

    async def get_for_channel(
        self, saleor_api_url: str, channel_id: str, provider: str
    ) -> Optional[ProviderConfiguration]:
        for config in self.configs:
            if (config.saleor_api_url, config.channel_id, config.provider) == (
                saleor_api_url, channel_id, provider
            ):
                return config
        return None


class FakeLedger(LedgerClient):
    """Ledger client recording reported events."""

    def __init__(self, transaction: Optional[TransactionDetails]):
        self.transaction = transaction
        self.reported: List[Dict[str, Any]] = []
        self.already_processed = False

    async def get_transaction(self, transaction_id: str) -> Optional[TransactionDetails]:
        return self.transaction

    async def report_transaction_event(
        self, transaction_id: str, event: CanonicalEvent
    ) -> TransactionEventReportResult:
        self.reported.append({"transaction_id": transaction_id, "event": event})
        return TransactionEventReportResult(already_processed=self.already_processed)


def b64(value: str) -> str:
    return base64.b64encode(value.encode()).decode()


def basic_auth(username: str, password: str) -> Dict[str, str]:
    return {"Authorization": f"Basic {b64(f'{username}:{password}')}"}


@pytest.fixture
def webhook_headers() -> Dict[str, str]:
    """Headers carrying the configured Juspay webhook credentials."""
    return basic_auth(WEBHOOK_USERNAME, WEBHOOK_PASSWORD)


@pytest.fixture
def make_juspay_webhook() -> Callable[..., bytes]:
    """Factory for raw Juspay webhook bodies."""

    def _make(
        event_name: str = "ORDER_AUTHORIZED",
        order_id: str = "O1",
        capture_method: Optional[str] = "manual",
        error_message: Optional[str] = None,
        transaction_id: str = TRANSACTION_ID,
        saleor_api_url: str = SALEOR_API_URL,
    ) -> bytes:
        order: Dict[str, Any] = {
            "order_id": order_id,
            "udf1": b64(transaction_id),
            "udf2": b64(saleor_api_url),
            "udf3": capture_method,
        }
        if error_message is not None:
            order["txn_detail"] = {"error_message": error_message}
        return json.dumps({"event_name": event_name, "content": {"order": order}}).encode()

    return _make


@pytest.fixture
def juspay_order_payload() -> Callable[..., Dict[str, Any]]:
    """Factory for Juspay order status responses."""

    def _make(
        status: str = "AUTHORIZED",
        order_id: str = "O1",
        amount: Any = 100.0,
        refunds: Optional[List[Dict[str, Any]]] = None,
    ) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "order_id": order_id,
            "status": status,
            "amount": amount,
            "currency": "INR",
        }
        if refunds is not None:
            payload["refunds"] = refunds
        return payload

    return _make


@pytest.fixture
def installation_store() -> FakeInstallationStore:
    return FakeInstallationStore({
        SALEOR_API_URL: InstallationAuth(saleor_api_url=SALEOR_API_URL, token="app-token"),
    })


@pytest.fixture
def configuration_store() -> FakeConfigurationStore:
    return FakeConfigurationStore([
        ProviderConfiguration(
            saleor_api_url=SALEOR_API_URL,
            channel_id=CHANNEL_ID,
            provider="juspay",
            environment="test",
            api_key="juspay_api_key",
            merchant_id="merchant_1",
            username=WEBHOOK_USERNAME,
            password=WEBHOOK_PASSWORD,
        ),
        ProviderConfiguration(
            saleor_api_url=SALEOR_API_URL,
            channel_id=CHANNEL_ID,
            provider="hyperswitch",
            environment="test",
            api_key="hyperswitch_api_key",
        ),
    ])


@pytest.fixture
def make_transaction() -> Callable[..., TransactionDetails]:
    """Factory for ledger transactions."""

    def _make(events: Optional[List[HistoryEvent]] = None, channel_id: Optional[str] = CHANNEL_ID):
        return TransactionDetails(
            id=TRANSACTION_ID,
            psp_reference="O1",
            channel_id=channel_id,
            events=events or [],
        )

    return _make


@pytest.fixture
def mock_http_client() -> Callable[[Callable[[httpx.Request], httpx.Response]], httpx.AsyncClient]:
    """Build an AsyncClient whose requests are answered by a handler."""

    def _make(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(handler))

    return _make


# Database fixtures for repository tests
@pytest.fixture
async def db_engine():
    """Create an in-memory SQLite database for testing."""
    engine = create_async_engine(
        database_url="sqlite+aiosqlite:///:memory:",
        echo=False
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def db_session(db_engine):
    """Create a database session for testing."""
    session_factory = get_async_session_factory(db_engine)
    async with session_factory() as session:
        yield session


@pytest.fixture
def ids() -> SimpleNamespace:
    """Identifiers shared by the fixtures above."""
    return SimpleNamespace(
        saleor_api_url=SALEOR_API_URL,
        transaction_id=TRANSACTION_ID,
        channel_id=CHANNEL_ID,
        username=WEBHOOK_USERNAME,
        password=WEBHOOK_PASSWORD,
    )


@pytest.fixture
def make_basic_auth() -> Callable[[str, str], Dict[str, str]]:
    return basic_auth


@pytest.fixture
def make_ledger() -> Callable[[Optional[TransactionDetails]], FakeLedger]:
    return FakeLedger
