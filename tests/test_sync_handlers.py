"""Tests for the ledger's synchronous action webhook handlers."""

from decimal import Decimal
from urllib.parse import parse_qs

import httpx
import pytest

from psp_webhooks.errors import (
    MissingExpectedField,
    ProviderConfigurationMissing,
    UpstreamTransportError,
)
from psp_webhooks.events import TransactionEventType
from psp_webhooks.webhooks import (
    TransactionActionRequestedEvent,
    failure_response,
    handle_cancelation_requested,
    handle_refund_requested,
)

from conftest import CHANNEL_ID, SALEOR_API_URL, FakeConfigurationStore


def action_event(psp_reference="pay_1", amount="10.50", channel_id=CHANNEL_ID):
    transaction = {"id": "txn_1", "pspReference": psp_reference}
    if channel_id is not None:
        transaction["sourceObject"] = {"channel": {"id": channel_id}}
    return TransactionActionRequestedEvent.model_validate({
        "action": {"amount": amount, "actionType": "CANCEL"},
        "transaction": transaction,
    })


def hyperswitch_handler(status, calls=None):
    def handler(request: httpx.Request) -> httpx.Response:
        if calls is not None:
            calls.append(request)
        return httpx.Response(200, json={
            "payment_id": "pay_1",
            "status": status,
            "amount": 1050,
            "currency": "USD",
        })

    return handler


class TestHandleCancelationRequested:
    """Tests for handle_cancelation_requested."""

    async def test_cancelled(self, mock_http_client, configuration_store):
        calls = []
        async with mock_http_client(hyperswitch_handler("cancelled", calls)) as client:
            response = await handle_cancelation_requested(
                action_event(), SALEOR_API_URL, configuration_store, client
            )

        assert response.to_response() == {
            "pspReference": "pay_1",
            "result": "CANCEL_SUCCESS",
            "amount": 10.5,
        }
        assert calls[0].url.host == "sandbox.hyperswitch.io"
        assert calls[0].headers["api-key"] == "hyperswitch_api_key"

    async def test_failed(self, mock_http_client, configuration_store):
        async with mock_http_client(hyperswitch_handler("failed")) as client:
            response = await handle_cancelation_requested(
                action_event(), SALEOR_API_URL, configuration_store, client
            )

        assert response.result == TransactionEventType.CANCEL_FAILURE

    async def test_processing_reports_no_result(self, mock_http_client, configuration_store):
        """Test a processing cancellation answers without success or failure."""
        async with mock_http_client(hyperswitch_handler("processing")) as client:
            response = await handle_cancelation_requested(
                action_event(), SALEOR_API_URL, configuration_store, client
            )

        assert response.result is None
        assert response.to_response() == {"pspReference": "pay_1", "message": "processing"}

    async def test_unexpected_status(self, mock_http_client, configuration_store):
        """Test an unknown cancel status is answered without a result."""
        async with mock_http_client(hyperswitch_handler("succeeded")) as client:
            response = await handle_cancelation_requested(
                action_event(), SALEOR_API_URL, configuration_store, client
            )

        assert response.result is None
        assert response.amount is None
        body = response.to_response()
        assert body["pspReference"] == "pay_1"
        assert "result" not in body
        assert "succeeded" in body["message"]

    async def test_missing_configuration(self, mock_http_client):
        calls = []
        async with mock_http_client(hyperswitch_handler("cancelled", calls)) as client:
            with pytest.raises(ProviderConfigurationMissing):
                await handle_cancelation_requested(
                    action_event(), SALEOR_API_URL, FakeConfigurationStore(), client
                )
        assert calls == []

    async def test_missing_source_object(self, mock_http_client, configuration_store):
        async with mock_http_client(hyperswitch_handler("cancelled")) as client:
            with pytest.raises(MissingExpectedField):
                await handle_cancelation_requested(
                    action_event(channel_id=None), SALEOR_API_URL, configuration_store, client
                )

    async def test_missing_psp_reference(self, mock_http_client, configuration_store):
        async with mock_http_client(hyperswitch_handler("cancelled")) as client:
            with pytest.raises(MissingExpectedField):
                await handle_cancelation_requested(
                    action_event(psp_reference=None), SALEOR_API_URL, configuration_store, client
                )

    async def test_provider_error(self, mock_http_client, configuration_store):
        def handler(request):
            return httpx.Response(422, json={"error": "unprocessable"})

        async with mock_http_client(handler) as client:
            with pytest.raises(UpstreamTransportError) as exc_info:
                await handle_cancelation_requested(
                    action_event(), SALEOR_API_URL, configuration_store, client
                )
        assert exc_info.value.status_code == 422


class TestHandleRefundRequested:
    """Tests for handle_refund_requested."""

    async def test_refund_request(self, mock_http_client, configuration_store, juspay_order_payload):
        """Test the generated refund id is returned as psp reference and sent to Juspay."""
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200, json=juspay_order_payload(status="CHARGED"))

        async with mock_http_client(handler) as client:
            response = await handle_refund_requested(
                action_event(psp_reference="O1", amount="25.00"),
                SALEOR_API_URL,
                configuration_store,
                client,
            )

        assert response.result is None
        assert response.psp_reference

        request = calls[0]
        assert request.url.path == "/orders/O1/refunds"
        assert request.headers["x-merchantid"] == "merchant_1"
        form = parse_qs(request.content.decode())
        assert form["unique_request_id"] == [response.psp_reference]
        assert form["amount"] == ["25.00"]

    async def test_unique_ids_per_request(self, mock_http_client, configuration_store, juspay_order_payload):
        def handler(request):
            return httpx.Response(200, json=juspay_order_payload(status="CHARGED"))

        async with mock_http_client(handler) as client:
            first = await handle_refund_requested(action_event(psp_reference="O1"), SALEOR_API_URL, configuration_store, client)
            second = await handle_refund_requested(action_event(psp_reference="O1"), SALEOR_API_URL, configuration_store, client)

        assert first.psp_reference != second.psp_reference


class TestFailureResponse:
    """Tests for failure_response."""

    def test_reports_requested_amount(self):
        response = failure_response(
            action_event(amount="7.25"), TransactionEventType.REFUND_FAILURE, "Sync call failed"
        )
        assert response.amount == Decimal("7.25")
        assert response.to_response() == {
            "pspReference": "pay_1",
            "result": "REFUND_FAILURE",
            "amount": 7.25,
            "message": "Sync call failed",
        }
