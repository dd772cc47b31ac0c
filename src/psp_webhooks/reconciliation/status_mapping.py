"""Provider status to canonical event type mappings.

Each provider gets its own pure function. Unknown statuses raise
UnexpectedProviderStatus instead of falling back to a default type.
"""

from typing import Optional

from ..errors import UnexpectedProviderStatus
from ..events import CaptureMode, TransactionEventType

JUSPAY_SUCCESS_STATUSES = frozenset(["SUCCESS", "CHARGED", "COD_INITIATED", "AUTO_REFUNDED"])
JUSPAY_FAILURE_STATUSES = frozenset([
    "DECLINED",
    "ERROR",
    "NOT_FOUND",
    "CAPTURE_FAILED",
    "AUTHORIZATION_FAILED",
    "AUTHENTICATION_FAILED",
    "JUSPAY_DECLINED",
    "PROVIDER_DECLINED",
    "FAILURE",
])
JUSPAY_AUTHORIZED_STATUSES = frozenset(["AUTHORIZED", "CAPTURE_INITIATED"])
JUSPAY_PENDING_STATUSES = frozenset([
    "PENDING_AUTHENTICATION",
    "PENDING_VBV",
    "PENDING_VERIFICATION",
    "AUTHORIZING",
])


def juspay_status_to_event_type(
    status: str,
    is_refund: bool,
    capture_mode: CaptureMode,
    is_charge_flow: bool,
) -> TransactionEventType:
    """Map a Juspay order or refund status to a canonical event type.

    Args:
        status: Status reported by Juspay.
        is_refund: Whether the webhook concerns a refund.
        capture_mode: Capture method the order was created with.
        is_charge_flow: Whether the transaction already has a successful
            authorization, making failures charge failures.

    Returns:
        The canonical event type.

    Raises:
        UnexpectedProviderStatus: If the status is not part of Juspay's vocabulary.
    """
    manual = capture_mode == CaptureMode.MANUAL

    if status in JUSPAY_SUCCESS_STATUSES:
        if is_refund:
            return TransactionEventType.REFUND_SUCCESS
        return TransactionEventType.CHARGE_SUCCESS
    if status == "AUTO_REFUND_REQUEST":
        return TransactionEventType.REFUND_REQUEST
    if status == "AUTO_REFUND_FAILED":
        return TransactionEventType.REFUND_FAILURE
    if status in JUSPAY_FAILURE_STATUSES:
        if is_refund:
            return TransactionEventType.REFUND_FAILURE
        if manual and not is_charge_flow:
            return TransactionEventType.AUTHORIZATION_FAILURE
        return TransactionEventType.CHARGE_FAILURE
    if status == "VOID_FAILED":
        return TransactionEventType.CANCEL_FAILURE
    if status == "PARTIAL_CHARGED":
        return TransactionEventType.CHARGE_SUCCESS
    if status in JUSPAY_AUTHORIZED_STATUSES:
        return TransactionEventType.AUTHORIZATION_SUCCESS
    if status == "VOIDED":
        return TransactionEventType.CANCEL_SUCCESS
    if status in JUSPAY_PENDING_STATUSES:
        if manual:
            return TransactionEventType.AUTHORIZATION_ACTION_REQUIRED
        return TransactionEventType.CHARGE_ACTION_REQUIRED
    raise UnexpectedProviderStatus(status, provider="juspay")


def hyperswitch_cancel_status_to_event_type(status: str) -> Optional[TransactionEventType]:
    """Map the status of a Hyperswitch cancel call.

    Returns:
        CANCEL_SUCCESS or CANCEL_FAILURE, or None while the cancellation is
        still processing and no event must be reported yet.

    Raises:
        UnexpectedProviderStatus: For any other status.
    """
    if status == "cancelled":
        return TransactionEventType.CANCEL_SUCCESS
    if status == "failed":
        return TransactionEventType.CANCEL_FAILURE
    if status == "processing":
        return None
    raise UnexpectedProviderStatus(status, provider="hyperswitch")
