"""Webhook source verification and rate limiting helpers."""

import base64
import binascii
import logging
import secrets
from typing import Mapping, Optional, Tuple

from slowapi import Limiter
from slowapi.util import get_remote_address

logger = logging.getLogger(__name__)

# Rate limiter
limiter = Limiter(key_func=get_remote_address)


def _get_header(headers: Mapping[str, str], name: str) -> Optional[str]:
    for key, value in headers.items():
        if key.lower() == name:
            return value
    return None


def decode_basic_credentials(auth_header: str) -> Optional[Tuple[str, str]]:
    """Decode a ``Basic`` authorization header into a username/password pair.

    Args:
        auth_header: Raw value of the Authorization header.

    Returns:
        The (username, password) pair, or None if the header is not a
        decodable Basic credential.
    """
    parts = auth_header.strip().split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != "basic":
        return None
    try:
        decoded = base64.b64decode(parts[1].strip(), validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        return None
    if ":" not in decoded:
        return None
    username, password = decoded.split(":", 1)
    return username, password


def verify_webhook_source(
    headers: Mapping[str, str],
    configured_username: str,
    configured_password: str,
) -> bool:
    """Verify the webhook credentials against the configured ones.

    Both the username and the password must match exactly.

    Args:
        headers: Request headers of the inbound webhook.
        configured_username: Webhook username configured for the channel.
        configured_password: Webhook password configured for the channel.

    Returns:
        True if the webhook comes from the configured provider.
    """
    auth_header = _get_header(headers, "authorization")
    if not auth_header:
        logger.warning("Webhook auth header not found")
        return False
    credentials = decode_basic_credentials(auth_header)
    if credentials is None:
        logger.warning("Webhook auth header could not be decoded")
        return False
    username, password = credentials
    username_ok = secrets.compare_digest(username.encode(), configured_username.encode())
    password_ok = secrets.compare_digest(password.encode(), configured_password.encode())
    return username_ok and password_ok
