"""Shared HTTP plumbing for payment provider connectors."""

import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import httpx

from ..errors import UpstreamTransportError

logger = logging.getLogger(__name__)


class ConnectorBase(ABC):
    """
    Minimal provider connector. Subclasses supply authentication headers and
    expose typed operations; every call goes through ``_request`` so provider
    failures surface uniformly as UpstreamTransportError. Nothing is retried.
    """

    provider: str = "unknown"

    def __init__(self, http_client: httpx.AsyncClient, base_url: str, timeout: Optional[float] = None):
        self.http_client = http_client
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    @abstractmethod
    def _auth_headers(self) -> Dict[str, str]:
        raise NotImplementedError

    async def _request(
        self,
        method: str,
        path: str,
        json_body: Optional[Dict[str, Any]] = None,
        form_body: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Call the provider and return the decoded JSON body.

        Raises:
            UpstreamTransportError: On transport failures, non-2xx responses or
                undecodable bodies.
        """
        url = f"{self.base_url}{path}"
        headers = {"Accept": "application/json", **self._auth_headers()}
        kwargs: Dict[str, Any] = {"headers": headers}
        if json_body is not None:
            kwargs["json"] = json_body
        if form_body is not None:
            kwargs["data"] = form_body
        if self.timeout is not None:
            kwargs["timeout"] = self.timeout

        try:
            response = await self.http_client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"{self.provider} {method} {path} failed: {type(e).__name__}")
            raise UpstreamTransportError(f"{self.provider} request failed: {e}") from e

        if response.is_error:
            logger.error(f"{self.provider} {method} {path} returned {response.status_code}")
            raise UpstreamTransportError(
                f"{self.provider} responded with {response.status_code}",
                provider_status_code=response.status_code,
            )

        try:
            payload = response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise UpstreamTransportError(f"{self.provider} returned a non-JSON body") from e
        if not isinstance(payload, dict):
            raise UpstreamTransportError(f"{self.provider} returned an unexpected body")
        return payload
