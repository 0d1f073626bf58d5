"""HTTP client for the UniNexus REST API.

This module provides the ApiClient class used both for direct calls and as the
send function that replays queued writes. It includes:

- Lazily created ``httpx.AsyncClient`` bound to the configured base URL
- Bearer authentication from the token kept in the key-value store
- Mapping of non-success responses and transport failures to typed errors
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any

import httpx

from uninexus_offline.core.errors import ApiRequestError, ApiUnavailableError
from uninexus_offline.core.settings import Settings, settings
from uninexus_offline.storage.base import KeyValueStore

# Configure logger for this module
logger = logging.getLogger(__name__)


class ApiClient:
    """HTTP client wrapper for UniNexus API interactions."""

    def __init__(
        self,
        store: KeyValueStore,
        config: Settings | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config or settings
        self._store = store
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._client_lock = asyncio.Lock()

    async def _ensure_client(self) -> httpx.AsyncClient:
        async with self._client_lock:
            if self._client is None:
                self._client = httpx.AsyncClient(
                    base_url=self.config.api_base_url,
                    timeout=httpx.Timeout(self.config.http_timeout_seconds),
                    transport=self._transport,
                )
        return self._client

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        async with self._client_lock:
            if self._client is not None:
                await self._client.aclose()
                self._client = None

    async def set_token(self, token: str) -> None:
        await self._store.set(self.config.token_key, token)

    async def clear_token(self) -> None:
        await self._store.remove(self.config.token_key)

    async def _build_headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        token = await self._store.get(self.config.token_key)
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    async def send(
        self,
        endpoint: str,
        *,
        method: str = "GET",
        body: str | None = None,
    ) -> Any:
        """Send a request with a pre-serialized JSON body.

        Returns:
            The decoded JSON response, or None when the response has no body.

        Raises:
            ApiRequestError: The API answered with a non-2xx status.
            ApiUnavailableError: The API could not be reached.
        """
        client = await self._ensure_client()
        headers = await self._build_headers()

        try:
            response = await client.request(
                method.upper(),
                endpoint,
                content=body.encode("utf-8") if body is not None else None,
                headers=headers,
            )
        except httpx.HTTPError as exc:
            logger.debug("Request %s %s failed: %s", method, endpoint, exc)
            raise ApiUnavailableError(f"Request to {endpoint} failed: {exc}") from exc

        if not response.is_success:
            raise ApiRequestError(response.status_code, _error_message(response))

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text

    async def request_json(
        self,
        endpoint: str,
        *,
        method: str = "GET",
        payload: Any | None = None,
    ) -> Any:
        """Serialize ``payload`` as JSON and send it."""
        body = json.dumps(payload) if payload is not None else None
        return await self.send(endpoint, method=method, body=body)


def _error_message(response: httpx.Response) -> str:
    fallback = f"Request failed with status {response.status_code}"
    try:
        payload = response.json()
    except ValueError:
        return fallback
    if isinstance(payload, dict) and payload.get("message"):
        return str(payload["message"])
    return fallback
