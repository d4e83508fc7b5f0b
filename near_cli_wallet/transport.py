"""
HTTP transport for the NEAR node's JSON-RPC endpoint.

NearRpcClient only ever needs "POST this JSON, give me the decoded body".
That capability is the ``JsonRpcTransport`` protocol; ``HttpxTransport``
provides it over httpx, and tests supply an object with the same
``post_json`` coroutine returning canned ``tx`` responses.

A failed POST (refused connection, timeout, non-2xx status) raises. The
verification poller treats the exception as one failed attempt, exactly
like an RPC error envelope.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

import httpx


@runtime_checkable
class JsonRpcTransport(Protocol):
    """Anything that can POST a JSON-RPC body to a NEAR node."""

    async def post_json(self, url: str, payload: dict[str, Any]) -> dict[str, Any]:
        ...


class HttpxTransport:
    """POSTs JSON-RPC bodies with httpx.

    Args:
        timeout: Seconds allowed for each request.
        client: Optional shared ``httpx.AsyncClient``. When given, it is
            reused for every request and left open; otherwise each request
            opens and closes its own client.
    """

    def __init__(
        self,
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._timeout = timeout
        self._client = client

    async def post_json(self, url: str, payload: dict[str, Any]) -> dict[str, Any]:
        if self._client is not None:
            return await self._post(self._client, url, payload)
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            return await self._post(client, url, payload)

    async def _post(
        self, client: httpx.AsyncClient, url: str, payload: dict[str, Any]
    ) -> dict[str, Any]:
        response = await client.post(url, json=payload, timeout=self._timeout)
        response.raise_for_status()
        body: dict[str, Any] = response.json()
        return body
