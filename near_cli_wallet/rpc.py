"""
NEAR JSON-RPC client: the single ``tx`` status query used for verification.

Response handling:
    - ``{"result": {...}}``  -> the result dict is returned as-is.
    - ``{"error": {...}}``   -> RpcError with the error's ``message`` (or
      the JSON of the whole envelope when there is none).

The query always sends ``wait_until: "NONE"`` so the node answers
immediately; waiting is the poller's job.
"""

from __future__ import annotations

import itertools
import json
import logging
from typing import Any

from near_cli_wallet.errors import RpcError
from near_cli_wallet.transport import HttpxTransport, JsonRpcTransport

logger = logging.getLogger(__name__)


class NearRpcClient:
    """JSON-RPC client for a NEAR node.

    Args:
        url: The node's JSON-RPC endpoint (e.g. "https://rpc.testnet.near.org").
        transport: Injectable transport for HTTP POST. Defaults to
            HttpxTransport. Pass a FakeTransport for testing.
    """

    def __init__(
        self,
        url: str,
        transport: JsonRpcTransport | None = None,
    ) -> None:
        self._url = url
        self._transport = transport or HttpxTransport()
        self._request_ids = itertools.count(1)

    @property
    def url(self) -> str:
        """The JSON-RPC endpoint URL."""
        return self._url

    async def tx_status(self, tx_hash: str, sender_account_id: str) -> dict[str, Any]:
        """Query the execution outcome of ``tx_hash`` sent by ``sender_account_id``.

        Transport exceptions propagate to the caller.

        Raises:
            RpcError: If the node answers with an error envelope.
        """
        payload = {
            "jsonrpc": "2.0",
            "id": next(self._request_ids),
            "method": "tx",
            "params": {
                "tx_hash": tx_hash,
                "sender_account_id": sender_account_id,
                "wait_until": "NONE",
            },
        }
        logger.debug("RPC tx %s sender=%s url=%s", tx_hash, sender_account_id, self._url)
        response = await self._transport.post_json(self._url, payload)
        return _parse_tx_response(response)


# =====================================================================
# Response parsing (pure functions, no I/O)
# =====================================================================


def _parse_tx_response(response: dict[str, Any]) -> dict[str, Any]:
    error = response.get("error")
    if error:
        if isinstance(error, dict):
            message = error.get("message") or json.dumps(error)
            raise RpcError(message, code=error.get("code"), data=error.get("data"))
        raise RpcError(str(error))

    result = response.get("result")
    if not isinstance(result, dict):
        raise RpcError(f"malformed tx response: {json.dumps(response)}")
    return result
