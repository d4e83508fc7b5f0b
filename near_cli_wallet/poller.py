"""
Verification poller.

Confirms a transaction the user sent out-of-band by querying the node
until it reports the transaction, or the attempt budget runs out.

Fixed-interval retry: ``delay`` seconds between failed attempts, none
after the last. Inclusion latency on NEAR is short and predictable, so
there is no backoff.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any, Protocol

from near_cli_wallet.config import DEFAULT_VERIFY_DELAY, DEFAULT_VERIFY_RETRIES
from near_cli_wallet.errors import TransactionNotFoundError

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[Any]]


class TxStatusClient(Protocol):
    """The one RPC capability the poller needs."""

    async def tx_status(self, tx_hash: str, sender_account_id: str) -> dict[str, Any]:
        ...


async def verify_transaction(
    client: TxStatusClient,
    tx_hash: str,
    signer_id: str,
    *,
    retries: int = DEFAULT_VERIFY_RETRIES,
    delay: float = DEFAULT_VERIFY_DELAY,
    sleep: Sleep = asyncio.sleep,
) -> dict[str, Any]:
    """Poll ``client`` until ``tx_hash`` is found.

    Args:
        client: Anything with ``tx_status`` (NearRpcClient in production).
        tx_hash: Transaction hash to look up.
        signer_id: Account that signed the transaction.
        retries: Total attempts, at least 1.
        delay: Seconds to wait between failed attempts.
        sleep: Awaitable sleep, injectable for tests.

    Returns:
        The node's execution outcome for the transaction.

    Raises:
        TransactionNotFoundError: After ``retries`` failed attempts. The
            last attempt's error is chained and kept on ``last_error``.
        ValueError: If ``retries`` is less than 1.
    """
    if retries < 1:
        raise ValueError(f"retries must be >= 1, got {retries}")

    last_error: Exception | None = None
    for attempt in range(1, retries + 1):
        try:
            result = await client.tx_status(tx_hash, signer_id)
        except Exception as exc:  # RPC envelopes and transport failures alike
            last_error = exc
            logger.debug(
                "tx %s attempt %d/%d failed: %s", tx_hash, attempt, retries, exc
            )
            if attempt < retries:
                await sleep(delay)
            continue
        logger.info("tx %s verified on attempt %d", tx_hash, attempt)
        return result

    raise TransactionNotFoundError(tx_hash, retries, last_error) from last_error
