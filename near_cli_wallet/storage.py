"""
Per-network session persistence.

Two layers:
    - ``KeyValueStorage``: the host's async string store (the wallet
      selector's ``storage``). ``InMemoryStorage`` and ``SqliteStorage``
      are provided for hosts without one, and for tests.
    - ``SessionRepository``: the only code that knows the key layout.
      Everything else asks it for the account id or the session key of a
      network.

Key layout:
    cli:<network>:accountId        plain account id string
    cli:<network>:functionCallKey  JSON {"privateKey", "contractId", "methods"}

SqliteStorage follows the same SQLite patterns as the rest of the suite:
    - _get_conn() with persistent connection for :memory:
    - _transaction() context manager with commit/rollback
    - _init_schema() via executescript
    - WAL mode for file-backed databases
"""

from __future__ import annotations

import asyncio
import json
import logging
import sqlite3
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from near_cli_wallet.config import Network

logger = logging.getLogger(__name__)


# =========================================================================
# Storage protocol and implementations
# =========================================================================


@runtime_checkable
class KeyValueStorage(Protocol):
    """Async string key-value store supplied by the host."""

    async def get(self, key: str) -> str | None:
        ...

    async def set(self, key: str, value: str) -> None:
        ...

    async def remove(self, key: str) -> None:
        ...


class InMemoryStorage:
    """Dict-backed KeyValueStorage. Lost when the process exits."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> str | None:
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        self._data[key] = value

    async def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def snapshot(self) -> dict[str, str]:
        """Copy of the current contents."""
        return dict(self._data)


_SCHEMA = """\
CREATE TABLE IF NOT EXISTS kv (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL
);
"""


class SqliteStorage:
    """SQLite-backed KeyValueStorage.

    Queries are synchronous sqlite3 calls; the async methods run each one
    in a worker thread with ``asyncio.to_thread``.

    Args:
        db_path: Path to SQLite database file, or ":memory:" for in-memory.
    """

    def __init__(self, db_path: str | Path = ":memory:") -> None:
        self._db_path = str(db_path)
        self._is_memory = self._db_path == ":memory:"

        if self._is_memory:
            self._persistent_conn: sqlite3.Connection | None = sqlite3.connect(
                ":memory:", check_same_thread=False
            )
        else:
            self._persistent_conn = None

        self._init_schema()

    def _get_conn(self) -> sqlite3.Connection:
        if self._persistent_conn is not None:
            return self._persistent_conn

        conn = sqlite3.connect(self._db_path)
        conn.execute("PRAGMA journal_mode = WAL")
        return conn

    @contextmanager
    def _transaction(self) -> Iterator[sqlite3.Connection]:
        """Context manager for a database transaction."""
        conn = self._get_conn()
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            if self._persistent_conn is None:
                conn.close()

    def _init_schema(self) -> None:
        with self._transaction() as conn:
            conn.executescript(_SCHEMA)

    async def get(self, key: str) -> str | None:
        return await asyncio.to_thread(self._get, key)

    async def set(self, key: str, value: str) -> None:
        await asyncio.to_thread(self._set, key, value)

    async def remove(self, key: str) -> None:
        await asyncio.to_thread(self._remove, key)

    def _get(self, key: str) -> str | None:
        with self._transaction() as conn:
            row = conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
        return row[0] if row is not None else None

    def _set(self, key: str, value: str) -> None:
        with self._transaction() as conn:
            conn.execute(
                "INSERT INTO kv (key, value) VALUES (?, ?) "
                "ON CONFLICT(key) DO UPDATE SET value = excluded.value",
                (key, value),
            )

    def _remove(self, key: str) -> None:
        with self._transaction() as conn:
            conn.execute("DELETE FROM kv WHERE key = ?", (key,))

    def close(self) -> None:
        if self._persistent_conn is not None:
            self._persistent_conn.close()
            self._persistent_conn = None


# =========================================================================
# Session records
# =========================================================================


@dataclass(frozen=True)
class FunctionCallKey:
    """A session key and the contract scope it was granted for.

    Attributes:
        private_key: Serialized secret key (``ed25519:...``). Secret.
        contract_id: Contract the key may call.
        methods: Method allow-list granted with the key (empty: any).
    """

    private_key: str
    contract_id: str
    methods: tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        return {
            "privateKey": self.private_key,
            "contractId": self.contract_id,
            "methods": list(self.methods),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FunctionCallKey:
        """Rebuild a stored record.

        Raises:
            ValueError: If a field has the wrong type.
        """
        private_key = data["privateKey"]
        contract_id = data["contractId"]
        methods = data.get("methods") or []
        if not isinstance(private_key, str) or not isinstance(contract_id, str):
            raise ValueError("privateKey and contractId must be strings")
        if not isinstance(methods, list) or not all(isinstance(m, str) for m in methods):
            raise ValueError("methods must be a list of strings")
        return cls(
            private_key=private_key,
            contract_id=contract_id,
            methods=tuple(methods),
        )

    def __repr__(self) -> str:
        return (
            f"FunctionCallKey(private_key=<redacted>, contract_id={self.contract_id!r}, "
            f"methods={self.methods!r})"
        )


def account_id_key(network: Network | str) -> str:
    return f"cli:{Network.parse(network).value}:accountId"


def function_call_key_key(network: Network | str) -> str:
    return f"cli:{Network.parse(network).value}:functionCallKey"


class SessionRepository:
    """Account id and session key persistence, per network."""

    def __init__(self, storage: KeyValueStorage) -> None:
        self._storage = storage

    async def get_account_id(self, network: Network | str) -> str:
        """Stored account id, or "" when none."""
        return (await self._storage.get(account_id_key(network))) or ""

    async def set_account_id(self, network: Network | str, account_id: str) -> None:
        await self._storage.set(account_id_key(network), account_id)

    async def remove_account_id(self, network: Network | str) -> None:
        await self._storage.remove(account_id_key(network))

    async def get_function_call_key(self, network: Network | str) -> FunctionCallKey | None:
        """Stored session key, or None when absent or unreadable."""
        raw = await self._storage.get(function_call_key_key(network))
        if not raw:
            return None
        try:
            return FunctionCallKey.from_dict(json.loads(raw))
        except (ValueError, KeyError, TypeError) as exc:
            logger.warning("discarding unreadable session key for %s: %s", network, exc)
            return None

    async def set_function_call_key(
        self, network: Network | str, key: FunctionCallKey
    ) -> None:
        await self._storage.set(function_call_key_key(network), json.dumps(key.to_dict()))

    async def remove_function_call_key(self, network: Network | str) -> None:
        await self._storage.remove(function_call_key_key(network))

    async def clear(self, network: Network | str) -> None:
        """Forget both records for ``network``."""
        await self.remove_account_id(network)
        await self.remove_function_call_key(network)


def method_scope(method_names: Sequence[str] | None) -> tuple[str, ...]:
    """Normalize an optional method list to the stored tuple form."""
    return tuple(method_names or ())
