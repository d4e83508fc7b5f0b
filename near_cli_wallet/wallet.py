"""
NEAR CLI wallet: the sign/verify orchestrator.

Implements the wallet-selector verbs on top of an out-of-band signer. No
key ever signs anything in-process; instead each verb:

    1. collects the account id if none is stored for the network,
    2. builds the ``near`` command that does the work,
    3. shows it and waits for the user to paste the result,
    4. confirms the result (transaction hash via the verification poller,
       or the parsed NEP-413 signature),
    5. persists the session state.

Flows are sequential. A prompt waits as long as the user needs; only the
RPC polling has a budget. Recoverable mistakes (empty input, unknown hash,
unparseable output) are shown inline and the same screen is asked again.
Only action errors and precondition errors (NotSignedInError,
UnsupportedOperationError) reach the caller.

Overlay lifecycle: prompts call ``ui.show()``; every verb that may prompt
calls ``ui.hide()`` when it finishes, however it finishes.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from near_cli_wallet.actions import Action, coerce_actions
from near_cli_wallet.commands import (
    build_add_key_command,
    build_sign_message_command,
    build_transaction_command,
    encode_nonce,
)
from near_cli_wallet.config import Network, WalletConfig
from near_cli_wallet.errors import (
    NotSignedInError,
    SignOutputParseError,
    TransactionNotFoundError,
    UnsupportedOperationError,
)
from near_cli_wallet.keys import KeyPair
from near_cli_wallet.poller import Sleep, TxStatusClient, verify_transaction
from near_cli_wallet.rpc import NearRpcClient
from near_cli_wallet.signed_message import SignedMessage, parse_sign_message_output
from near_cli_wallet.steps import plan_message_steps, plan_sign_in_steps
from near_cli_wallet.storage import (
    FunctionCallKey,
    KeyValueStorage,
    SessionRepository,
    method_scope,
)
from near_cli_wallet.transport import HttpxTransport
from near_cli_wallet.ui import (
    AccountIdPrompt,
    CommandPrompt,
    WalletUI,
    account_id_prompt,
    add_key_prompt,
    parse_hash_input,
    sign_message_prompt,
    transaction_prompt,
)

logger = logging.getLogger(__name__)

ClientFactory = Callable[[str], TxStatusClient]
KeyFactory = Callable[[], KeyPair]

ERROR_EMPTY_ACCOUNT_ID = "Please enter an account ID"
ERROR_EMPTY_HASH = "Please paste the transaction hash or explorer URL"
ERROR_TX_NOT_FOUND = "Transaction not found. Please check the hash and try again."
ERROR_EMPTY_OUTPUT = "Please paste the command output"


# =========================================================================
# Result / request types
# =========================================================================


@dataclass(frozen=True)
class Account:
    """A connected account and its session public key ("" when none)."""

    account_id: str
    public_key: str

    def to_dict(self) -> dict[str, object]:
        return {"accountId": self.account_id, "publicKey": self.public_key}


@dataclass(frozen=True)
class SignedInAccount:
    """Result of connect-and-sign-message."""

    account_id: str
    public_key: str
    signed_message: SignedMessage

    def to_dict(self) -> dict[str, object]:
        return {
            "accountId": self.account_id,
            "publicKey": self.public_key,
            "signedMessage": self.signed_message.to_dict(),
        }


@dataclass(frozen=True)
class TransactionRequest:
    """One transaction of a ``sign_and_send_transactions`` batch."""

    receiver_id: str
    actions: tuple[Action, ...]

    @classmethod
    def coerce(cls, item: TransactionRequest | Mapping[str, Any]) -> TransactionRequest:
        """Accept a request or the host's ``{"receiverId", "actions"}`` dict."""
        if isinstance(item, TransactionRequest):
            return item
        return cls(
            receiver_id=item["receiverId"],
            actions=tuple(coerce_actions(item["actions"])),
        )


# =========================================================================
# Wallet
# =========================================================================


class NearCliWallet:
    """Wallet-selector wallet that signs through the ``near`` CLI.

    Args:
        storage: Host key-value store for session state.
        ui: Host overlay that renders prompts.
        config: Endpoints and tunables. Defaults to WalletConfig().
        client_factory: Builds the RPC client for an endpoint URL.
            Defaults to NearRpcClient over HttpxTransport.
        key_factory: Produces fresh session keys. Inject for tests.
        sleep: Awaitable sleep used between verification attempts.
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        ui: WalletUI,
        *,
        config: WalletConfig | None = None,
        client_factory: ClientFactory | None = None,
        key_factory: KeyFactory = KeyPair.from_random,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._sessions = SessionRepository(storage)
        self._ui = ui
        self._config = config or WalletConfig()
        self._client_factory = client_factory or self._default_client
        self._key_factory = key_factory
        self._sleep = sleep

    @property
    def sessions(self) -> SessionRepository:
        return self._sessions

    def _default_client(self, url: str) -> TxStatusClient:
        return NearRpcClient(url, HttpxTransport(timeout=self._config.rpc_timeout))

    # -----------------------------------------------------------------
    # Connect
    # -----------------------------------------------------------------

    async def sign_in(
        self,
        network: Network | str,
        *,
        contract_id: str | None = None,
        method_names: Sequence[str] | None = None,
    ) -> list[Account]:
        """Connect an account, optionally granting a contract-scoped key.

        Returns at once when an account is stored and either no contract
        is requested or the stored key is already scoped to it.
        """
        net = Network.parse(network)
        existing_account_id = await self._sessions.get_account_id(net)
        existing_key = await self._sessions.get_function_call_key(net)

        if existing_account_id and (
            not contract_id
            or (existing_key is not None and existing_key.contract_id == contract_id)
        ):
            return [Account(existing_account_id, _public_key_of(existing_key))]

        needs_account_id = not existing_account_id
        steps = plan_sign_in_steps(
            needs_account_id=needs_account_id, needs_add_key=bool(contract_id)
        )

        try:
            account_id = existing_account_id
            if needs_account_id:
                account_id = await self._collect_account_id(
                    account_id_prompt(
                        subtitle="Enter your NEAR account ID",
                        button_text="Next" if contract_id else "Connect",
                        step=steps.next(),
                    )
                )

            if contract_id:
                key_pair = self._key_factory()
                fc_key = await self._grant_session_key(
                    net, account_id, key_pair, contract_id, method_names, step=steps.next()
                )
                await self._sessions.set_account_id(net, account_id)
                await self._sessions.set_function_call_key(net, fc_key)
                logger.info("signed in %s on %s with key for %s", account_id, net, contract_id)
                return [Account(account_id, key_pair.public_key)]

            await self._sessions.set_account_id(net, account_id)
            logger.info("signed in %s on %s", account_id, net)
            return [Account(account_id, "")]
        finally:
            self._ui.hide()

    async def sign_in_and_sign_message(
        self,
        network: Network | str,
        *,
        message: str,
        recipient: str,
        nonce: bytes,
        contract_id: str | None = None,
        method_names: Sequence[str] | None = None,
    ) -> list[SignedInAccount]:
        """Connect and sign a NEP-413 message in one flow.

        Screens, in order: account id (if none stored), sign message,
        add key (if a contract is requested and the stored key is not
        scoped to it).
        """
        net = Network.parse(network)
        existing_account_id = await self._sessions.get_account_id(net)
        existing_key = await self._sessions.get_function_call_key(net)

        needs_account_id = not existing_account_id
        needs_add_key = bool(contract_id) and (
            existing_key is None or existing_key.contract_id != contract_id
        )
        steps = plan_message_steps(
            needs_account_id=needs_account_id, needs_add_key=needs_add_key
        )

        try:
            account_id = existing_account_id
            if needs_account_id:
                account_id = await self._collect_account_id(
                    account_id_prompt(
                        subtitle="Enter your NEAR account ID to sign in and sign a message",
                        button_text="Next",
                        step=steps.next(),
                    )
                )

            command = build_sign_message_command(
                message, recipient, encode_nonce(bytes(nonce)), net, account_id
            )
            output = await self._collect_signed_message(
                sign_message_prompt(command, steps.next())
            )

            public_key = output.public_key
            if needs_add_key and contract_id:
                key_pair = self._key_factory()
                fc_key = await self._grant_session_key(
                    net, account_id, key_pair, contract_id, method_names, step=steps.next()
                )
                await self._sessions.set_function_call_key(net, fc_key)
                public_key = key_pair.public_key

            await self._sessions.set_account_id(net, account_id)
            logger.info("signed in %s on %s and signed message", account_id, net)

            return [
                SignedInAccount(
                    account_id=account_id,
                    public_key=public_key,
                    signed_message=SignedMessage(
                        account_id=output.account_id or account_id,
                        public_key=output.public_key,
                        signature=output.signature,
                    ),
                )
            ]
        finally:
            self._ui.hide()

    async def sign_out(self, network: Network | str) -> None:
        """Forget the account and session key for ``network``."""
        net = Network.parse(network)
        await self._sessions.clear(net)
        logger.info("signed out on %s", net)

    async def get_accounts(self, network: Network | str) -> list[Account]:
        """The connected account, or an empty list."""
        net = Network.parse(network)
        account_id = await self._sessions.get_account_id(net)
        if not account_id:
            return []
        fc_key = await self._sessions.get_function_call_key(net)
        return [Account(account_id, _public_key_of(fc_key))]

    # -----------------------------------------------------------------
    # Transactions
    # -----------------------------------------------------------------

    async def sign_and_send_transaction(
        self,
        network: Network | str,
        *,
        receiver_id: str,
        actions: Iterable[Action | Mapping[str, Any]],
    ) -> dict[str, Any]:
        """Have the user send one transaction and return its outcome.

        Raises:
            NotSignedInError: If no account is connected on ``network``.
            ActionError: If an action cannot be expressed as a command.
        """
        net = Network.parse(network)
        account_id = await self._require_account_id(net)
        command = build_transaction_command(
            account_id, receiver_id, coerce_actions(actions), net
        )

        try:
            return await self._present_and_verify(transaction_prompt(command), net, account_id)
        finally:
            self._ui.hide()

    async def sign_and_send_transactions(
        self,
        network: Network | str,
        *,
        transactions: Iterable[TransactionRequest | Mapping[str, Any]],
    ) -> list[dict[str, Any]]:
        """Send transactions one at a time, in order.

        Each transaction's command is built only after the previous one
        has been verified.
        """
        net = Network.parse(network)
        account_id = await self._require_account_id(net)
        results: list[dict[str, Any]] = []

        try:
            for item in transactions:
                request = TransactionRequest.coerce(item)
                command = build_transaction_command(
                    account_id, request.receiver_id, request.actions, net
                )
                result = await self._present_and_verify(
                    transaction_prompt(command), net, account_id
                )
                results.append(result)
            return results
        finally:
            self._ui.hide()

    # -----------------------------------------------------------------
    # Messages
    # -----------------------------------------------------------------

    async def sign_message(
        self,
        network: Network | str,
        *,
        message: str,
        recipient: str,
        nonce: bytes,
    ) -> SignedMessage:
        """Have the connected account sign a NEP-413 message."""
        net = Network.parse(network)
        account_id = await self._require_account_id(net)
        command = build_sign_message_command(
            message, recipient, encode_nonce(bytes(nonce)), net, account_id
        )

        try:
            output = await self._collect_signed_message(sign_message_prompt(command))
            return SignedMessage(
                account_id=output.account_id or account_id,
                public_key=output.public_key,
                signature=output.signature,
            )
        finally:
            self._ui.hide()

    async def sign_delegate_actions(self, *args: object, **kwargs: object) -> None:
        raise UnsupportedOperationError(
            "signDelegateActions is not supported by NEAR CLI wallet"
        )

    # -----------------------------------------------------------------
    # Interactive steps
    # -----------------------------------------------------------------

    async def _require_account_id(self, network: Network) -> str:
        account_id = await self._sessions.get_account_id(network)
        if not account_id:
            raise NotSignedInError()
        return account_id

    async def _collect_account_id(self, view: AccountIdPrompt) -> str:
        self._ui.show()
        while True:
            account_id = (await self._ui.prompt_account_id(view)).strip()
            if account_id:
                return account_id
            self._ui.show_error(ERROR_EMPTY_ACCOUNT_ID)

    async def _present_and_verify(
        self, view: CommandPrompt, network: Network, signer_id: str
    ) -> dict[str, Any]:
        client = self._client_factory(self._config.rpc_url(network))
        self._ui.show()
        while True:
            raw = (await self._ui.prompt_transaction_hash(view)).strip()
            if not raw:
                self._ui.show_error(ERROR_EMPTY_HASH)
                continue

            tx_hash = parse_hash_input(raw)
            try:
                return await verify_transaction(
                    client,
                    tx_hash,
                    signer_id,
                    retries=self._config.verify_retries,
                    delay=self._config.verify_delay,
                    sleep=self._sleep,
                )
            except TransactionNotFoundError as exc:
                logger.info("verification failed: %s", exc)
                self._ui.show_error(ERROR_TX_NOT_FOUND)

    async def _collect_signed_message(self, view: CommandPrompt) -> SignedMessage:
        self._ui.show()
        while True:
            raw = (await self._ui.prompt_sign_output(view)).strip()
            if not raw:
                self._ui.show_error(ERROR_EMPTY_OUTPUT)
                continue
            try:
                return parse_sign_message_output(raw)
            except SignOutputParseError as exc:
                self._ui.show_error(str(exc))

    async def _grant_session_key(
        self,
        network: Network,
        account_id: str,
        key_pair: KeyPair,
        contract_id: str,
        method_names: Sequence[str] | None,
        *,
        step: str | None,
    ) -> FunctionCallKey:
        command = build_add_key_command(
            account_id,
            key_pair.public_key,
            network,
            contract_id=contract_id,
            method_names=method_names,
            allowance=self._config.default_allowance,
        )
        await self._present_and_verify(add_key_prompt(command, step), network, account_id)
        return FunctionCallKey(
            private_key=key_pair.to_string(),
            contract_id=contract_id,
            methods=method_scope(method_names),
        )


def _public_key_of(fc_key: FunctionCallKey | None) -> str:
    if fc_key is None:
        return ""
    try:
        return KeyPair.from_string(fc_key.private_key).public_key
    except ValueError as exc:
        logger.warning("stored session key is unreadable: %s", exc)
        return ""


# =========================================================================
# Host registration
# =========================================================================


def register_wallet(
    ready: Callable[[NearCliWallet], object],
    storage: KeyValueStorage,
    ui: WalletUI,
    **options: Any,
) -> NearCliWallet:
    """Build a wallet and hand it to the host's ``ready`` hook.

    ``options`` are passed through to NearCliWallet.
    """
    wallet = NearCliWallet(storage, ui, **options)
    ready(wallet)
    return wallet
