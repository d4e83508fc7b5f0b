"""
Command synthesizer: full ``near`` CLI invocations.

Three builders, each returning one multi-line command string ready to be
pasted into a POSIX shell:

    - ``build_add_key_command()``     grant a key on an account.
    - ``build_transaction_command()`` sign and send one transaction.
    - ``build_sign_message_command()`` sign a NEP-413 off-chain message.

Lines are joined with ``LINE_SEPARATOR`` (a backslash continuation). The
exact text is the compatibility surface with near-cli-rs: sub-command
order, flag names and quoting must stay as they are.

Transaction command precedence:
    1. single FunctionCall  -> ``near contract call-function as-transaction``
    2. single Transfer      -> ``near tokens ... send-near``
    3. single AddKey        -> ``near account add-key``
    4. only DeleteKey       -> ``near account delete-keys`` (keys comma-joined)
    5. anything else        -> ``near transaction construct-transaction``
"""

from __future__ import annotations

import base64
from collections.abc import Sequence

from near_cli_wallet.actions import (
    Action,
    AddKeyAction,
    DeleteKeyAction,
    FunctionCallAction,
    TransferAction,
)
from near_cli_wallet.compiler import (
    compile_action_clause,
    json_args,
    near_amount,
    permission_parts,
    quote,
    tgas_amount,
)
from near_cli_wallet.config import DEFAULT_ALLOWANCE, Network

LINE_SEPARATOR = " \\\n    "
SIGNING_DIRECTIVE = "sign-with-keychain"


def _join(parts: Sequence[str]) -> str:
    return LINE_SEPARATOR.join(parts)


def _network_config(network: Network | str) -> str:
    return f"network-config {Network.parse(network).value}"


def encode_nonce(nonce: bytes) -> str:
    """NEP-413 nonce as the base64 text the CLI expects."""
    return base64.b64encode(nonce).decode("ascii")


# =========================================================================
# Add key
# =========================================================================


def build_add_key_command(
    account_id: str,
    public_key: str,
    network: Network | str,
    *,
    contract_id: str | None = None,
    method_names: Sequence[str] | None = None,
    allowance: str = DEFAULT_ALLOWANCE,
) -> str:
    """Command granting ``public_key`` on ``account_id``.

    Without ``contract_id`` the key gets full access. With it, the key is
    limited to calling ``method_names`` (any method when empty) on that
    contract, with ``allowance`` given in NEAR, not yocto.
    """
    parts = ["near account", f"add-key {quote(account_id)}"]

    if contract_id:
        parts.append("grant-function-call-access")
        parts.append(f"--allowance '{allowance} NEAR'")
        parts.append(f"--contract-account-id {quote(contract_id)}")
        if method_names:
            parts.append(f"--function-names {quote(', '.join(method_names))}")
    else:
        parts.append("grant-full-access")

    parts.append(f"use-manually-provided-public-key {public_key}")
    parts.append(_network_config(network))
    parts.append(SIGNING_DIRECTIVE)
    return _join(parts)


# =========================================================================
# Transactions
# =========================================================================


def _function_call_command(
    signer_id: str,
    receiver_id: str,
    action: FunctionCallAction,
    network: Network | str,
) -> str:
    return _join([
        "near contract",
        "call-function",
        f"as-transaction {quote(receiver_id)} {quote(action.method_name)}",
        f"json-args {quote(json_args(action.args))}",
        f"prepaid-gas {tgas_amount(action.gas)}",
        f"attached-deposit {near_amount(action.deposit)}",
        f"sign-as {quote(signer_id)}",
        _network_config(network),
        SIGNING_DIRECTIVE,
    ])


def _transfer_command(
    signer_id: str,
    receiver_id: str,
    action: TransferAction,
    network: Network | str,
) -> str:
    return _join([
        "near tokens",
        quote(signer_id),
        f"send-near {quote(receiver_id)} {near_amount(action.deposit)}",
        _network_config(network),
        SIGNING_DIRECTIVE,
    ])


def _add_key_command(
    signer_id: str,
    action: AddKeyAction,
    network: Network | str,
) -> str:
    return _join([
        "near account",
        f"add-key {quote(signer_id)}",
        *permission_parts(action.permission),
        f"use-manually-provided-public-key {action.public_key}",
        _network_config(network),
        SIGNING_DIRECTIVE,
    ])


def _delete_keys_command(
    signer_id: str,
    actions: Sequence[DeleteKeyAction],
    network: Network | str,
) -> str:
    keys = ",".join(action.public_key for action in actions)
    return _join([
        "near account",
        f"delete-keys {quote(signer_id)} public-keys {keys}",
        _network_config(network),
        SIGNING_DIRECTIVE,
    ])


def build_transaction_command(
    signer_id: str,
    receiver_id: str,
    actions: Sequence[Action],
    network: Network | str,
) -> str:
    """Command signing one transaction of ``actions`` from ``signer_id``.

    The generic form keeps the actions in the order given; the chain
    executes them in that order.

    Raises:
        ValueError: If ``actions`` is empty.
        UnsupportedActionError: If a deploy action is present.
        UnknownActionError: If an element is not an Action.
    """
    if not actions:
        raise ValueError("transaction must contain at least one action")

    if len(actions) == 1:
        (action,) = actions
        if isinstance(action, FunctionCallAction):
            return _function_call_command(signer_id, receiver_id, action, network)
        if isinstance(action, TransferAction):
            return _transfer_command(signer_id, receiver_id, action, network)
        if isinstance(action, AddKeyAction):
            return _add_key_command(signer_id, action, network)

    delete_keys = [a for a in actions if isinstance(a, DeleteKeyAction)]
    if len(delete_keys) == len(actions):
        return _delete_keys_command(signer_id, delete_keys, network)

    return _join([
        "near transaction",
        f"construct-transaction {quote(signer_id)} {quote(receiver_id)}",
        *(compile_action_clause(action) for action in actions),
        "skip",
        _network_config(network),
        SIGNING_DIRECTIVE,
    ])


# =========================================================================
# Messages
# =========================================================================


def build_sign_message_command(
    message: str,
    recipient: str,
    nonce: str,
    network: Network | str,
    signer_id: str,
) -> str:
    """Command signing a NEP-413 message.

    ``nonce`` is the base64 text form (see ``encode_nonce``).
    """
    return _join([
        "near message sign-nep413",
        f"utf8 {quote(message)}",
        f"nonce {quote(nonce)}",
        f"recipient {quote(recipient)}",
        f"sign-as {quote(signer_id)}",
        SIGNING_DIRECTIVE,
        _network_config(network),
    ])
