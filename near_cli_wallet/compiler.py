"""
Action compiler: one Action in, one ``near transaction`` clause out.

A clause is the fragment of a ``construct-transaction`` invocation that
adds one action (``add-action transfer '1 NEAR'`` and so on). Clauses are
joined by the command synthesizer in the order the actions were given.

Quoting:
    Every caller-controlled string (account ids, method names, JSON args)
    is wrapped in single quotes, with embedded single quotes written as
    ``'\\''``. Public keys are emitted bare: they are base58 with a fixed
    ``ed25519:`` prefix and carry no shell metacharacters.

Deploy actions carry raw wasm bytes, which have no command-line form, so
they always raise UnsupportedActionError.
"""

from __future__ import annotations

import json
from typing import Any

from near_cli_wallet.actions import (
    Action,
    AddKeyAction,
    AddKeyPermission,
    CreateAccountAction,
    DeleteAccountAction,
    DeleteKeyAction,
    DeployContractAction,
    DeployGlobalContractAction,
    FunctionCallAction,
    FunctionCallPermission,
    StakeAction,
    TransferAction,
    UseGlobalContractAction,
)
from near_cli_wallet.amounts import gas_to_tgas, yocto_to_near
from near_cli_wallet.errors import UnknownActionError, UnsupportedActionError


def shell_escape(value: str) -> str:
    """Escape ``value`` for use inside a single-quoted shell string."""
    return value.replace("'", "'\\''")


def quote(value: str) -> str:
    """Single-quote ``value`` for the shell."""
    return f"'{shell_escape(value)}'"


def near_amount(yocto: str) -> str:
    """CLI token argument, e.g. ``'1.5 NEAR'``."""
    return f"'{yocto_to_near(yocto)} NEAR'"


def tgas_amount(gas: str) -> str:
    """CLI gas argument, e.g. ``'30 Tgas'``."""
    return f"'{gas_to_tgas(gas)} Tgas'"


# JavaScript prints integral numbers below this without a fraction or exponent.
_JS_PLAIN_INTEGER_LIMIT = 1e21


def _js_numbers(value: Any) -> Any:
    if isinstance(value, float) and value.is_integer() and abs(value) < _JS_PLAIN_INTEGER_LIMIT:
        return int(value)
    if isinstance(value, dict):
        return {key: _js_numbers(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_js_numbers(item) for item in value]
    return value


def json_args(args: Any) -> str:
    """Compact JSON, matching what the wallet selector would serialize.

    Integral floats are written as integers (``1.0`` as ``1``), the way
    ``JSON.stringify`` writes them.
    """
    return json.dumps(_js_numbers(args), separators=(",", ":"), ensure_ascii=False)


def permission_parts(permission: AddKeyPermission) -> list[str]:
    """``grant-*`` sub-command and flags for an add-key permission.

    The allowance here is in yoctoNEAR and is only emitted when present.
    """
    if not isinstance(permission, FunctionCallPermission):
        return ["grant-full-access"]

    parts = ["grant-function-call-access"]
    if permission.allowance:
        parts.append(f"--allowance {near_amount(permission.allowance)}")
    parts.append(f"--contract-account-id {quote(permission.receiver_id)}")
    if permission.method_names:
        parts.append(f"--function-names {quote(', '.join(permission.method_names))}")
    return parts


def compile_action_clause(action: Action) -> str:
    """Compile one action into its ``add-action`` clause.

    Raises:
        UnsupportedActionError: For DeployContract and DeployGlobalContract.
        UnknownActionError: For anything that is not an Action variant.
    """
    if isinstance(action, CreateAccountAction):
        return "add-action create-account"

    if isinstance(action, TransferAction):
        return f"add-action transfer {near_amount(action.deposit)}"

    if isinstance(action, FunctionCallAction):
        return " ".join([
            f"add-action function-call {quote(action.method_name)}",
            f"json-args {quote(json_args(action.args))}",
            f"prepaid-gas {tgas_amount(action.gas)}",
            f"attached-deposit {near_amount(action.deposit)}",
        ])

    if isinstance(action, AddKeyAction):
        return " ".join([
            "add-action add-key",
            *permission_parts(action.permission),
            f"use-manually-provided-public-key {action.public_key}",
        ])

    if isinstance(action, DeleteKeyAction):
        return f"add-action delete-key {action.public_key}"

    if isinstance(action, DeleteAccountAction):
        return f"add-action delete-account beneficiary {quote(action.beneficiary_id)}"

    if isinstance(action, StakeAction):
        return f"add-action stake {near_amount(action.stake)} {action.public_key}"

    if isinstance(action, UseGlobalContractAction):
        if action.account_id is not None:
            return (
                "add-action use-global-contract use-global-account-id "
                f"{quote(action.account_id)}"
            )
        return f"add-action use-global-contract use-global-hash {quote(action.code_hash or '')}"

    if isinstance(action, (DeployContractAction, DeployGlobalContractAction)):
        raise UnsupportedActionError(action.type)

    raise UnknownActionError(getattr(action, "type", None))
