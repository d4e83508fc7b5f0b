"""
Transaction action model.

An action is one instruction inside a NEAR transaction. The set of variants
is closed: ten frozen dataclasses, each tagged by a ``type`` class attribute
that matches the wallet-selector wire tag. ``Action`` is their union.

Decoding:
    Hosts hand actions over as plain dicts (``{"type": ..., "params":
    {...}}``, camelCase params). ``action_from_dict`` is the only way in
    from untrusted data: it rejects unknown tags with UnknownActionError
    and validates params against ``schemas/actions.v0.1.json`` before
    building the typed object. Code holding a typed Action never needs an
    "unknown" branch of its own.
"""

from __future__ import annotations

import base64
import binascii
import json
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from importlib import resources
from typing import Any, ClassVar, Final, Literal, Union, cast

import jsonschema  # type: ignore[import-untyped]

from near_cli_wallet.errors import (
    ActionDecodeError,
    UnknownActionError,
    UnsupportedActionError,
)
from near_cli_wallet.schema import validate

FULL_ACCESS: Final = "FullAccess"


# =========================================================================
# Permissions
# =========================================================================


@dataclass(frozen=True)
class FunctionCallPermission:
    """Access scoped to calling methods on one contract.

    Attributes:
        receiver_id: Contract the key may call.
        allowance: Optional yoctoNEAR budget the key may spend on gas.
        method_names: Optional allow-list of method names. None or empty
            means any method on ``receiver_id``.
    """

    receiver_id: str
    allowance: str | None = None
    method_names: tuple[str, ...] | None = None


AddKeyPermission = Union[Literal["FullAccess"], FunctionCallPermission]


# =========================================================================
# Variants
# =========================================================================


@dataclass(frozen=True)
class CreateAccountAction:
    type: ClassVar[str] = "CreateAccount"


@dataclass(frozen=True)
class DeployContractAction:
    type: ClassVar[str] = "DeployContract"

    code: bytes


@dataclass(frozen=True)
class FunctionCallAction:
    """Call ``method_name`` with JSON ``args``.

    ``gas`` is in gas units and ``deposit`` in yoctoNEAR, both as integer
    strings.
    """

    type: ClassVar[str] = "FunctionCall"

    method_name: str
    args: Any
    gas: str
    deposit: str


@dataclass(frozen=True)
class TransferAction:
    type: ClassVar[str] = "Transfer"

    deposit: str


@dataclass(frozen=True)
class StakeAction:
    type: ClassVar[str] = "Stake"

    stake: str
    public_key: str


@dataclass(frozen=True)
class AddKeyAction:
    type: ClassVar[str] = "AddKey"

    public_key: str
    permission: AddKeyPermission
    nonce: int | None = None

    @property
    def is_full_access(self) -> bool:
        return self.permission == FULL_ACCESS


@dataclass(frozen=True)
class DeleteKeyAction:
    type: ClassVar[str] = "DeleteKey"

    public_key: str


@dataclass(frozen=True)
class DeleteAccountAction:
    type: ClassVar[str] = "DeleteAccount"

    beneficiary_id: str


@dataclass(frozen=True)
class UseGlobalContractAction:
    """Point the account at a globally deployed contract.

    Exactly one of ``account_id`` (by deployer) or ``code_hash`` (by
    content) identifies the contract.
    """

    type: ClassVar[str] = "UseGlobalContract"

    account_id: str | None = None
    code_hash: str | None = None

    def __post_init__(self) -> None:
        if (self.account_id is None) == (self.code_hash is None):
            raise ValueError("exactly one of account_id or code_hash must be set")


@dataclass(frozen=True)
class DeployGlobalContractAction:
    type: ClassVar[str] = "DeployGlobalContract"

    code: bytes
    deploy_mode: Literal["CodeHash", "AccountId"]


Action = Union[
    CreateAccountAction,
    DeployContractAction,
    FunctionCallAction,
    TransferAction,
    StakeAction,
    AddKeyAction,
    DeleteKeyAction,
    DeleteAccountAction,
    UseGlobalContractAction,
    DeployGlobalContractAction,
]


# =========================================================================
# Decoding untrusted dicts
# =========================================================================

_PARAMS_SCHEMAS: dict[str, dict[str, Any]] | None = None

_BINARY_TAGS: Final = frozenset({DeployContractAction.type, DeployGlobalContractAction.type})


def _params_schemas() -> dict[str, dict[str, Any]]:
    global _PARAMS_SCHEMAS
    if _PARAMS_SCHEMAS is None:
        with resources.files("near_cli_wallet").joinpath(
            "schemas/actions.v0.1.json"
        ).open("r", encoding="utf-8") as f:
            _PARAMS_SCHEMAS = cast(dict[str, dict[str, Any]], json.load(f)["params"])
    return _PARAMS_SCHEMAS


def _decode_code(tag: str, raw: str | Sequence[int]) -> bytes:
    """Contract code arrives as base64 text or a list of byte values."""
    if isinstance(raw, str):
        try:
            return base64.b64decode(raw, validate=True)
        except binascii.Error as exc:
            raise UnsupportedActionError(tag) from exc
    return bytes(raw)


def _decode_permission(raw: Any) -> AddKeyPermission:
    if raw == FULL_ACCESS:
        return FULL_ACCESS
    method_names = raw.get("methodNames")
    return FunctionCallPermission(
        receiver_id=raw["receiverId"],
        allowance=raw.get("allowance"),
        method_names=tuple(method_names) if method_names is not None else None,
    )


def action_from_dict(data: Mapping[str, Any]) -> Action:
    """Build a typed Action from its wire dict.

    Raises:
        UnknownActionError: If ``type`` is missing or not a known tag.
        ActionDecodeError: If ``params`` do not match the tag's schema.
        UnsupportedActionError: If a deploy action's code cannot be read.
            Deploy actions are never expressible as commands, so a
            malformed one fails the same way a well-formed one would.
    """
    tag = data.get("type") if isinstance(data, Mapping) else None
    schemas = _params_schemas()
    if not isinstance(tag, str) or tag not in schemas:
        raise UnknownActionError(tag)

    params = data.get("params", {})
    try:
        validate(params, schemas[tag])
    except jsonschema.ValidationError as exc:
        if tag in _BINARY_TAGS:
            raise UnsupportedActionError(tag) from exc
        raise ActionDecodeError(f"invalid {tag} params: {exc.message}") from exc

    if tag == CreateAccountAction.type:
        return CreateAccountAction()
    if tag == DeployContractAction.type:
        return DeployContractAction(code=_decode_code(tag, params["code"]))
    if tag == FunctionCallAction.type:
        return FunctionCallAction(
            method_name=params["methodName"],
            args=params["args"],
            gas=params["gas"],
            deposit=params["deposit"],
        )
    if tag == TransferAction.type:
        return TransferAction(deposit=params["deposit"])
    if tag == StakeAction.type:
        return StakeAction(stake=params["stake"], public_key=params["publicKey"])
    if tag == AddKeyAction.type:
        access_key = params["accessKey"]
        return AddKeyAction(
            public_key=params["publicKey"],
            permission=_decode_permission(access_key["permission"]),
            nonce=access_key.get("nonce"),
        )
    if tag == DeleteKeyAction.type:
        return DeleteKeyAction(public_key=params["publicKey"])
    if tag == DeleteAccountAction.type:
        return DeleteAccountAction(beneficiary_id=params["beneficiaryId"])
    if tag == UseGlobalContractAction.type:
        identifier = params["contractIdentifier"]
        return UseGlobalContractAction(
            account_id=identifier.get("accountId"),
            code_hash=identifier.get("codeHash"),
        )
    # Only DeployGlobalContract is left: the schema table has ten entries.
    return DeployGlobalContractAction(
        code=_decode_code(tag, params["code"]),
        deploy_mode=params["deployMode"],
    )


def actions_from_dicts(items: Iterable[Mapping[str, Any]]) -> list[Action]:
    """Decode a list of wire dicts, preserving order."""
    return [action_from_dict(item) for item in items]


def coerce_actions(items: Iterable[Action | Mapping[str, Any]]) -> list[Action]:
    """Accept typed actions and wire dicts mixed, decoding the dicts."""
    return [
        action_from_dict(item) if isinstance(item, Mapping) else item
        for item in items
    ]
