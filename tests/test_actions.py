"""
Tests for decoding untrusted action dicts into typed actions.

Test plan:
- every known tag decodes to its variant with camelCase params mapped
- AddKey permissions: FullAccess literal and scoped record
- UseGlobalContract: account id and code hash forms
- deploy code accepts base64 text and byte lists
- unknown or missing tags raise UnknownActionError
- malformed params raise ActionDecodeError (also a ValueError)
- malformed deploy params raise UnsupportedActionError like any deploy
- UseGlobalContractAction requires exactly one identifier
"""

import base64

import pytest

from near_cli_wallet.actions import (
    FULL_ACCESS,
    AddKeyAction,
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
    action_from_dict,
    actions_from_dicts,
    coerce_actions,
)
from near_cli_wallet.errors import (
    ActionDecodeError,
    UnknownActionError,
    UnsupportedActionError,
)

PK = "ed25519:DcA2MzgpJbrUATQLLceocVckhhAqrkingax4oJ9kZ847"


class TestDecodeVariants:
    def test_create_account(self) -> None:
        assert action_from_dict({"type": "CreateAccount"}) == CreateAccountAction()

    def test_function_call(self) -> None:
        action = action_from_dict({
            "type": "FunctionCall",
            "params": {
                "methodName": "set_greeting",
                "args": {"greeting": "hi"},
                "gas": "30000000000000",
                "deposit": "0",
            },
        })
        assert action == FunctionCallAction(
            method_name="set_greeting",
            args={"greeting": "hi"},
            gas="30000000000000",
            deposit="0",
        )

    def test_transfer(self) -> None:
        action = action_from_dict({"type": "Transfer", "params": {"deposit": "1"}})
        assert action == TransferAction(deposit="1")

    def test_stake(self) -> None:
        action = action_from_dict(
            {"type": "Stake", "params": {"stake": "5", "publicKey": PK}}
        )
        assert action == StakeAction(stake="5", public_key=PK)

    def test_add_key_full_access(self) -> None:
        action = action_from_dict({
            "type": "AddKey",
            "params": {"publicKey": PK, "accessKey": {"permission": "FullAccess"}},
        })
        assert isinstance(action, AddKeyAction)
        assert action.permission == FULL_ACCESS
        assert action.is_full_access

    def test_add_key_scoped(self) -> None:
        action = action_from_dict({
            "type": "AddKey",
            "params": {
                "publicKey": PK,
                "accessKey": {
                    "nonce": 0,
                    "permission": {
                        "receiverId": "app.near",
                        "allowance": "250000000000000000000000",
                        "methodNames": ["a", "b"],
                    },
                },
            },
        })
        assert isinstance(action, AddKeyAction)
        assert action.nonce == 0
        assert action.permission == FunctionCallPermission(
            receiver_id="app.near",
            allowance="250000000000000000000000",
            method_names=("a", "b"),
        )
        assert not action.is_full_access

    def test_delete_key(self) -> None:
        action = action_from_dict({"type": "DeleteKey", "params": {"publicKey": PK}})
        assert action == DeleteKeyAction(public_key=PK)

    def test_delete_account(self) -> None:
        action = action_from_dict(
            {"type": "DeleteAccount", "params": {"beneficiaryId": "bob.near"}}
        )
        assert action == DeleteAccountAction(beneficiary_id="bob.near")

    def test_use_global_contract_by_account(self) -> None:
        action = action_from_dict({
            "type": "UseGlobalContract",
            "params": {"contractIdentifier": {"accountId": "global.near"}},
        })
        assert action == UseGlobalContractAction(account_id="global.near")

    def test_use_global_contract_by_hash(self) -> None:
        action = action_from_dict({
            "type": "UseGlobalContract",
            "params": {"contractIdentifier": {"codeHash": "abc123"}},
        })
        assert action == UseGlobalContractAction(code_hash="abc123")

    def test_deploy_contract_base64_code(self) -> None:
        code = b"\x00asm\x01\x00\x00\x00"
        action = action_from_dict({
            "type": "DeployContract",
            "params": {"code": base64.b64encode(code).decode()},
        })
        assert action == DeployContractAction(code=code)

    def test_deploy_global_contract_byte_list(self) -> None:
        action = action_from_dict({
            "type": "DeployGlobalContract",
            "params": {"code": [0, 97, 115, 109], "deployMode": "CodeHash"},
        })
        assert action == DeployGlobalContractAction(code=b"\x00asm", deploy_mode="CodeHash")

    def test_list_preserves_order(self) -> None:
        actions = actions_from_dicts([
            {"type": "Transfer", "params": {"deposit": "1"}},
            {"type": "CreateAccount"},
            {"type": "DeleteKey", "params": {"publicKey": PK}},
        ])
        assert [a.type for a in actions] == ["Transfer", "CreateAccount", "DeleteKey"]

    def test_coerce_mixes_typed_and_dicts(self) -> None:
        typed = TransferAction(deposit="1")
        actions = coerce_actions([typed, {"type": "CreateAccount"}])
        assert actions == [typed, CreateAccountAction()]


class TestDecodeFailures:
    def test_unknown_tag(self) -> None:
        with pytest.raises(UnknownActionError, match="Unknown action type"):
            action_from_dict({"type": "SelfDestruct", "params": {}})

    def test_missing_tag(self) -> None:
        with pytest.raises(UnknownActionError):
            action_from_dict({"params": {"deposit": "1"}})

    def test_non_string_tag(self) -> None:
        with pytest.raises(UnknownActionError):
            action_from_dict({"type": 7})

    def test_transfer_deposit_must_be_digits(self) -> None:
        with pytest.raises(ActionDecodeError, match="Transfer"):
            action_from_dict({"type": "Transfer", "params": {"deposit": "1.5"}})

    def test_function_call_missing_gas(self) -> None:
        with pytest.raises(ActionDecodeError):
            action_from_dict({
                "type": "FunctionCall",
                "params": {"methodName": "m", "args": {}, "deposit": "0"},
            })

    def test_decode_error_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            action_from_dict({"type": "DeleteKey", "params": {}})

    def test_global_contract_with_both_identifiers(self) -> None:
        with pytest.raises(ActionDecodeError):
            action_from_dict({
                "type": "UseGlobalContract",
                "params": {"contractIdentifier": {"accountId": "a", "codeHash": "b"}},
            })

    @pytest.mark.parametrize(
        "data",
        [
            {"type": "DeployContract", "params": {"code": "!!!"}},
            {"type": "DeployContract", "params": {"code": {"0": 0, "1": 97}}},
            {"type": "DeployContract", "params": {}},
            {"type": "DeployGlobalContract", "params": {"code": [0], "deployMode": "Other"}},
            {"type": "DeployGlobalContract", "params": {"code": {"0": 0}, "deployMode": "CodeHash"}},
        ],
    )
    def test_malformed_deploy_is_unsupported(self, data: dict) -> None:
        with pytest.raises(UnsupportedActionError, match="binary data cannot be passed"):
            action_from_dict(data)


class TestUseGlobalContractInvariant:
    def test_neither_identifier_rejected(self) -> None:
        with pytest.raises(ValueError):
            UseGlobalContractAction()

    def test_both_identifiers_rejected(self) -> None:
        with pytest.raises(ValueError):
            UseGlobalContractAction(account_id="a", code_hash="b")
