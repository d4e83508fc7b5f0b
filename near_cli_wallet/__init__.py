"""
NEAR CLI wallet for the wallet selector.

Signs with the external ``near`` command-line tool instead of an
in-process key.

Public API:

    Pure layer (no I/O):
        - Amounts: ``format_units``, ``yocto_to_near``, ``gas_to_tgas``.
        - Actions: the ten ``*Action`` variants, ``action_from_dict``.
        - Compiler: ``compile_action_clause``, ``shell_escape``.
        - Commands: ``build_add_key_command``, ``build_transaction_command``,
          ``build_sign_message_command``.
        - Output parsing: ``parse_sign_message_output``, ``parse_hash_input``.

    Impure layer:
        - ``NearRpcClient`` and ``verify_transaction`` (RPC polling).
        - ``NearCliWallet`` (the wallet verbs) and ``register_wallet``.

    Protocols (for dependency injection):
        - ``KeyValueStorage``, ``WalletUI``, ``JsonRpcTransport``.
"""

from near_cli_wallet.actions import (
    FULL_ACCESS,
    Action,
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
)
from near_cli_wallet.amounts import format_units, gas_to_tgas, yocto_to_near
from near_cli_wallet.commands import (
    build_add_key_command,
    build_sign_message_command,
    build_transaction_command,
    encode_nonce,
)
from near_cli_wallet.compiler import compile_action_clause, shell_escape
from near_cli_wallet.config import Network, WalletConfig, load_config
from near_cli_wallet.errors import (
    ActionDecodeError,
    ActionError,
    ConfigurationError,
    NotSignedInError,
    RpcError,
    SignOutputParseError,
    TransactionNotFoundError,
    UnknownActionError,
    UnsupportedActionError,
    UnsupportedOperationError,
    WalletError,
)
from near_cli_wallet.keys import KeyPair
from near_cli_wallet.poller import verify_transaction
from near_cli_wallet.rpc import NearRpcClient
from near_cli_wallet.signed_message import SignedMessage, parse_sign_message_output
from near_cli_wallet.storage import (
    FunctionCallKey,
    InMemoryStorage,
    KeyValueStorage,
    SessionRepository,
    SqliteStorage,
)
from near_cli_wallet.transport import HttpxTransport, JsonRpcTransport
from near_cli_wallet.ui import (
    AccountIdPrompt,
    CommandPrompt,
    PromptKind,
    WalletUI,
    parse_hash_input,
)
from near_cli_wallet.wallet import (
    Account,
    NearCliWallet,
    SignedInAccount,
    TransactionRequest,
    register_wallet,
)

__version__ = "0.1.0"

__all__ = [
    "FULL_ACCESS",
    "Account",
    "AccountIdPrompt",
    "Action",
    "ActionDecodeError",
    "ActionError",
    "AddKeyAction",
    "CommandPrompt",
    "ConfigurationError",
    "CreateAccountAction",
    "DeleteAccountAction",
    "DeleteKeyAction",
    "DeployContractAction",
    "DeployGlobalContractAction",
    "FunctionCallAction",
    "FunctionCallKey",
    "FunctionCallPermission",
    "HttpxTransport",
    "InMemoryStorage",
    "JsonRpcTransport",
    "KeyPair",
    "KeyValueStorage",
    "NearCliWallet",
    "NearRpcClient",
    "Network",
    "NotSignedInError",
    "PromptKind",
    "RpcError",
    "SessionRepository",
    "SignOutputParseError",
    "SignedInAccount",
    "SignedMessage",
    "SqliteStorage",
    "StakeAction",
    "TransactionNotFoundError",
    "TransactionRequest",
    "TransferAction",
    "UnknownActionError",
    "UnsupportedActionError",
    "UnsupportedOperationError",
    "UseGlobalContractAction",
    "WalletConfig",
    "WalletError",
    "WalletUI",
    "action_from_dict",
    "actions_from_dicts",
    "build_add_key_command",
    "build_sign_message_command",
    "build_transaction_command",
    "compile_action_clause",
    "encode_nonce",
    "format_units",
    "gas_to_tgas",
    "load_config",
    "parse_hash_input",
    "parse_sign_message_output",
    "register_wallet",
    "shell_escape",
    "verify_transaction",
    "yocto_to_near",
]
