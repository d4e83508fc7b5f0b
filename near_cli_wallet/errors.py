"""
Exception taxonomy for the NEAR CLI wallet.

Two families leave the package boundary:
    - Action errors (unsupported or unknown actions) from command synthesis.
    - Precondition errors (not signed in, unsupported operation) from the
      wallet verbs.

Everything else (RPC failures, verification exhaustion, malformed pasted
output) is raised by the lower layers and caught by the interactive loops
in wallet.py, which show it inline and re-prompt.
"""

from __future__ import annotations


class WalletError(RuntimeError):
    """Base class for all wallet errors."""


class ConfigurationError(WalletError):
    """Raised when configuration or a network name is invalid."""


# =========================================================================
# Action errors
# =========================================================================


class ActionError(WalletError, ValueError):
    """An action cannot be turned into a CLI clause."""


class UnsupportedActionError(ActionError):
    """The action carries data with no command-line representation."""

    def __init__(self, action_type: str) -> None:
        super().__init__(
            f"{action_type} is not supported by NEAR CLI wallet: "
            "binary data cannot be passed via command line"
        )
        self.action_type = action_type


class UnknownActionError(ActionError):
    """The action tag is not one of the known variants."""

    def __init__(self, action_type: object = None) -> None:
        super().__init__("Unknown action type")
        self.action_type = action_type


class ActionDecodeError(ActionError):
    """A known action tag arrived with malformed params."""


# =========================================================================
# Network / verification errors
# =========================================================================


class RpcError(WalletError):
    """The node answered with a JSON-RPC error envelope."""

    def __init__(
        self,
        message: str,
        code: int | None = None,
        data: object = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.data = data


class TransactionNotFoundError(WalletError):
    """The verification poller ran out of attempts."""

    def __init__(
        self,
        tx_hash: str,
        attempts: int,
        last_error: BaseException | None = None,
    ) -> None:
        message = f"Transaction {tx_hash} not found after {attempts} attempts"
        if last_error is not None:
            message = f"{message}: {last_error}"
        super().__init__(message)
        self.tx_hash = tx_hash
        self.attempts = attempts
        self.last_error = last_error


class SignOutputParseError(WalletError):
    """Pasted sign-message output could not be parsed."""

    def __init__(self, cause: str) -> None:
        super().__init__(f"Could not parse output: {cause}")
        self.cause = cause


# =========================================================================
# Precondition errors
# =========================================================================


class NotSignedInError(WalletError):
    """An operation needing a connected account ran without one."""

    def __init__(self) -> None:
        super().__init__("Wallet not signed in")


class UnsupportedOperationError(WalletError):
    """The wallet verb is not available for the CLI signer."""
