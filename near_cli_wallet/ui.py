"""
UI collaborator boundary.

The wallet never renders anything itself. It describes each screen with a
small frozen view model and hands it to the host's WalletUI, which shows
it in the wallet selector's overlay and resolves with whatever the user
submitted. Validation failures come back through ``show_error`` on the
same screen, and the wallet asks again.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import StrEnum
from typing import Protocol, runtime_checkable

# Explorer URLs: nearblocks /txns/<hash>, near.org /transactions/<hash>.
_HASH_IN_URL_RE = re.compile(r"(?:txns?|transactions)/([A-Za-z0-9]{43,44})")
_HASH_RE = re.compile(r"(?:Transaction ID:\s*)?([A-Za-z0-9]{43,44})")


class PromptKind(StrEnum):
    """Which command screen is being shown."""

    ADD_KEY = "add_key"
    TRANSACTION = "transaction"
    SIGN_MESSAGE = "sign_message"


@dataclass(frozen=True)
class AccountIdPrompt:
    """Screen asking for the user's account id."""

    title: str
    button_text: str
    subtitle: str | None = None
    step: str | None = None


@dataclass(frozen=True)
class CommandPrompt:
    """Screen showing a command to run and a field for its result.

    For ADD_KEY and TRANSACTION the field takes a transaction hash or
    explorer URL; for SIGN_MESSAGE it takes the command's printed output.
    """

    kind: PromptKind
    title: str
    subtitle: str
    command: str
    input_label: str
    step: str | None = None


def account_id_prompt(
    *, subtitle: str, button_text: str, step: str | None = None
) -> AccountIdPrompt:
    return AccountIdPrompt(
        title="Connect with NEAR CLI",
        subtitle=subtitle,
        button_text=button_text,
        step=step,
    )


def add_key_prompt(command: str, step: str | None = None) -> CommandPrompt:
    return CommandPrompt(
        kind=PromptKind.ADD_KEY,
        title="Add access key",
        subtitle=(
            "Run this command in your terminal, then paste the transaction "
            "hash or explorer URL below"
        ),
        command=command,
        input_label="Transaction hash or explorer URL",
        step=step,
    )


def transaction_prompt(command: str) -> CommandPrompt:
    return CommandPrompt(
        kind=PromptKind.TRANSACTION,
        title="Sign transaction",
        subtitle=(
            "Run this command in your terminal, then paste the transaction "
            "hash or explorer URL below"
        ),
        command=command,
        input_label="Transaction hash or explorer URL",
    )


def sign_message_prompt(command: str, step: str | None = None) -> CommandPrompt:
    return CommandPrompt(
        kind=PromptKind.SIGN_MESSAGE,
        title="Sign message",
        subtitle="Run this command in your terminal, then paste the JSON output below",
        command=command,
        input_label="Command output",
        step=step,
    )


@runtime_checkable
class WalletUI(Protocol):
    """Host overlay the wallet renders its prompts into.

    The ``prompt_*`` coroutines resolve with the raw text the user
    submitted; they have no timeout.
    """

    def show(self) -> None:
        ...

    def hide(self) -> None:
        ...

    async def prompt_account_id(self, view: AccountIdPrompt) -> str:
        ...

    async def prompt_transaction_hash(self, view: CommandPrompt) -> str:
        ...

    async def prompt_sign_output(self, view: CommandPrompt) -> str:
        ...

    def show_error(self, message: str) -> None:
        """Show ``message`` inline on the current prompt."""
        ...


def parse_hash_input(raw: str) -> str:
    """Pull a transaction hash out of a hash, CLI line or explorer URL.

    Falls back to the input unchanged so the node can reject it.
    """
    url_match = _HASH_IN_URL_RE.search(raw)
    if url_match:
        return url_match.group(1)
    match = _HASH_RE.search(raw)
    return match.group(1) if match else raw
