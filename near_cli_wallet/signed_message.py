"""
Parsing of pasted ``near message sign-nep413`` output.

The CLI prints log lines around a JSON object such as:

    {"accountId": "alice.near", "publicKey": "ed25519:...",
     "signature": "ed25519:<base58>"}

The wallet selector expects the signature as base64 of the raw bytes, so
the ``ed25519:`` prefix is stripped and the base58 payload re-encoded.
"""

from __future__ import annotations

import base64
import json
import re
from dataclasses import dataclass

import base58

from near_cli_wallet.errors import SignOutputParseError

_JSON_WITH_SIGNATURE_RE = re.compile(r"\{[\s\S]*\"signature\"[\s\S]*\}")
_SIGNATURE_PREFIX = "ed25519:"


@dataclass(frozen=True)
class SignedMessage:
    """A NEP-413 signature as returned to the host.

    Attributes:
        account_id: Signing account; "" when the output did not say.
        public_key: ``ed25519:...`` key that produced the signature.
        signature: base64 of the raw 64-byte signature.
    """

    account_id: str
    public_key: str
    signature: str

    def to_dict(self) -> dict[str, str]:
        return {
            "accountId": self.account_id,
            "publicKey": self.public_key,
            "signature": self.signature,
        }


def parse_sign_message_output(raw: str) -> SignedMessage:
    """Extract the signature triple from pasted CLI output.

    Raises:
        SignOutputParseError: If no JSON object with a signature is found,
            the JSON is invalid, a required field is missing, or the
            signature is not base58.
    """
    match = _JSON_WITH_SIGNATURE_RE.search(raw)
    if match is None:
        raise SignOutputParseError("No valid JSON found")

    try:
        parsed = json.loads(match.group(0))
    except json.JSONDecodeError as exc:
        raise SignOutputParseError(str(exc)) from exc

    if not isinstance(parsed, dict):
        raise SignOutputParseError("No valid JSON found")

    signature = parsed.get("signature")
    public_key = parsed.get("publicKey")
    if not signature or not public_key:
        raise SignOutputParseError("Missing signature or publicKey in output")
    if not isinstance(signature, str) or not isinstance(public_key, str):
        raise SignOutputParseError("signature and publicKey must be strings")

    sig_data = signature.removeprefix(_SIGNATURE_PREFIX)
    try:
        sig_bytes = base58.b58decode(sig_data)
    except ValueError as exc:
        raise SignOutputParseError(f"signature is not base58: {exc}") from exc

    account_id = parsed.get("accountId")
    return SignedMessage(
        account_id=account_id if isinstance(account_id, str) else "",
        public_key=public_key,
        signature=base64.b64encode(sig_bytes).decode("ascii"),
    )
