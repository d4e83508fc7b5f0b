"""
Session key pairs.

A session key is a locally generated Ed25519 key that the user grants
function-call access to with the CLI. The wallet only needs three things
from it: a fresh key, its public identifier, and a text form to persist.

Text forms (NEAR conventions):
    public key:  "ed25519:" + base58(32-byte public key)
    secret key:  "ed25519:" + base58(32-byte seed || 32-byte public key)
"""

from __future__ import annotations

import base58
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey
from cryptography.hazmat.primitives.serialization import (
    Encoding,
    NoEncryption,
    PrivateFormat,
    PublicFormat,
)

KEY_TYPE_PREFIX = "ed25519:"
_SEED_LEN = 32


class KeyPair:
    """An Ed25519 key pair with NEAR text encodings."""

    def __init__(self, private_key: Ed25519PrivateKey) -> None:
        self._private_key = private_key

    @classmethod
    def from_random(cls) -> KeyPair:
        """Generate a fresh key pair."""
        return cls(Ed25519PrivateKey.generate())

    @classmethod
    def from_string(cls, encoded: str) -> KeyPair:
        """Parse the ``ed25519:<base58>`` secret key form.

        Accepts the 64-byte (seed + public key) encoding and a bare 32-byte
        seed.

        Raises:
            ValueError: If the prefix, encoding or length is wrong, or the
                embedded public key does not match the seed.
        """
        if not encoded.startswith(KEY_TYPE_PREFIX):
            raise ValueError(f"secret key must start with {KEY_TYPE_PREFIX!r}")
        raw = base58.b58decode(encoded[len(KEY_TYPE_PREFIX):])
        if len(raw) not in (_SEED_LEN, 2 * _SEED_LEN):
            raise ValueError(f"secret key must be 32 or 64 bytes, got {len(raw)}")

        key_pair = cls(Ed25519PrivateKey.from_private_bytes(raw[:_SEED_LEN]))
        if len(raw) == 2 * _SEED_LEN and raw[_SEED_LEN:] != key_pair.public_key_bytes:
            raise ValueError("secret key public half does not match its seed")
        return key_pair

    @property
    def public_key_bytes(self) -> bytes:
        return self._private_key.public_key().public_bytes(Encoding.Raw, PublicFormat.Raw)

    @property
    def public_key(self) -> str:
        """Public identifier, ``ed25519:<base58>``."""
        return KEY_TYPE_PREFIX + base58.b58encode(self.public_key_bytes).decode("ascii")

    def to_string(self) -> str:
        """Serialized secret key. Never log this."""
        seed = self._private_key.private_bytes(
            Encoding.Raw, PrivateFormat.Raw, NoEncryption()
        )
        return KEY_TYPE_PREFIX + base58.b58encode(seed + self.public_key_bytes).decode("ascii")

    def __str__(self) -> str:
        return self.to_string()

    def __repr__(self) -> str:
        return f"KeyPair(public_key={self.public_key!r})"
