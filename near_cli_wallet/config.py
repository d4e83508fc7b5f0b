"""
Network selection and wallet tunables.

The host wallet selector supplies RPC providers per network; when it does
not, the public NEAR endpoints are used. Environment variables override
both, so a developer can point the verifier at a local node without
touching host code:

    NEAR_CLI_WALLET_MAINNET_RPC     RPC URL for mainnet
    NEAR_CLI_WALLET_TESTNET_RPC     RPC URL for testnet
    NEAR_CLI_WALLET_VERIFY_RETRIES  verification attempts (int >= 1)
    NEAR_CLI_WALLET_VERIFY_DELAY    seconds between attempts (float >= 0)
"""

from __future__ import annotations

import os
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from enum import StrEnum

from near_cli_wallet.errors import ConfigurationError


class Network(StrEnum):
    """Target chain environment."""

    MAINNET = "mainnet"
    TESTNET = "testnet"

    @classmethod
    def parse(cls, value: str | Network) -> Network:
        """Coerce a host-supplied network name, rejecting anything else."""
        try:
            return cls(value)
        except ValueError:
            raise ConfigurationError(
                f"network must be 'mainnet' or 'testnet', got: {value!r}"
            ) from None


DEFAULT_RPC_URLS: Mapping[Network, str] = {
    Network.MAINNET: "https://rpc.mainnet.near.org",
    Network.TESTNET: "https://rpc.testnet.near.org",
}

DEFAULT_VERIFY_RETRIES = 5
DEFAULT_VERIFY_DELAY = 2.0
DEFAULT_ALLOWANCE = "0.25"

_ENV_PREFIX = "NEAR_CLI_WALLET_"


@dataclass(frozen=True)
class WalletConfig:
    """Resolved wallet configuration.

    Attributes:
        providers: RPC URLs per network, first entry wins.
        verify_retries: Attempts the verification poller makes.
        verify_delay: Seconds between failed verification attempts.
        default_allowance: NEAR allowance granted to session keys.
        rpc_timeout: HTTP timeout for each RPC request, in seconds.
    """

    providers: Mapping[Network, Sequence[str]] = field(default_factory=dict)
    verify_retries: int = DEFAULT_VERIFY_RETRIES
    verify_delay: float = DEFAULT_VERIFY_DELAY
    default_allowance: str = DEFAULT_ALLOWANCE
    rpc_timeout: float = 30.0

    def __post_init__(self) -> None:
        if self.verify_retries < 1:
            raise ConfigurationError(
                f"verify_retries must be >= 1, got {self.verify_retries}"
            )
        if self.verify_delay < 0:
            raise ConfigurationError(
                f"verify_delay must be >= 0, got {self.verify_delay}"
            )

    def rpc_url(self, network: Network | str) -> str:
        """RPC endpoint used to verify transactions on ``network``."""
        net = Network.parse(network)
        urls = self.providers.get(net)
        if urls:
            return urls[0]
        return DEFAULT_RPC_URLS[net]


def _coerce_int(raw: str, *, name: str) -> int:
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"Invalid integer in {name}: {raw!r}") from exc


def _coerce_float(raw: str, *, name: str) -> float:
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigurationError(f"Invalid number in {name}: {raw!r}") from exc


def load_config(
    *,
    env: Mapping[str, str] | None = None,
    providers: Mapping[str, Sequence[str]] | None = None,
) -> WalletConfig:
    """Build a WalletConfig from host providers and environment overrides."""
    env_map = os.environ if env is None else env

    resolved: dict[Network, list[str]] = {}
    for name, urls in (providers or {}).items():
        resolved[Network.parse(name)] = list(urls)

    for net in Network:
        override = env_map.get(f"{_ENV_PREFIX}{net.value.upper()}_RPC")
        if override:
            resolved[net] = [override]

    kwargs: dict[str, object] = {}
    retries_var = f"{_ENV_PREFIX}VERIFY_RETRIES"
    if env_map.get(retries_var):
        kwargs["verify_retries"] = _coerce_int(env_map[retries_var], name=retries_var)
    delay_var = f"{_ENV_PREFIX}VERIFY_DELAY"
    if env_map.get(delay_var):
        kwargs["verify_delay"] = _coerce_float(env_map[delay_var], name=delay_var)

    return WalletConfig(providers=resolved, **kwargs)  # type: ignore[arg-type]
