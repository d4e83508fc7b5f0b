"""
Tests for network parsing and configuration loading.

Test plan:
- Network.parse accepts enum and strings, rejects others
- rpc_url: host provider first entry, default public endpoints
- load_config: env overrides beat providers, retries/delay parsed,
  invalid values raise ConfigurationError
"""

import pytest

from near_cli_wallet.config import (
    DEFAULT_RPC_URLS,
    DEFAULT_VERIFY_DELAY,
    DEFAULT_VERIFY_RETRIES,
    Network,
    WalletConfig,
    load_config,
)
from near_cli_wallet.errors import ConfigurationError


class TestNetwork:
    def test_parse(self) -> None:
        assert Network.parse("mainnet") is Network.MAINNET
        assert Network.parse(Network.TESTNET) is Network.TESTNET

    def test_parse_rejects_unknown(self) -> None:
        with pytest.raises(ConfigurationError, match="betanet"):
            Network.parse("betanet")


class TestWalletConfig:
    def test_defaults(self) -> None:
        config = WalletConfig()
        assert config.verify_retries == DEFAULT_VERIFY_RETRIES
        assert config.verify_delay == DEFAULT_VERIFY_DELAY
        assert config.rpc_url("mainnet") == DEFAULT_RPC_URLS[Network.MAINNET]

    def test_provider_first_entry(self) -> None:
        config = WalletConfig(
            providers={Network.TESTNET: ["https://a.example", "https://b.example"]}
        )
        assert config.rpc_url(Network.TESTNET) == "https://a.example"
        assert config.rpc_url(Network.MAINNET) == DEFAULT_RPC_URLS[Network.MAINNET]

    def test_invalid_retries(self) -> None:
        with pytest.raises(ConfigurationError):
            WalletConfig(verify_retries=0)

    def test_invalid_delay(self) -> None:
        with pytest.raises(ConfigurationError):
            WalletConfig(verify_delay=-1.0)


class TestLoadConfig:
    def test_empty_env(self) -> None:
        config = load_config(env={})
        assert config.rpc_url("testnet") == DEFAULT_RPC_URLS[Network.TESTNET]

    def test_providers(self) -> None:
        config = load_config(env={}, providers={"mainnet": ["https://rpc.example"]})
        assert config.rpc_url("mainnet") == "https://rpc.example"

    def test_env_overrides_provider(self) -> None:
        config = load_config(
            env={"NEAR_CLI_WALLET_MAINNET_RPC": "http://localhost:3030"},
            providers={"mainnet": ["https://rpc.example"]},
        )
        assert config.rpc_url("mainnet") == "http://localhost:3030"

    def test_retry_settings(self) -> None:
        config = load_config(
            env={
                "NEAR_CLI_WALLET_VERIFY_RETRIES": "10",
                "NEAR_CLI_WALLET_VERIFY_DELAY": "0.25",
            }
        )
        assert config.verify_retries == 10
        assert config.verify_delay == 0.25

    def test_bad_integer(self) -> None:
        with pytest.raises(ConfigurationError, match="NEAR_CLI_WALLET_VERIFY_RETRIES"):
            load_config(env={"NEAR_CLI_WALLET_VERIFY_RETRIES": "five"})

    def test_bad_number(self) -> None:
        with pytest.raises(ConfigurationError, match="NEAR_CLI_WALLET_VERIFY_DELAY"):
            load_config(env={"NEAR_CLI_WALLET_VERIFY_DELAY": "soon"})

    def test_bad_provider_network(self) -> None:
        with pytest.raises(ConfigurationError):
            load_config(env={}, providers={"localnet": ["http://x"]})
