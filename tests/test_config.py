"""Tests for shared and Uniswap V1 configuration."""

import json

import pytest

from amm_liquidity.core.config import Config
from amm_liquidity.core.exceptions import ConfigError
from amm_liquidity.protocols.uniswap_v1 import UniswapV1Config


@pytest.fixture
def fresh_config(monkeypatch, tmp_path):
    """Singletons reloaded against an isolated config directory."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    monkeypatch.setenv("AMM_CONFIG_DIR", str(config_dir))
    Config.reset()
    UniswapV1Config.reset()
    yield config_dir
    Config.reset()
    UniswapV1Config.reset()


class TestConfig:
    def test_singleton(self):
        assert Config() is Config()

    def test_reference_symbol_resolves_to_sentinel(self):
        config = Config()
        assert config.get_token_address("eth") == Config.REFERENCE_ASSET
        assert config.is_reference(Config.REFERENCE_ASSET.lower())

    def test_raw_address_passes_through(self):
        address = "0x" + "ab" * 20
        assert Config().get_token_address(address) == address

    def test_unknown_symbol(self):
        with pytest.raises(ConfigError):
            Config().get_token_address("NOPE")

    def test_tokens_file_is_optional(self, fresh_config):
        assert Config().common_tokens == {}

    def test_tokens_file_symbols_are_case_insensitive(self, fresh_config):
        address = "0x" + "cd" * 20
        (fresh_config / "tokens.json").write_text(json.dumps({"dai": address}))

        config = Config()
        assert config.get_token_address("DAI") == address
        assert config.get_token_address("dai") == address

    def test_shared_abis(self):
        assert any(item.get("name") == "approve" for item in Config().get_abi("erc20"))

    def test_protocol_abis_delegated(self):
        abi = Config().get_abi("uniswap_v1_exchange")
        assert any(item.get("name") == "addLiquidity" for item in abi)

    def test_unknown_abi(self):
        with pytest.raises(ConfigError):
            Config().get_abi("nope")


class TestUniswapV1Config:
    def test_mainnet_factory(self):
        assert UniswapV1Config().factory_address(1) == "0xc0a47dFe034B400B47bDaD5FecDa2621de6c4d95"

    def test_factory_override(self, monkeypatch):
        monkeypatch.setenv("UNISWAP_V1_FACTORY", "0x" + "12" * 20)
        assert UniswapV1Config().factory_address(1) == "0x" + "12" * 20

    @pytest.mark.parametrize("chain_id", [11155111, 999])
    def test_factory_missing(self, chain_id):
        with pytest.raises(ConfigError):
            UniswapV1Config().factory_address(chain_id)

    def test_default_deadline(self):
        assert UniswapV1Config().deadline_seconds == 60

    def test_deadline_override(self, monkeypatch):
        monkeypatch.setenv("DEADLINE_SECONDS", "120")
        assert UniswapV1Config().deadline_seconds == 120

    @pytest.mark.parametrize("raw", ["soon", "0", "-5"])
    def test_invalid_deadline(self, monkeypatch, raw):
        monkeypatch.setenv("DEADLINE_SECONDS", raw)
        with pytest.raises(ConfigError):
            UniswapV1Config().deadline_seconds

    def test_min_output(self):
        assert UniswapV1Config.MIN_OUTPUT == 1
