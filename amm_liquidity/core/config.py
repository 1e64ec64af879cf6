"""Configuration loading and management"""

import os
import json
from pathlib import Path
from .exceptions import ConfigError


def _read_json(path):
    with open(path) as f:
        return json.load(f)


class Config:
    """
    Shared settings: token symbols, packaged ABIs and the reference asset.

    Every pool pairs ETH with one token. ETH has no contract, so it is
    addressed by the REFERENCE_ASSET sentinel wherever an address is needed.
    """

    _instance = None
    _tokens = None
    _abis = None

    # ERC20 and wallet ABIs ship with the package
    PACKAGE_ABIS = Path(__file__).parent.parent / "abis.json"

    REFERENCE_ASSET = "0xEeeeeEeeeEeEeeEeEeEeeEEEeeeeEeeeeeeeEEeE"
    REFERENCE_SYMBOL = "ETH"
    REFERENCE_DECIMALS = 18
    ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"
    MAX_UINT256 = 2 ** 256 - 1
    BPS_DENOMINATOR = 10000

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        if Config._abis is None:
            self._load()

    @staticmethod
    def _config_dirs():
        """User config directories, most specific first"""
        env_path = os.getenv("AMM_CONFIG_DIR")
        if env_path:
            yield Path(env_path)
        yield Path.cwd() / "config"
        yield Path(__file__).parent.parent.parent / "config"
        yield Path.home() / ".amm-liquidity" / "config"

    def _load(self):
        # tokens.json is optional: raw addresses always resolve
        Config._tokens = {}
        for config_dir in self._config_dirs():
            if config_dir.exists():
                tokens_path = config_dir / "tokens.json"
                if tokens_path.exists():
                    Config._tokens = {k.upper(): v for k, v in _read_json(tokens_path).items()}
                break

        if not self.PACKAGE_ABIS.exists():
            raise ConfigError(f"Shared ABIs not found: {self.PACKAGE_ABIS}")
        Config._abis = _read_json(self.PACKAGE_ABIS)

    @classmethod
    def reset(cls):
        """Forget loaded files; the next Config() reloads them"""
        cls._instance = None
        cls._tokens = None
        cls._abis = None

    @property
    def common_tokens(self):
        """Configured symbol -> address mapping (symbols upper-cased)"""
        return Config._tokens or {}

    def get_abi(self, name):
        """
        ABI by name: shared ABIs first, then the protocol config owning the
        prefix (e.g. "uniswap_v1_exchange").
        """
        if name in Config._abis:
            return Config._abis[name]

        if name.startswith("uniswap_v1_"):
            from ..protocols.uniswap_v1.config import UniswapV1Config
            return UniswapV1Config().get_abi(name)

        raise ConfigError(f"ABI not found: {name}")

    def is_reference(self, address):
        return isinstance(address, str) and address.lower() == self.REFERENCE_ASSET.lower()

    def get_token_address(self, symbol_or_address):
        """
        Resolve a symbol or address.

        "ETH" maps to REFERENCE_ASSET; configured symbols map to their
        address; a 42-character hex address passes through unchanged.
        """
        symbol = symbol_or_address.upper()
        if symbol == self.REFERENCE_SYMBOL:
            return self.REFERENCE_ASSET
        if symbol in self.common_tokens:
            return self.common_tokens[symbol]
        if symbol_or_address.startswith("0x") and len(symbol_or_address) == 42:
            return symbol_or_address
        raise ConfigError(f"Unknown token: {symbol_or_address}")
