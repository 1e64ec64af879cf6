"""Uniswap V1 specific configuration"""

import os
import json
from pathlib import Path

from ...core.config import Config
from ...core.exceptions import ConfigError


# Chain ID to network name mapping
CHAIN_NAMES = {
    1: "mainnet",
    11155111: "sepolia",
}


class UniswapV1Config:
    """Configuration manager for Uniswap V1 protocol"""

    _instance = None
    _addresses = None
    _abis = None

    # Package files (not user-configurable)
    ADDRESSES_FILE = Path(__file__).parent / "addresses.json"
    ABIS_FILE = Path(__file__).parent / "abis.json"

    # Seconds added to the current time for every pool call deadline
    DEFAULT_DEADLINE_SECONDS = 60

    # Minimum output accepted by swaps, deposits and withdrawals
    MIN_OUTPUT = 1

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        if UniswapV1Config._addresses is None:
            self._load()
        self._shared_config = Config()

    def _load(self):
        """Load V1-specific configuration files"""
        if not self.ADDRESSES_FILE.exists():
            raise ConfigError(f"V1 addresses not found: {self.ADDRESSES_FILE}")
        with open(self.ADDRESSES_FILE) as f:
            UniswapV1Config._addresses = json.load(f)

        if not self.ABIS_FILE.exists():
            raise ConfigError(f"V1 ABIs not found: {self.ABIS_FILE}")
        with open(self.ABIS_FILE) as f:
            UniswapV1Config._abis = json.load(f)

    @classmethod
    def reset(cls):
        """Drop cached configuration so the next access reloads it"""
        cls._instance = None
        cls._addresses = None
        cls._abis = None

    def factory_address(self, chain_id):
        """
        Registry (factory) address for chain.

        UNISWAP_V1_FACTORY overrides the packaged address book.
        """
        override = os.getenv("UNISWAP_V1_FACTORY")
        if override:
            return override

        network = CHAIN_NAMES.get(chain_id)
        factory = UniswapV1Config._addresses.get(network, {}).get("factory") if network else None
        if not factory:
            raise ConfigError(
                f"Uniswap V1 factory not configured for chain {chain_id}. Set UNISWAP_V1_FACTORY.")
        return factory

    @property
    def deadline_seconds(self):
        """Deadline offset for pool calls (DEADLINE_SECONDS env override)"""
        raw = os.getenv("DEADLINE_SECONDS")
        if not raw:
            return self.DEFAULT_DEADLINE_SECONDS
        try:
            value = int(raw)
        except ValueError:
            raise ConfigError(f"Invalid DEADLINE_SECONDS: {raw}")
        if value <= 0:
            raise ConfigError(f"DEADLINE_SECONDS must be positive, got {value}")
        return value

    def get_abi(self, name):
        """Get V1-specific ABI by name"""
        if name in UniswapV1Config._abis:
            return UniswapV1Config._abis[name]
        raise ConfigError(f"V1 ABI not found: {name}")

    def get_token_address(self, symbol_or_address):
        """Resolve token symbol to address (delegates to shared config)"""
        return self._shared_config.get_token_address(symbol_or_address)
