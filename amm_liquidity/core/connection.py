"""Web3 connection management"""

import os
from web3 import Web3
from dotenv import load_dotenv
from .config import Config
from .exceptions import ConnectionError, ConfigError


def _require_env(name, source):
    value = os.getenv(name)
    if not value:
        raise ConfigError(f"{name} not found in {source}")
    return value


class Web3Manager:
    """
    RPC connection plus the two accounts every operation involves.

    The owner account (PRIVATE_KEY) signs and pays gas. The custody wallet
    (WALLET_ADDRESS) holds the funds and executes pool calls via invoke.
    """

    def __init__(self, require_signer=False, rpc_url=None):
        """
        Args:
            require_signer: Load the owner's private key so transactions can be sent
            rpc_url: Node endpoint (RPC_URL from .env if None)
        """
        load_dotenv()
        load_dotenv("wallet.env")

        self.config = Config()
        self.rpc_url = rpc_url or _require_env("RPC_URL", "environment")
        self.w3 = Web3(Web3.HTTPProvider(self.rpc_url))
        if not self.w3.is_connected():
            raise ConnectionError(f"Failed to connect to {self.rpc_url}")

        self.account = None
        if require_signer:
            self.account = self.w3.eth.account.from_key(_require_env("PRIVATE_KEY", "wallet.env"))

    @property
    def address(self):
        """Owner address: the signer, else PUBLIC_KEY for read-only use"""
        if self.account is not None:
            return self.account.address
        return os.getenv("PUBLIC_KEY") or None

    @property
    def wallet_address(self):
        """Custody wallet holding the funds"""
        return self.checksum(_require_env("WALLET_ADDRESS", "wallet.env"))

    @property
    def chain_id(self):
        return self.w3.eth.chain_id

    def get_balance_wei(self, address):
        """Native balance of address in wei"""
        return self.w3.eth.get_balance(self.checksum(address))

    def get_nonce(self):
        """Next nonce of the owner account"""
        if not self.address:
            raise ConfigError("No owner address: set PRIVATE_KEY or PUBLIC_KEY")
        return self.w3.eth.get_transaction_count(self.checksum(self.address))

    def get_contract(self, address, abi_name):
        """Contract instance for a packaged ABI"""
        return self.w3.eth.contract(address=self.checksum(address), abi=self.config.get_abi(abi_name))

    @staticmethod
    def checksum(address):
        return Web3.to_checksum_address(address)
