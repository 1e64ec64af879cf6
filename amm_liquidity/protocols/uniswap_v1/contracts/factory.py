"""Uniswap V1 Factory (pool registry) contract wrapper"""

from ....core.config import Config


class ExchangeFactory:
    """Maps a token to its exchange address"""

    def __init__(self, manager, address):
        """
        Args:
            manager: Web3Manager instance
            address: Factory contract address
        """
        self.manager = manager
        self.address = manager.checksum(address)
        self.contract = manager.get_contract(self.address, "uniswap_v1_factory")

    def get_pool_address(self, token):
        """Exchange address for token, or None if no pool exists"""
        exchange = self.contract.functions.getExchange(self.manager.checksum(token)).call()
        if not exchange or exchange == Config.ZERO_ADDRESS:
            return None
        return exchange
