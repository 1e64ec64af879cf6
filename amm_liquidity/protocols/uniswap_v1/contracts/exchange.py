"""Uniswap V1 Exchange (pool) contract wrapper"""

from ..math import Reserves


class Exchange:
    """
    Wrapper for a Uniswap V1 exchange: one ETH/token constant-product pool.

    Reads come straight from the chain on every call; nothing is cached so
    each operation snapshots the reserves it plans against. Mutating calls
    are only encoded here and executed by the custody wallet.
    """

    def __init__(self, manager, address, token):
        """
        Args:
            manager: Web3Manager instance
            address: Exchange contract address
            token: ERC20 wrapper for the exchange's token
        """
        self.manager = manager
        self.address = manager.checksum(address)
        self.contract = manager.get_contract(self.address, "uniswap_v1_exchange")
        self.token = token

    def reserves(self):
        """Current (ETH, token) holdings of the pool"""
        return Reserves(
            reference=self.manager.get_balance_wei(self.address),
            token=self.token.balance_of(self.address),
        )

    def share_balance(self, owner):
        """Pool shares held by owner"""
        return self.contract.functions.balanceOf(self.manager.checksum(owner)).call()

    def total_supply(self):
        """Total pool shares issued"""
        return self.contract.functions.totalSupply().call()

    def eth_to_token_swap_data(self, min_tokens, deadline):
        """Calldata for ethToTokenSwapInput (ETH sent as call value)"""
        return self.contract.encode_abi("ethToTokenSwapInput", args=[min_tokens, deadline])

    def token_to_eth_swap_data(self, tokens_sold, min_eth, deadline):
        """Calldata for tokenToEthSwapInput"""
        return self.contract.encode_abi(
            "tokenToEthSwapInput", args=[tokens_sold, min_eth, deadline])

    def add_liquidity_data(self, min_liquidity, max_tokens, deadline):
        """Calldata for addLiquidity (ETH sent as call value)"""
        return self.contract.encode_abi(
            "addLiquidity", args=[min_liquidity, max_tokens, deadline])

    def remove_liquidity_data(self, amount, min_eth, min_tokens, deadline):
        """Calldata for removeLiquidity"""
        return self.contract.encode_abi(
            "removeLiquidity", args=[amount, min_eth, min_tokens, deadline])
