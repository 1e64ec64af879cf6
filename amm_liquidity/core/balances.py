"""Token balance query operations"""

from .config import Config
from ..contracts.erc20 import ERC20


class BalanceQuery:
    """Query reference-asset and token balances held by an address"""

    def __init__(self, manager, token_factory=None):
        """
        Args:
            manager: Web3Manager instance
            token_factory: Callable address -> ERC20-like wrapper (ERC20 if None)
        """
        self.manager = manager
        self.config = Config()
        self._token_factory = token_factory or (lambda address: ERC20(self.manager, address))

    def get_reference_balance(self, address):
        """Native (ETH) balance for address"""
        balance_wei = self.manager.get_balance_wei(address)
        return {
            "symbol": self.config.REFERENCE_SYMBOL,
            "address": self.config.REFERENCE_ASSET,
            "balance": balance_wei / 10 ** self.config.REFERENCE_DECIMALS,
            "balance_wei": str(balance_wei),
            "decimals": self.config.REFERENCE_DECIMALS,
        }

    def get_token_balance(self, token_address, address):
        """ERC20 token balance for address"""
        token = self._token_factory(token_address)
        balance_wei = token.balance_of(address)
        return {
            "symbol": token.symbol,
            "address": token.address,
            "balance": token.from_wei(balance_wei),
            "balance_wei": str(balance_wei),
            "decimals": token.decimals,
        }

    def get_all_balances(self, address):
        """
        Reference asset plus every configured token.

        Args:
            address: Address to query (normally the custody wallet)

        Returns:
            Dict with address and list of balances; a token whose read fails
            is listed with its error instead of aborting the whole query
        """
        balances = [self.get_reference_balance(address)]

        for symbol, token_address in self.config.common_tokens.items():
            try:
                balances.append(self.get_token_balance(token_address, address))
            except Exception as e:
                balances.append({
                    "symbol": symbol,
                    "address": token_address,
                    "error": str(e),
                })

        return {
            "address": address,
            "balances": balances,
        }
