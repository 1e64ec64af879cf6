"""Custody wallet contract wrapper"""

import structlog

from ..utils.gas import GasManager
from ..utils.transactions import TransactionBuilder

logger = structlog.get_logger()


class SmartWallet:
    """
    Wrapper for a custody wallet that forwards calls.

    The wallet owns the funds; the owner account signs a transaction to
    wallet.invoke(target, value, data) and the wallet executes the inner
    call as itself, sending value wei from its own balance.
    """

    def __init__(self, manager, address=None, maxFeePerGas=None, maxPriorityFeePerGas=None):
        """
        Args:
            manager: Web3Manager instance (with signer to send)
            address: Wallet contract address (WALLET_ADDRESS if None)
            maxFeePerGas: Maximum fee per gas in Gwei (None = use config/no limit)
            maxPriorityFeePerGas: Priority fee in Gwei (None = use config)
        """
        self.manager = manager
        self.address = manager.checksum(address) if address else manager.wallet_address
        self.contract = manager.get_contract(self.address, "wallet")

        self.gas_manager = GasManager(manager, maxFeePerGas=maxFeePerGas, maxPriorityFeePerGas=maxPriorityFeePerGas)
        self.tx_builder = TransactionBuilder(manager, self.gas_manager)

    def balance(self):
        """Native (reference asset) balance held by the wallet, in wei"""
        return self.manager.get_balance_wei(self.address)

    def invoke(self, target, value, data, operation_type=None):
        """
        Execute a call as the wallet.

        Args:
            target: Contract to call
            value: Wei sent with the call from the wallet's balance
            data: ABI-encoded calldata
            operation_type: Label for gas limits and logs

        Returns:
            Transaction receipt

        Raises:
            TransactionError: If the call fails
        """
        logger.info(
            "wallet_invoke",
            wallet=self.address,
            target=target,
            value=value,
            operation=operation_type,
        )
        contract_func = self.contract.functions.invoke(
            self.manager.checksum(target), value, data
        )
        return self.tx_builder.build_and_send(contract_func, operation_type=operation_type)
