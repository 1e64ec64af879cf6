"""Transaction utilities with EIP-1559 support"""

import structlog

from .gas import GasManager
from ..core.exceptions import TransactionError

logger = structlog.get_logger()


class TransactionBuilder:
    """Build, sign and send EIP-1559 transactions from the owner account"""

    def __init__(self, manager, gas_manager=None):
        """
        Args:
            manager: Web3Manager instance (must have signer to send)
            gas_manager: GasManager instance (created if None, loads from gas_config.json)
        """
        self.manager = manager
        self.gas_manager = gas_manager or GasManager(manager)

    def build(self, contract_func, operation_type=None, gas_buffer=1.2):
        """
        Build an EIP-1559 transaction for a contract function.

        Raises:
            GasPriceTooHighError: If base fee exceeds maxFeePerGas
        """
        estimated_gas = self.gas_manager.estimate(contract_func, self.manager.address, operation_type)

        tx = {
            "from": self.manager.address,
            "nonce": self.manager.get_nonce(),
            "gas": int(estimated_gas * gas_buffer),
            "chainId": self.manager.chain_id,
            "type": 2,  # EIP-1559
            **self.gas_manager.fee_params(),
        }
        return contract_func.build_transaction(tx)

    def build_and_send(self, contract_func, operation_type=None, gas_buffer=1.2):
        """
        Build, sign, send and wait for a transaction.

        Returns:
            Transaction receipt

        Raises:
            TransactionError: If sending fails or the receipt reports a revert
        """
        if self.manager.account is None:
            raise TransactionError("Cannot send transactions without a signer (PRIVATE_KEY)")

        try:
            tx = self.build(contract_func, operation_type, gas_buffer)
            signed = self.manager.account.sign_transaction(tx)
            tx_hash = self.manager.w3.eth.send_raw_transaction(signed.raw_transaction)
            receipt = self.manager.w3.eth.wait_for_transaction_receipt(tx_hash)
        except TransactionError:
            raise
        except Exception as e:
            raise TransactionError(f"{operation_type or 'transaction'} failed to send: {e}") from e

        if receipt.status != 1:
            raise TransactionError(
                f"{operation_type or 'transaction'} reverted: {receipt.transactionHash.hex()}")

        logger.debug(
            "transaction_mined",
            operation=operation_type,
            tx_hash=receipt.transactionHash.hex(),
            gas_used=receipt.gasUsed,
        )
        return receipt
