"""EIP-1559 gas parameters for wallet invocations"""

import json
from pathlib import Path

from ..core.exceptions import TransactionError

GWEI = 10**9


class GasPriceTooHighError(TransactionError):
    """Current base fee is above the configured maxFeePerGas"""
    pass


class GasConfig:
    """
    Settings from gas_config.json, or built-in defaults.

    File format:
        {"maxFeePerGas": 40, "maxPriorityFeePerGas": 1.5,
         "gasLimit": {"swap": 180000, "default": 250000}}

    Fees are in Gwei. Limits given in the file replace the defaults per key.
    """

    # invoke() forwarding costs more than calling the pool directly
    DEFAULT_GAS_LIMITS = {
        "approve": 90000,
        "swap": 150000,
        "addLiquidity": 200000,
        "removeLiquidity": 150000,
        "default": 250000,
    }
    DEFAULT_PRIORITY_FEE = 1.5

    def __init__(self, config_path=None):
        data = self._read(config_path)
        self.max_fee_gwei = data.get("maxFeePerGas")
        self.priority_fee_gwei = data.get("maxPriorityFeePerGas", self.DEFAULT_PRIORITY_FEE)
        self.gas_limits = {**self.DEFAULT_GAS_LIMITS, **data.get("gasLimit", {})}

    @staticmethod
    def _read(config_path):
        candidates = [
            config_path,
            Path.cwd() / "gas_config.json",
            Path.home() / ".amm-liquidity" / "gas_config.json",
        ]
        for path in candidates:
            if path and Path(path).exists():
                with open(path) as f:
                    return json.load(f)
        return {}

    def limit_for(self, operation_type):
        return self.gas_limits.get(operation_type or "default", self.gas_limits["default"])


class GasManager:
    """Fee parameters for the owner's transactions, with a max-fee guard"""

    def __init__(self, manager, maxFeePerGas=None, maxPriorityFeePerGas=None, config=None):
        """
        Args:
            manager: Web3Manager instance
            maxFeePerGas: Max fee per gas in Gwei (overrides gas_config.json)
            maxPriorityFeePerGas: Priority fee in Gwei (overrides gas_config.json)
            config: GasConfig instance (loaded if None)
        """
        self.manager = manager
        self.config = config or GasConfig()
        self.max_fee_gwei = maxFeePerGas if maxFeePerGas is not None else self.config.max_fee_gwei
        self.priority_fee_gwei = (
            maxPriorityFeePerGas if maxPriorityFeePerGas is not None else self.config.priority_fee_gwei
        )

    def base_fee(self):
        """Base fee of the latest block in wei"""
        return self.manager.w3.eth.get_block("latest").get("baseFeePerGas", 0)

    def fee_params(self):
        """
        maxFeePerGas / maxPriorityFeePerGas in wei.

        Without a configured cap the max fee is 1.2x (base fee + tip).

        Raises:
            GasPriceTooHighError: If the base fee is above the configured cap
        """
        base_fee = self.base_fee()
        priority_fee = int(self.priority_fee_gwei * GWEI)

        if self.max_fee_gwei is None:
            max_fee = int((base_fee + priority_fee) * 1.2)
        else:
            max_fee = int(self.max_fee_gwei * GWEI)
            if max_fee < base_fee:
                raise GasPriceTooHighError(
                    f"Base fee {base_fee / GWEI:.2f} Gwei exceeds maxFeePerGas "
                    f"{self.max_fee_gwei} Gwei")

        return {"maxFeePerGas": max_fee, "maxPriorityFeePerGas": priority_fee}

    def estimate(self, contract_func, sender, operation_type=None):
        """Gas estimate for the call, or the configured limit if estimation fails"""
        try:
            return contract_func.estimate_gas({"from": sender})
        except Exception:
            # A reverting call is reported by the send itself
            return self.config.limit_for(operation_type)
