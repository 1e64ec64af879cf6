"""Liquidity management operations for Uniswap V1 pools"""

import time
from dataclasses import asdict

import structlog
from web3 import Web3

from ....core.config import Config
from ....core.connection import Web3Manager
from ....core.exceptions import (
    InsufficientBalanceError,
    InvalidInputError,
    PoolNotFoundError,
)
from ....contracts.erc20 import ERC20
from ....contracts.wallet import SmartWallet
from ....utils.safe_int import S
from ....utils.saga import TransactionSaga
from ..config import UniswapV1Config
from ..contracts.exchange import Exchange
from ..contracts.factory import ExchangeFactory
from ..math import (
    get_input_price,
    plan_deposit,
    share_of_reserves,
    withdrawal_amount,
)

logger = structlog.get_logger()


class LiquidityManager:
    """
    Provide liquidity to ETH/token constant-product pools from a custody wallet.

    Every mutating call is forwarded through the wallet's invoke. Reserves
    and balances are read once per operation, at the start of planning.
    """

    def __init__(
        self,
        manager=None,
        wallet=None,
        registry=None,
        config=None,
        token_factory=None,
        pool_factory=None,
        clock=None,
    ):
        """
        Args:
            manager: Web3Manager instance (created with signer if needed)
            wallet: Call-forwarding wallet (SmartWallet on WALLET_ADDRESS if None)
            registry: Pool registry with get_pool_address(token)
            config: UniswapV1Config instance
            token_factory: Callable address -> token wrapper (ERC20 if None)
            pool_factory: Callable (address, token) -> pool wrapper (Exchange if None)
            clock: Callable returning the current unix time, for deadlines
        """
        needs_chain = None in (wallet, registry, token_factory, pool_factory)
        self.manager = manager or (Web3Manager(require_signer=True) if needs_chain else None)
        self.config = config or UniswapV1Config()
        self.shared_config = Config()

        self.wallet = wallet or SmartWallet(self.manager)
        self.registry = registry or ExchangeFactory(
            self.manager, self.config.factory_address(self.manager.chain_id))
        self._token_factory = token_factory or (lambda address: ERC20(self.manager, address))
        self._pool_factory = pool_factory or (
            lambda address, token: Exchange(self.manager, address, token))
        self._clock = clock or time.time

    # --- Resolution helpers ---

    def _resolve(self, symbol_or_address):
        address = self.config.get_token_address(symbol_or_address)
        if self.shared_config.is_reference(address):
            return self.shared_config.REFERENCE_ASSET
        try:
            return Web3.to_checksum_address(address)
        except (ValueError, TypeError) as e:
            raise InvalidInputError(f"Invalid token address {symbol_or_address}: {e}") from e

    def _split_pair(self, token_a, token_b):
        """
        Order a pair as (token, reference_first) where reference_first tells
        whether token_a was the reference asset.

        Raises:
            InvalidInputError: Unless exactly one asset is the reference asset
        """
        addr_a = self._resolve(token_a)
        addr_b = self._resolve(token_b)
        a_is_ref = self.shared_config.is_reference(addr_a)
        b_is_ref = self.shared_config.is_reference(addr_b)

        if a_is_ref == b_is_ref:
            raise InvalidInputError(
                f"Exactly one of {token_a}/{token_b} must be {self.shared_config.REFERENCE_SYMBOL}")

        if a_is_ref:
            return addr_b, True
        return addr_a, False

    @staticmethod
    def _validate_amount(name, amount):
        if isinstance(amount, bool) or not isinstance(amount, int):
            raise InvalidInputError(f"{name} must be an integer amount in wei, got {amount!r}")
        if amount < 0:
            raise InvalidInputError(f"{name} must not be negative, got {amount}")
        if amount > Config.MAX_UINT256:
            raise InvalidInputError(f"{name} exceeds uint256")

    def _get_pool(self, token, token_contract=None):
        """Token wrapper and pool wrapper for token, or PoolNotFoundError"""
        pool_address = self.registry.get_pool_address(token)
        if not pool_address:
            raise PoolNotFoundError(f"No pool registered for token {token}")
        token_contract = token_contract or self._token_factory(token)
        return token_contract, self._pool_factory(pool_address, token_contract)

    def _offer(self, token_a, token_b, amount_a, amount_b):
        """Validate a deposit request; returns (token, reference_amount, token_amount)"""
        self._validate_amount("amount_a", amount_a)
        self._validate_amount("amount_b", amount_b)
        token, reference_first = self._split_pair(token_a, token_b)
        if reference_first:
            return token, amount_a, amount_b
        return token, amount_b, amount_a

    def _plan(self, pool, reference_amount, token_amount, prevent_swap):
        reserves = pool.reserves()
        plan = plan_deposit(reserves, reference_amount, token_amount, prevent_swap)
        logger.info(
            "deposit_planned",
            pool=pool.address,
            reserve_reference=reserves.reference,
            reserve_token=reserves.token,
            **asdict(plan),
        )
        return reserves, plan

    def _deadline(self):
        return int(self._clock()) + self.config.deadline_seconds

    # --- Queries ---

    def plan_deposit(self, token_a, token_b, amount_a, amount_b, prevent_swap=False):
        """
        Plan a deposit against current reserves without executing it.

        Args:
            token_a: First asset symbol or address
            token_b: Second asset symbol or address
            amount_a: Amount of token_a in wei
            amount_b: Amount of token_b in wei
            prevent_swap: Trim to the pool ratio instead of swapping

        Returns:
            Dict with the pool, reserves snapshot and DepositPlan
        """
        token, reference_amount, token_amount = self._offer(token_a, token_b, amount_a, amount_b)
        _, pool = self._get_pool(token)
        reserves, plan = self._plan(pool, reference_amount, token_amount, prevent_swap)

        return {
            "pool": pool.address,
            "token": token,
            "reserves": asdict(reserves),
            "offered": {"reference": reference_amount, "token": token_amount},
            "plan": asdict(plan),
            "token_allowance": plan.token_allowance,
        }

    def get_position(self, token):
        """
        Pool shares held by the wallet and their underlying amounts.

        Args:
            token: Token symbol or address (the non-reference side)

        Returns:
            Dict with shares, total supply, share of pool in bps and
            redeemable reference/token amounts
        """
        token_addr = self._resolve(token)
        if self.shared_config.is_reference(token_addr):
            raise InvalidInputError("Position lookup needs the pool's token, not the reference asset")

        _, pool = self._get_pool(token_addr)
        shares = pool.share_balance(self.wallet.address)
        total_supply = pool.total_supply()
        reserves = pool.reserves()
        reference_value, token_value = share_of_reserves(shares, total_supply, reserves)

        return {
            "wallet": self.wallet.address,
            "token": token_addr,
            "pool": pool.address,
            "shares": shares,
            "total_supply": total_supply,
            "share_bps": (S(shares) * Config.BPS_DENOMINATOR // total_supply).value if total_supply else 0,
            "reference_amount": reference_value,
            "token_amount": token_value,
        }

    def quote(self, token, amount_in, input_is_reference=True):
        """
        Expected swap output against current reserves.

        Args:
            token: Pool token symbol or address
            amount_in: Input amount in wei
            input_is_reference: True to sell the reference asset for token

        Returns:
            Dict with input, output and the reserves used
        """
        self._validate_amount("amount_in", amount_in)
        token_addr = self._resolve(token)
        _, pool = self._get_pool(token_addr)
        reserves = pool.reserves()

        if input_is_reference:
            amount_out = get_input_price(amount_in, reserves.reference, reserves.token)
        else:
            amount_out = get_input_price(amount_in, reserves.token, reserves.reference)

        return {
            "pool": pool.address,
            "input_is_reference": input_is_reference,
            "amount_in": amount_in,
            "amount_out": amount_out,
            "reserves": asdict(reserves),
        }

    # --- Wallet calls ---

    def _approve(self, token_contract, spender, amount):
        return self.wallet.invoke(
            token_contract.address, 0, token_contract.approve_data(spender, amount), "approve")

    def _swap_reference_for_token(self, token_contract, pool, amount, deadline):
        """Swap reference asset for token; returns receipt and tokens received"""
        before = token_contract.balance_of(self.wallet.address)
        receipt = self.wallet.invoke(
            pool.address, amount, pool.eth_to_token_swap_data(self.config.MIN_OUTPUT, deadline), "swap")
        after = token_contract.balance_of(self.wallet.address)
        return {"receipt": receipt, "received": max(after - before, 0)}

    def _swap_token_for_reference(self, token_contract, pool, amount, deadline):
        """Swap token for reference asset; returns receipt and wei received"""
        before = self.wallet.balance()
        receipt = self.wallet.invoke(
            pool.address, 0,
            pool.token_to_eth_swap_data(amount, self.config.MIN_OUTPUT, deadline), "swap")
        after = self.wallet.balance()
        return {"receipt": receipt, "received": max(after - before, 0)}

    def _undo_reference_swap(self, token_contract, pool, result):
        """Sell back tokens bought with the reference asset"""
        if result["received"] == 0:
            return
        self._approve(token_contract, pool.address, result["received"])
        self._swap_token_for_reference(token_contract, pool, result["received"], self._deadline())

    def _undo_token_swap(self, token_contract, pool, result):
        """Buy back tokens sold for the reference asset"""
        if result["received"] == 0:
            return
        self._swap_reference_for_token(token_contract, pool, result["received"], self._deadline())

    # --- Operations ---

    def add_liquidity(self, token_a, token_b, amount_a, amount_b, prevent_swap=False):
        """
        Deposit an arbitrary pair of amounts into the pool.

        The asset in excess at the pool ratio is partly swapped for the other
        (or trimmed, with prevent_swap) so that the deposit matches the
        ratio and never uses more than was offered.

        Args:
            token_a: First asset symbol or address
            token_b: Second asset symbol or address
            amount_a: Amount of token_a in wei
            amount_b: Amount of token_b in wei
            prevent_swap: Trim to the pool ratio instead of swapping

        Returns:
            Dict with plan, reserves snapshot, amounts deposited and receipts

        Raises:
            InvalidInputError: Bad pair or amounts, or nothing left to deposit
            InsufficientBalanceError: Wallet holds less than offered
            PoolNotFoundError: No pool for the token
            DegeneratePoolError, InsufficientLiquidityError: Empty or drained pool
            TransactionError: A wallet call failed (completed steps compensated)
        """
        token, reference_amount, token_amount = self._offer(token_a, token_b, amount_a, amount_b)

        token_contract = self._token_factory(token)
        reference_balance = self.wallet.balance()
        if reference_balance < reference_amount:
            raise InsufficientBalanceError(
                f"Insufficient {self.shared_config.REFERENCE_SYMBOL} balance. "
                f"Have: {reference_balance}, Need: {reference_amount}")
        token_balance = token_contract.balance_of(self.wallet.address)
        if token_balance < token_amount:
            raise InsufficientBalanceError(
                f"Insufficient balance of {token}. Have: {token_balance}, Need: {token_amount}")

        _, pool = self._get_pool(token, token_contract)
        reserves, plan = self._plan(pool, reference_amount, token_amount, prevent_swap)

        # One wei of the reference asset is held back from the deposit
        if plan.reference_amount < 2:
            raise InvalidInputError(
                f"Deposit too small: {plan.reference_amount} wei of "
                f"{self.shared_config.REFERENCE_SYMBOL} after planning")
        deposit_value = plan.reference_amount - 1
        deadline = self._deadline()

        saga = TransactionSaga("add_liquidity")
        approve_step = (
            "approve",
            lambda: self._approve(token_contract, pool.address, plan.token_allowance),
            lambda _: self._approve(token_contract, pool.address, 0),
        )

        if plan.major_is_reference:
            if plan.swap_amount > 0:
                saga.add_step(
                    "swap",
                    lambda: self._swap_reference_for_token(
                        token_contract, pool, plan.swap_amount, deadline),
                    lambda result: self._undo_reference_swap(token_contract, pool, result),
                )
            saga.add_step(*approve_step)
        else:
            saga.add_step(*approve_step)
            if plan.swap_amount > 0:
                saga.add_step(
                    "swap",
                    lambda: self._swap_token_for_reference(
                        token_contract, pool, plan.swap_amount, deadline),
                    lambda result: self._undo_token_swap(token_contract, pool, result),
                )

        saga.add_step(
            "deposit",
            lambda: self.wallet.invoke(
                pool.address,
                deposit_value,
                pool.add_liquidity_data(self.config.MIN_OUTPUT, plan.token_amount, deadline),
                "addLiquidity",
            ),
        )

        receipts = saga.run()
        logger.info(
            "liquidity_added",
            pool=pool.address,
            reference=deposit_value,
            token=plan.token_amount,
            swapped=plan.swap_amount,
        )

        return {
            "pool": pool.address,
            "token": token,
            "reserves": asdict(reserves),
            "offered": {"reference": reference_amount, "token": token_amount},
            "plan": asdict(plan),
            "deposited": {"reference": deposit_value, "token": plan.token_amount},
            "deadline": deadline,
            "receipts": receipts,
        }

    def remove_liquidity(self, token_a, token_b, fraction_bps):
        """
        Withdraw a fraction of the wallet's pool shares.

        Args:
            token_a: First asset symbol or address
            token_b: Second asset symbol or address
            fraction_bps: Fraction of shares to burn, in basis points (0-10000)

        Returns:
            Dict with shares held, shares burned and the receipt

        Raises:
            InvalidFractionError: fraction_bps outside [0, 10000]
            InvalidInputError: Bad pair, or a zero withdrawal: 0 bps is refused
                deliberately, as is any fraction rounding to zero shares
            PoolNotFoundError: No pool for the token
            TransactionError: The withdrawal call failed
        """
        token, _ = self._split_pair(token_a, token_b)
        _, pool = self._get_pool(token)

        shares = pool.share_balance(self.wallet.address)
        amount = withdrawal_amount(shares, fraction_bps)
        if amount == 0:
            raise InvalidInputError(
                f"Cannot remove 0 liquidity ({fraction_bps} bps of {shares} shares)")

        deadline = self._deadline()
        receipt = self.wallet.invoke(
            pool.address,
            0,
            pool.remove_liquidity_data(
                amount, self.config.MIN_OUTPUT, self.config.MIN_OUTPUT, deadline),
            "removeLiquidity",
        )
        logger.info("liquidity_removed", pool=pool.address, shares=amount, fraction_bps=fraction_bps)

        return {
            "pool": pool.address,
            "token": token,
            "shares_held": shares,
            "shares_removed": amount,
            "fraction_bps": fraction_bps,
            "deadline": deadline,
            "receipt": receipt,
        }

    # --- Yield strategy interface ---

    @staticmethod
    def _check_pair_lengths(tokens, values, name):
        if len(tokens) != 2:
            raise InvalidInputError(f"Expected 2 tokens, got {len(tokens)}")
        if values is not None and len(values) != len(tokens):
            raise InvalidInputError(
                f"Mismatched lengths: {len(tokens)} tokens, {len(values)} {name}")

    def open_position(self, tokens, amounts, prevent_swap=False):
        """YieldStrategy entry point for add_liquidity"""
        self._check_pair_lengths(tokens, amounts, "amounts")
        return self.add_liquidity(tokens[0], tokens[1], amounts[0], amounts[1], prevent_swap)

    def close_position(self, tokens, fraction_bps):
        """YieldStrategy entry point for remove_liquidity"""
        self._check_pair_lengths(tokens, None, "amounts")
        return self.remove_liquidity(tokens[0], tokens[1], fraction_bps)
