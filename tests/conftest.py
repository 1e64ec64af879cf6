"""Pytest configuration and fixtures.

The liquidity manager talks to four collaborators: the custody wallet, the
token, the pool and the registry. The fakes below stand in for them and
record every wallet call so tests can assert on exact ordering and values.
"""

from types import SimpleNamespace

import pytest
import structlog
from web3 import Web3

from amm_liquidity.core.exceptions import TransactionError
from amm_liquidity.protocols.uniswap_v1 import LiquidityManager, Reserves

TOKEN = Web3.to_checksum_address("0x" + "11" * 20)
POOL = Web3.to_checksum_address("0x" + "22" * 20)
WALLET = Web3.to_checksum_address("0x" + "33" * 20)
OTHER_TOKEN = Web3.to_checksum_address("0x" + "44" * 20)

NOW = 1_700_000_000


def receipt(n):
    return SimpleNamespace(transactionHash=bytes([n]) * 32, status=1)


class FakeToken:
    """ERC20 stand-in: balances dict, calldata as tuples"""

    def __init__(self, address=TOKEN, symbol="DAI", decimals=18):
        self.address = address
        self.symbol = symbol
        self.decimals = decimals
        self.balances = {}

    def balance_of(self, address):
        return self.balances.get(address, 0)

    def from_wei(self, amount):
        return amount / (10 ** self.decimals)

    def approve_data(self, spender, amount):
        return ("approve", spender, amount)


class FakeExchange:
    """Pool stand-in with fixed reserves and share balances"""

    def __init__(self, address=POOL, reserves=None, token=None):
        self.address = address
        self.token = token
        self._reserves = reserves or Reserves(reference=100000, token=50000)
        self.shares = {}
        self.supply = 0

    def reserves(self):
        return self._reserves

    def share_balance(self, owner):
        return self.shares.get(owner, 0)

    def total_supply(self):
        return self.supply

    def eth_to_token_swap_data(self, min_tokens, deadline):
        return ("ethToTokenSwapInput", min_tokens, deadline)

    def token_to_eth_swap_data(self, tokens_sold, min_eth, deadline):
        return ("tokenToEthSwapInput", tokens_sold, min_eth, deadline)

    def add_liquidity_data(self, min_liquidity, max_tokens, deadline):
        return ("addLiquidity", min_liquidity, max_tokens, deadline)

    def remove_liquidity_data(self, amount, min_eth, min_tokens, deadline):
        return ("removeLiquidity", amount, min_eth, min_tokens, deadline)


class FakeRegistry:
    def __init__(self, pools=None):
        self.pools = pools if pools is not None else {TOKEN: POOL}

    def get_pool_address(self, token):
        return self.pools.get(token)


class FakeWallet:
    """
    Call-forwarding wallet that records invocations.

    Swaps move balances by the next entry of swap_outputs so callers that
    measure before/after see a realistic amount received. Operations listed
    in fail_ops raise TransactionError after being recorded.
    """

    def __init__(self, token, address=WALLET, balance=10**6):
        self.address = address
        self.token = token
        self.eth = balance
        self.calls = []
        self.swap_outputs = []
        self.fail_ops = set()

    def balance(self):
        return self.eth

    def invoke(self, target, value, data, operation_type=None):
        self.calls.append(SimpleNamespace(target=target, value=value, data=data, op=operation_type))
        if operation_type in self.fail_ops:
            raise TransactionError(f"{operation_type} reverted")

        kind = data[0]
        if kind == "ethToTokenSwapInput":
            self.eth -= value
            self.token.balances[self.address] = (
                self.token.balance_of(self.address) + self._next_output())
        elif kind == "tokenToEthSwapInput":
            self.token.balances[self.address] = self.token.balance_of(self.address) - data[1]
            self.eth += self._next_output()
        elif kind == "addLiquidity":
            self.eth -= value
            self.token.balances[self.address] = self.token.balance_of(self.address) - data[2]
        return receipt(len(self.calls))

    def _next_output(self):
        return self.swap_outputs.pop(0) if self.swap_outputs else 0

    @property
    def ops(self):
        return [c.op for c in self.calls]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Deadline and factory overrides must not leak in from the shell."""
    monkeypatch.delenv("DEADLINE_SECONDS", raising=False)
    monkeypatch.delenv("UNISWAP_V1_FACTORY", raising=False)
    yield
    structlog.reset_defaults()


@pytest.fixture
def token():
    t = FakeToken()
    t.balances[WALLET] = 10**6
    return t


@pytest.fixture
def pool(token):
    return FakeExchange(token=token)


@pytest.fixture
def wallet(token):
    return FakeWallet(token)


@pytest.fixture
def registry():
    return FakeRegistry()


@pytest.fixture
def manager(wallet, registry, token, pool):
    """LiquidityManager wired to fakes with a frozen clock."""
    return LiquidityManager(
        wallet=wallet,
        registry=registry,
        token_factory=lambda address: token,
        pool_factory=lambda address, token_contract: pool,
        clock=lambda: NOW,
    )
