"""Main CLI entry point"""

import sys
import json
import logging
import argparse
from dataclasses import asdict
from decimal import Decimal, InvalidOperation
from pathlib import Path

import structlog

from ..core.balances import BalanceQuery
from ..core.config import Config
from ..core.connection import Web3Manager
from ..core.exceptions import AMMError, InvalidInputError
from ..contracts.erc20 import ERC20
from ..protocols.uniswap_v1 import LiquidityManager, Reserves, plan_deposit


def get_results_dir():
    """Get results directory, create if needed"""
    results_dir = Path.cwd() / "results"
    results_dir.mkdir(exist_ok=True)
    return results_dir


def save_result(filename, data):
    """Save result to JSON file in results directory"""
    filepath = get_results_dir() / filename
    with open(filepath, "w") as f:
        json.dump(data, f, indent=2, default=str)
    return filepath


def configure_logging(verbose=False):
    """Structured logs on stderr; stdout stays for results"""
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.DEBUG if verbose else logging.INFO),
        logger_factory=structlog.PrintLoggerFactory(sys.stderr),
    )


def to_wei(manager, token, amount):
    """Convert a human amount string to wei using the asset's decimals"""
    try:
        value = Decimal(amount)
    except InvalidOperation:
        raise InvalidInputError(f"Invalid amount: {amount}")
    if not value.is_finite():
        raise InvalidInputError(f"Amount must be a finite number: {amount}")
    if value < 0:
        raise InvalidInputError(f"Amount must not be negative: {amount}")

    config = Config()
    address = config.get_token_address(token)
    if config.is_reference(address):
        return int(value * (10 ** config.REFERENCE_DECIMALS))
    return ERC20(manager, address).to_wei(value)


def tx_hash(receipt):
    return receipt.transactionHash.hex()


def cmd_query_balances(args):
    """Query ETH and token balances of the custody wallet"""
    manager = Web3Manager(require_signer=False)
    address = args.address or manager.wallet_address
    result = BalanceQuery(manager).get_all_balances(address)

    print(f"Balances for {result['address']}")
    print("-" * 60)
    for bal in result["balances"]:
        if "error" in bal:
            print(f"  {bal['symbol']}: ERROR - {bal['error']}")
        else:
            print(f"  {bal['symbol']}: {bal['balance']:.6f}")
    print("-" * 60)

    filepath = save_result(f"balances_{result['address'][:10]}.json", result)
    print(f"\nSaved to {filepath}", file=sys.stderr)


def cmd_position(args):
    """Pool shares held by the wallet"""
    manager = Web3Manager(require_signer=False)
    lm = LiquidityManager(manager=manager)
    result = lm.get_position(args.token)

    print(json.dumps(result, indent=2, default=str))
    filepath = save_result(f"univ1_position_{result['token'][:10]}.json", result)
    print(f"\nSaved to {filepath}", file=sys.stderr)


def cmd_quote(args):
    """Swap quote against current reserves"""
    manager = Web3Manager(require_signer=False)
    lm = LiquidityManager(manager=manager)

    sell = args.token if args.sell_token else Config.REFERENCE_SYMBOL
    amount_in = to_wei(manager, sell, args.amount)
    result = lm.quote(args.token, amount_in, input_is_reference=not args.sell_token)

    print(json.dumps(result, indent=2, default=str))


def cmd_lp_plan(args):
    """Plan a deposit without executing it"""
    if args.reserves:
        # Offline: raw integer amounts against the given reserves
        config = Config()
        try:
            amount_a, amount_b = int(args.amount_a), int(args.amount_b)
        except ValueError:
            raise InvalidInputError("With --reserves, amounts must be integers in wei")
        a_is_ref = config.is_reference(config.get_token_address(args.token_a))
        b_is_ref = config.is_reference(config.get_token_address(args.token_b))
        if a_is_ref == b_is_ref:
            raise InvalidInputError(f"Exactly one asset must be {config.REFERENCE_SYMBOL}")
        reference_amount, token_amount = (amount_a, amount_b) if a_is_ref else (amount_b, amount_a)

        reserves = Reserves(reference=args.reserves[0], token=args.reserves[1])
        plan = plan_deposit(reserves, reference_amount, token_amount, args.no_swap)
        result = {
            "reserves": asdict(reserves),
            "offered": {"reference": reference_amount, "token": token_amount},
            "plan": asdict(plan),
            "token_allowance": plan.token_allowance,
        }
    else:
        manager = Web3Manager(require_signer=False)
        lm = LiquidityManager(manager=manager)
        result = lm.plan_deposit(
            args.token_a,
            args.token_b,
            to_wei(manager, args.token_a, args.amount_a),
            to_wei(manager, args.token_b, args.amount_b),
            prevent_swap=args.no_swap,
        )

    plan = result["plan"]
    major = Config.REFERENCE_SYMBOL if plan["major_is_reference"] else "token"
    print("=" * 60)
    print("DEPOSIT PLAN")
    print("=" * 60)
    print(f"  Reserves:  {result['reserves']['reference']} ref / {result['reserves']['token']} token")
    print(f"  Excess:    {major}")
    print(f"  Swap:      {plan['swap_amount']} {major}" if plan["swap_amount"] else "  Swap:      none")
    print(f"  Deposit:   {plan['reference_amount']} ref + {plan['token_amount']} token")
    print("=" * 60)

    filepath = save_result("univ1_lp_plan.json", result)
    print(f"\nSaved to {filepath}", file=sys.stderr)


def cmd_add_liquidity(args):
    """Add liquidity, swapping the excess side first unless --no-swap"""
    manager = Web3Manager(require_signer=True)
    lm = LiquidityManager(manager=manager)

    amount_a = to_wei(manager, args.token_a, args.amount_a)
    amount_b = to_wei(manager, args.token_b, args.amount_b)
    print(f"Adding liquidity: {args.amount_a} {args.token_a} + {args.amount_b} {args.token_b}")

    result = lm.add_liquidity(args.token_a, args.token_b, amount_a, amount_b, prevent_swap=args.no_swap)

    print(f"\nSuccess! Pool: {result['pool']}")
    print(f"Deposited: {result['deposited']['reference']} ref + {result['deposited']['token']} token")
    for step, outcome in result["receipts"].items():
        receipt = outcome["receipt"] if isinstance(outcome, dict) else outcome
        print(f"  {step} tx: {tx_hash(receipt)}")

    save_data = {
        "pool": result["pool"],
        "token": result["token"],
        "reserves": result["reserves"],
        "plan": result["plan"],
        "deposited": result["deposited"],
        "txs": {
            step: tx_hash(outcome["receipt"] if isinstance(outcome, dict) else outcome)
            for step, outcome in result["receipts"].items()
        },
    }
    filepath = save_result(f"univ1_add_liquidity_{result['token'][:10]}.json", save_data)
    print(f"Saved to {filepath}", file=sys.stderr)


def cmd_remove_liquidity(args):
    """Remove a fraction of the wallet's pool shares"""
    manager = Web3Manager(require_signer=True)
    lm = LiquidityManager(manager=manager)

    print(f"Removing {args.bps / 100:.2f}% of {args.token_a}/{args.token_b} liquidity")
    result = lm.remove_liquidity(args.token_a, args.token_b, args.bps)

    print(f"\nSuccess! Burned {result['shares_removed']} of {result['shares_held']} shares")
    print(f"Tx: {tx_hash(result['receipt'])}")

    save_data = {
        "pool": result["pool"],
        "token": result["token"],
        "fraction_bps": result["fraction_bps"],
        "shares_removed": result["shares_removed"],
        "tx_hash": tx_hash(result["receipt"]),
    }
    filepath = save_result(f"univ1_remove_liquidity_{result['token'][:10]}.json", save_data)
    print(f"Saved to {filepath}", file=sys.stderr)


def main():
    parser = argparse.ArgumentParser(
        prog="amm-liquidity",
        description="AMM Liquidity - rebalancing deposits into ETH/token constant-product pools",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""examples:
  amm-liquidity query balances
  amm-liquidity univ1 quote DAI 0.5                       # ETH -> DAI quote
  amm-liquidity univ1 lp-plan ETH DAI 1.5 200             # plan against live reserves
  amm-liquidity univ1 lp-plan ETH DAI 2000 500 --reserves 100000 50000
  amm-liquidity univ1 add ETH DAI 1.5 200
  amm-liquidity univ1 remove ETH DAI 2500                 # withdraw 25%

configuration:
  RPC_URL                 .env
  PRIVATE_KEY             wallet.env (wallet owner)
  WALLET_ADDRESS          wallet.env (custody wallet holding the funds)
  tokens                  config/tokens.json
  gas                     gas_config.json
  UNISWAP_V1_FACTORY      override factory address
  DEADLINE_SECONDS        deadline offset for pool calls (default 60)
""",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command", help="Command")

    query_parser = subparsers.add_parser("query", help="General query operations")
    query_sub = query_parser.add_subparsers(dest="query_type")

    balances_parser = query_sub.add_parser("balances", help="Query ETH and token balances")
    balances_parser.add_argument("--address", help="Address to query (default: WALLET_ADDRESS)")
    balances_parser.set_defaults(func=cmd_query_balances)

    univ1_parser = subparsers.add_parser("univ1", help="Uniswap V1 style pool operations")
    univ1_sub = univ1_parser.add_subparsers(dest="univ1_command")

    pos_parser = univ1_sub.add_parser("position", help="Pool shares held for a token's pool")
    pos_parser.add_argument("token", help="Token symbol or address")
    pos_parser.set_defaults(func=cmd_position)

    quote_parser = univ1_sub.add_parser("quote", help="Swap quote (read-only)")
    quote_parser.add_argument("token", help="Pool token symbol or address")
    quote_parser.add_argument("amount", help="Amount sold (ETH unless --sell-token)")
    quote_parser.add_argument("--sell-token", action="store_true", help="Sell the token for ETH")
    quote_parser.set_defaults(func=cmd_quote)

    plan_parser = univ1_sub.add_parser("lp-plan", help="Plan a deposit (read-only)")
    plan_parser.add_argument("token_a", help="First asset (ETH or token)")
    plan_parser.add_argument("token_b", help="Second asset (ETH or token)")
    plan_parser.add_argument("amount_a", help="Amount of token_a")
    plan_parser.add_argument("amount_b", help="Amount of token_b")
    plan_parser.add_argument("--no-swap", action="store_true", help="Trim to pool ratio instead of swapping")
    plan_parser.add_argument("--reserves", type=int, nargs=2, metavar=("REF", "TOKEN"),
                             help="Plan offline against these reserves (amounts in wei)")
    plan_parser.set_defaults(func=cmd_lp_plan)

    add_parser = univ1_sub.add_parser("add", help="Add liquidity")
    add_parser.add_argument("token_a", help="First asset (ETH or token)")
    add_parser.add_argument("token_b", help="Second asset (ETH or token)")
    add_parser.add_argument("amount_a", help="Amount of token_a")
    add_parser.add_argument("amount_b", help="Amount of token_b")
    add_parser.add_argument("--no-swap", action="store_true", help="Trim to pool ratio instead of swapping")
    add_parser.set_defaults(func=cmd_add_liquidity)

    remove_parser = univ1_sub.add_parser("remove", help="Remove liquidity")
    remove_parser.add_argument("token_a", help="First asset (ETH or token)")
    remove_parser.add_argument("token_b", help="Second asset (ETH or token)")
    remove_parser.add_argument("bps", type=int, help="Fraction to withdraw in basis points (0-10000)")
    remove_parser.set_defaults(func=cmd_remove_liquidity)

    args = parser.parse_args()
    configure_logging(args.verbose)

    if not args.command:
        parser.print_help()
        sys.exit(1)
    if args.command == "query" and not args.query_type:
        query_parser.print_help()
        sys.exit(1)
    if args.command == "univ1" and not args.univ1_command:
        univ1_parser.print_help()
        sys.exit(1)

    try:
        args.func(args)
    except KeyboardInterrupt:
        print("\nCancelled.")
        sys.exit(1)
    except AMMError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
