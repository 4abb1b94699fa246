"""Command-line entry point for the multi-wallet orchestrator.

Three commands make up the whole surface:

    solana-multiwallet capacity --kind buy@raydium --wallets keys.txt
    solana-multiwallet allocate --percentage 60 --buyers 3
    solana-multiwallet run plan.json --wallets keys.txt
"""

import argparse
import asyncio
import json
import sys
from dataclasses import replace
from typing import Any, Awaitable, Callable, Dict, List, Optional

from solana_multiwallet.allocation import allocate
from solana_multiwallet.capacity import validate_capacity
from solana_multiwallet.config import AppConfig, get_app_config
from solana_multiwallet.logging_config import configure_logging, get_logger
from solana_multiwallet.models.operations import BatchReport, BuyerConfig, OperationKind, SellerConfig
from solana_multiwallet.models.params import TokenMetadata
from solana_multiwallet.models.wallet import WalletHandle, load_wallets
from solana_multiwallet.services.orchestrator import BatchOrchestrator
from solana_multiwallet.utils.errors import OrchestratorError, ValidationError
from solana_multiwallet.utils.validation import is_valid_percentage

logger = get_logger(__name__)


def read_wallets(path: str) -> List[WalletHandle]:
    with open(path, "r", encoding="utf-8") as f:
        return load_wallets(f)


class WalletBook:
    """Looks wallets up by address for plan files."""

    def __init__(self, wallets: List[WalletHandle]):
        self.wallets = wallets
        self._by_address = {wallet.address: wallet for wallet in wallets}

    def get(self, address: str) -> WalletHandle:
        wallet = self._by_address.get(address)
        if wallet is None:
            raise ValidationError(f"Wallet {address} is not in the wallet file")
        return wallet


PlanHandler = Callable[[BatchOrchestrator, WalletBook, Dict[str, Any]], Awaitable[BatchReport]]


async def _run_trade(orchestrator, book, plan):
    return await orchestrator.run_trade(
        book.wallets,
        plan["protocol"],
        plan["direction"],
        plan["token"],
        float(plan["amount"]),
        slippage_bps=plan.get("slippage_bps"),
    )


async def _run_fan_out(orchestrator, book, plan):
    sellers = [
        SellerConfig(
            wallet=book.get(seller["wallet"]),
            sell_percentage=float(seller["percentage"]),
            buyers=tuple(
                BuyerConfig(wallet=book.get(buyer["wallet"]), buy_percentage=float(buyer["percentage"]))
                for buyer in seller.get("buyers", [])
            ),
        )
        for seller in plan["sellers"]
    ]
    return await orchestrator.run_fan_out(sellers, plan["token"])


async def _run_custom_buy(orchestrator, book, plan):
    amounts = {address: float(amount) for address, amount in plan["amounts"].items()}
    wallets = [book.get(address) for address in amounts]
    return await orchestrator.run_custom_buy(
        wallets, plan["token"], amounts, use_rpc=bool(plan.get("use_rpc", False))
    )


async def _run_transfer(orchestrator, book, plan):
    sources = [book.get(address) for address in plan["sources"]] if "sources" in plan else book.wallets
    return await orchestrator.run_transfers(
        sources, plan["receiver"], float(plan["amount"]), token_address=plan.get("token")
    )


async def _run_burn(orchestrator, book, plan):
    return await orchestrator.run_burn(book.get(plan["wallet"]), plan["token"], float(plan["amount"]))


async def _run_distribute(orchestrator, book, plan):
    recipients = [(book.get(address), float(amount)) for address, amount in plan["recipients"].items()]
    return await orchestrator.run_distribute(book.get(plan["sender"]), recipients)


async def _run_consolidate(orchestrator, book, plan):
    sources = [book.get(address) for address in plan["sources"]] if "sources" in plan else book.wallets
    sources = [wallet for wallet in sources if wallet.address != plan["receiver"]]
    return await orchestrator.run_consolidate(sources, plan["receiver"], float(plan["percentage"]))


async def _run_deploy(orchestrator, book, plan):
    wallets = [book.get(address) for address in plan["wallets"]] if "wallets" in plan else book.wallets
    return await orchestrator.run_deploy(
        plan["platform"],
        wallets,
        TokenMetadata(**plan["metadata"]),
        [float(amount) for amount in plan["amounts"]],
        mint_address=plan.get("mint"),
        options=plan.get("options"),
    )


PLAN_HANDLERS: Dict[str, PlanHandler] = {
    "trade": _run_trade,
    "fan_out": _run_fan_out,
    "custom_buy": _run_custom_buy,
    "transfer": _run_transfer,
    "burn": _run_burn,
    "distribute": _run_distribute,
    "consolidate": _run_consolidate,
    "deploy": _run_deploy,
}


async def run_plan(
    plan: Dict[str, Any],
    wallets: List[WalletHandle],
    config: Optional[AppConfig] = None
) -> BatchReport:
    """Execute one plan file against the configured backends."""
    operation = plan.get("operation")
    handler = PLAN_HANDLERS.get(operation)
    if handler is None:
        raise ValidationError(
            f"Unknown operation '{operation}', expected one of: {', '.join(PLAN_HANDLERS)}"
        )
    async with BatchOrchestrator.from_config(config) as orchestrator:
        return await handler(orchestrator, WalletBook(wallets), plan)


def _print(data: Dict[str, Any]) -> None:
    print(json.dumps(data, indent=2))


def cmd_capacity(args: argparse.Namespace) -> int:
    check = validate_capacity(read_wallets(args.wallets), OperationKind.parse(args.kind))
    _print({
        "ok": check.ok,
        "active_count": check.active_count,
        "ceiling": check.ceiling,
        "kind": check.kind.value,
        "message": check.message,
    })
    return 0 if check.ok else 1


def cmd_allocate(args: argparse.Namespace) -> int:
    if args.buyers < 1:
        raise ValidationError("At least one buyer is required")
    if not is_valid_percentage(args.percentage):
        raise ValidationError("Percentage must be greater than 0 and at most 100")
    _print({
        "sell_percentage": args.percentage,
        "buyer_count": args.buyers,
        "per_buyer_share": allocate(args.percentage, args.buyers),
    })
    return 0


def cmd_run(args: argparse.Namespace) -> int:
    with open(args.plan, "r", encoding="utf-8") as f:
        plan = json.load(f)
    config = get_app_config()
    if args.delay is not None:
        config = replace(config, executor=replace(config.executor, inter_unit_delay=args.delay))
    report = asyncio.run(run_plan(plan, read_wallets(args.wallets), config))
    _print(report.to_dict())
    return 0 if report.fail_count == 0 else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="solana-multiwallet",
        description="Batched multi-wallet operations on Solana"
    )
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL")
    subparsers = parser.add_subparsers(dest="command", required=True)

    capacity = subparsers.add_parser("capacity", help="Check active wallets against a ceiling")
    capacity.add_argument("--kind", required=True, help="Operation kind, e.g. buy@raydium")
    capacity.add_argument("--wallets", required=True, help="File with one private key per line")
    capacity.set_defaults(func=cmd_capacity)

    allocate_cmd = subparsers.add_parser("allocate", help="Per-buyer share of a seller percentage")
    allocate_cmd.add_argument("--percentage", type=float, required=True)
    allocate_cmd.add_argument("--buyers", type=int, required=True)
    allocate_cmd.set_defaults(func=cmd_allocate)

    run = subparsers.add_parser("run", help="Run a batch described by a JSON plan")
    run.add_argument("plan", help="Plan file")
    run.add_argument("--wallets", required=True, help="File with one private key per line")
    run.add_argument("--delay", type=float, default=None, help="Seconds between units")
    run.set_defaults(func=cmd_run)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Run the command-line interface."""
    args = build_parser().parse_args(argv)
    try:
        configure_logging(args.log_level or get_app_config().log_level)
        return args.func(args)
    except OrchestratorError as e:
        error = {"success": False, "error": e.to_response().model_dump()}
        print(json.dumps(error, indent=2), file=sys.stderr)
        return 2
    except (OSError, ValueError, KeyError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
