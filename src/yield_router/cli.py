#!/usr/bin/env python3
"""
Command-line interface for the swap-and-deposit workflow.

Usage:
    swap-yield-router 1
    swap-yield-router 2.5 --log-level DEBUG
    python -m yield_router 1
"""

import argparse
import asyncio
import logging
import sys
from decimal import Decimal
from typing import List, Optional

from .config import ChainConfig, ConfigError, get_config
from .contracts.erc20 import from_smallest_unit, parse_amount
from .contracts.errors import InvalidArgument
from .core.orchestrator import StageOutcome, WorkflowResult

logger = logging.getLogger(__name__)


def _positive_amount(value: str) -> Decimal:
    try:
        amount = parse_amount(value)
    except InvalidArgument as e:
        raise argparse.ArgumentTypeError(str(e))
    if amount <= 0:
        raise argparse.ArgumentTypeError(f"Amount must be greater than zero, got: {value}")
    return amount


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="swap-yield-router",
        description=(
            "Approve, swap the source token through its Uniswap V3 pool, "
            "then deposit the output into the lending and vault venues."
        ),
    )
    parser.add_argument(
        "amount",
        type=_positive_amount,
        help="Human-readable amount of the source token to run through the workflow",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Override LOG_LEVEL from the environment",
    )
    return parser.parse_args(argv)


def format_workflow_result(result: WorkflowResult, chains: ChainConfig, target_decimals: int) -> None:
    """Format and display a workflow run."""
    logger.info("=" * 60)
    logger.info(f"📊 WORKFLOW SUMMARY ({result.run_id})")
    logger.info("=" * 60)

    for record in result.trace:
        if record.outcome == StageOutcome.SUCCESS:
            logger.info(f"✅ {record.stage.value}: success")
        elif record.outcome == StageOutcome.ATTEMPTED:
            status = "succeeded" if record.succeeded else f"failed ({record.error})"
            logger.info(f"{'✅' if record.succeeded else '⚠️ '} {record.stage.value}: attempted, {status}")
        else:
            logger.error(f"❌ {record.stage.value}: {record.error}")

        for tx_hash in record.tx_hashes:
            logger.info(f"   🔗 {chains.tx_url(tx_hash)}")

    if result.pool:
        logger.info(f"🏊 Pool: {chains.address_url(result.pool.address)} (fee {result.pool.fee_tier})")
    if result.swap_output is not None:
        logger.info(
            f"💱 Deposit amount per venue: {from_smallest_unit(result.swap_output, target_decimals)}"
        )

    logger.info("=" * 60)
    if result.success:
        logger.info("🎉 WORKFLOW DONE")
    else:
        logger.error(f"💥 WORKFLOW ABORTED during {result.failed_stage.value}: {result.error}")


async def run_workflow(amount: Decimal) -> WorkflowResult:
    """Connect, wire and run the workflow once."""
    config = get_config()
    web3, signer = config.connect()
    orchestrator = config.build_orchestrator(web3, signer)
    result = await orchestrator.run(amount)
    format_workflow_result(result, config.chains, config.protocols.TARGET_TOKEN_DECIMALS)
    return result


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)

    try:
        config = get_config()
    except ConfigError as e:
        logging.basicConfig(level=logging.ERROR)
        logger.error(f"❌ Configuration error: {e}")
        return 1

    if args.log_level:
        logging.getLogger().setLevel(args.log_level)

    addresses = config.workflow_addresses()
    logger.info(
        f"🔄 Running {args.amount} {addresses.source_token.label} → "
        f"{addresses.target_token.label} → lending + vault"
    )

    try:
        result = asyncio.run(run_workflow(args.amount))
    except ConfigError as e:
        logger.error(f"❌ Configuration error: {e}")
        return 1

    return 0 if result.success else 1


if __name__ == "__main__":
    sys.exit(main())
