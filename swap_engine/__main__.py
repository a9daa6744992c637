#!/usr/bin/env python3
"""
Command-line entry point: run the configured swap once.

Usage:
    python -m swap_engine --quote-only
    python -m swap_engine --chain polygon
    python -m swap_engine --chain local --amount 100
"""

import argparse
import asyncio
import logging
import sys

from .config import ConfigError, ConfigManager
from .context import ChainContext
from .core.errors import ConfigurationError, SwapEngineError
from .execution import LocalAccountSigner, SwapExecutor, TradeResult
from .pools import PoolStateReader, locate
from .quoting import Quoter
from .trade import TradeBuilder

logger = logging.getLogger("swap_engine")


def format_trade_result(result: TradeResult, config: ConfigManager) -> None:
    """Log the outcome of a swap attempt."""
    summary = result.to_dict()
    if result.success:
        logger.info(f"✅ Swap confirmed: {summary['trade']}")
        logger.info(f"🔗 {config.chains.explorer_tx_url(config.chain, summary['swap_tx'])}")
    else:
        logger.error(f"❌ Swap failed: {summary['failure']}")
        if result.approval is not None:
            logger.info(f"Approval tx {summary['approval_tx']} was {result.approval.status.value}")
        if result.failure is not None and result.failure.retryable:
            logger.info("The failure is transient; running again starts a fresh attempt")
    logger.info(f"States: {' -> '.join(summary['states'])}")


async def run_quote_only(config: ConfigManager) -> bool:
    """Locate the pool, read it and quote without sending anything."""
    request = config.build_trade_request()
    async with await ChainContext.from_config(config) as context:
        pool_address = locate(
            context.deployment.factory, request.identity, context.deployment.init_code_hash
        )
        logger.info(f"Pool for {request.identity}: {pool_address}")

        pool_state = await PoolStateReader(context).read(pool_address)
        quote = await Quoter(context).quote(
            request.asset_in, request.asset_out, request.fee, request.amount_in
        )
        if not quote.available:
            logger.error(f"❌ No quoted amount: {quote.error}")
            return False
        logger.info(f"💱 {request.amount_in} -> {quote.amount}")

        if config.trade.PRIVATE_KEY:
            signer = LocalAccountSigner(context, config.trade.PRIVATE_KEY)
            parameters = TradeBuilder(context.deployment.swap_router).build(
                pool_state,
                request.identity,
                request.amount_in,
                quote.amount,
                recipient=signer.address,
                slippage_tolerance_bps=request.slippage_bps,
                deadline_offset_seconds=request.deadline_seconds,
            )
            logger.info(
                f"Minimum out at {request.slippage_bps} bps: {parameters.amount_out_minimum}, "
                f"calldata {parameters.calldata.hex()}"
            )
    return True


async def run_trade(config: ConfigManager) -> bool:
    """Execute the configured swap."""
    request = config.build_trade_request()
    if not config.trade.PRIVATE_KEY:
        raise ConfigError("PRIVATE_KEY is required to execute a swap")

    async with await ChainContext.from_config(config) as context:
        signer = LocalAccountSigner(
            context, config.trade.PRIVATE_KEY, poll_interval=config.trade.RECEIPT_POLL_INTERVAL
        )
        executor = SwapExecutor(context, signer, receipt_timeout=config.trade.RECEIPT_TIMEOUT)
        logger.info(f"🚀 Swapping {request.describe()} from {signer.address}")
        result = await executor.execute(request)

    format_trade_result(result, config)
    return result.success


async def main():
    """Main CLI function."""
    parser = argparse.ArgumentParser(
        description="Quote and execute a single Uniswap V3 swap",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Dry run against the default chain
  python -m swap_engine --quote-only

  # Swap 100 units of TOKEN_IN on a local fork
  python -m swap_engine --chain local --amount 100
        """,
    )
    parser.add_argument("--chain", choices=["local", "polygon"], help="Chain to trade on")
    parser.add_argument(
        "--environment", choices=["local", "dev", "staging", "production"], help="Override ENVIRONMENT"
    )
    parser.add_argument("--amount", help="Override AMOUNT_IN (decimal string in TOKEN_IN units)")
    parser.add_argument(
        "--quote-only", action="store_true", help="Quote and build calldata without sending transactions"
    )
    args = parser.parse_args()

    try:
        config = ConfigManager(environment=args.environment, chain=args.chain)
        if args.amount is not None:
            config.trade.AMOUNT_IN = args.amount
        config.validate_configuration()

        if args.quote_only:
            success = await run_quote_only(config)
        else:
            success = await run_trade(config)
        sys.exit(0 if success else 1)

    except KeyboardInterrupt:
        logger.info("⏹️  Interrupted by user")
        sys.exit(130)
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        sys.exit(2)
    except SwapEngineError as e:
        logger.error(f"💥 {type(e).__name__} at {e.step}: {e}")
        sys.exit(1)


def run():
    """Console script entry point."""
    asyncio.run(main())


if __name__ == "__main__":
    run()
