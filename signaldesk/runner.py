# signaldesk/runner.py
"""
Command-line entry point: fetch candles, compute indicators, print JSON.

Example:
    signaldesk AAPL --timeframe 1h
    signaldesk BTC --provider binance --timeframe 15m --plans
"""

import argparse
import asyncio
import json
import logging
import sys
from typing import Any, Sequence

from .analysis import AnalysisClient, AnalysisError
from .cache import IndicatorCache
from .config import load_config, settings
from .indicators import calculate_donchian
from .providers import ProviderError, create_client
from .rules import generate_trade_plans, lookback_for
from .service import IndicatorService

log = logging.getLogger(__name__)


def configure_logging(level: str = "INFO", force: bool = False) -> None:
    """
    Configure root logger with console output.

    By default, this is non-destructive: if the root logger already has handlers,
    it will do nothing (assuming the application has configured logging).

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR)
        force: If True, clear existing handlers and force this configuration
    """
    root_logger = logging.getLogger()

    if root_logger.hasHandlers() and not force:
        return

    root_logger.setLevel(level.upper())

    if force:
        root_logger.handlers.clear()

    formatter = logging.Formatter(
        "%(asctime)s %(levelname)s %(name)s %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    # Logs go to stderr so stdout stays clean JSON.
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)
    root_logger.addHandler(handler)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="signaldesk",
        description="Compute technical indicators for a symbol and print them as JSON.",
    )
    parser.add_argument("symbol", help="Ticker, e.g. AAPL, BTC/USD, EURUSD")
    parser.add_argument("--timeframe", default="1h", help="Candle timeframe (default: 1h)")
    parser.add_argument(
        "--asset",
        default="stock",
        choices=["stock", "crypto", "forex"],
        help="Asset class, used for provider symbol mapping",
    )
    parser.add_argument("--provider", default="polygon", choices=["polygon", "binance"])
    parser.add_argument(
        "--limit",
        type=int,
        default=None,
        help="Candles to fetch (default: depends on timeframe)",
    )
    parser.add_argument("--config", default=None, help="Optional YAML settings overrides")
    parser.add_argument("--plans", action="store_true", help="Include rule-based trade plans")
    parser.add_argument("--analyze", action="store_true", help="Include LLM commentary")
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL")
    return parser


async def run(args: argparse.Namespace) -> dict[str, Any]:
    """Fetch, compute and assemble the JSON-ready result for parsed CLI args."""
    limit = args.limit or lookback_for(args.timeframe)
    cache = IndicatorCache(ttl=settings.indicator_cache_ttl)

    async with create_client(args.provider, asset=args.asset) as client:
        service = IndicatorService(client, cache)
        snapshot = await service.get_indicators(args.symbol, args.timeframe, limit)
        candles = service.chart(args.symbol, args.timeframe).get_candles(limit)

    result: dict[str, Any] = {
        "symbol": args.symbol,
        "timeframe": args.timeframe,
        "provider": args.provider,
        "indicators": snapshot.to_dict(),
    }

    if args.plans and candles:
        plans = generate_trade_plans(snapshot, calculate_donchian(candles), candles)
        result["plans"] = plans.to_dict()

    if args.analyze:
        async with AnalysisClient() as llm:
            result["analysis"] = await llm.analyze(
                args.symbol, args.timeframe, args.asset, snapshot
            )

    return result


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        if args.config:
            settings.apply(load_config(args.config))
        configure_logging(args.log_level or settings.log_level)
        settings.validate(args.provider, analysis=args.analyze)
    except (FileNotFoundError, ValueError) as e:
        configure_logging(args.log_level or "INFO")
        log.error("Configuration error: %s", e)
        return 2

    try:
        result = asyncio.run(run(args))
    except KeyboardInterrupt:
        log.info("Interrupted by user")
        return 130
    except ProviderError as e:
        log.error("Market data unavailable: %s", e)
        return 1
    except AnalysisError as e:
        log.error("Analysis failed: %s", e)
        return 1

    json.dump(result, sys.stdout, indent=2)
    sys.stdout.write("\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
