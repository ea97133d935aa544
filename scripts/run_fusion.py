#!/usr/bin/env python3
"""HazardFusion CLI — run fusion cycles against a SQLite report store.

Usage:
    python scripts/run_fusion.py --db data/hazardfusion.db
    python scripts/run_fusion.py --db data/hazardfusion.db --cycles 0 --interval 30
    python scripts/run_fusion.py --webhook https://example.org/hooks/alerts --output-root outputs/cycles
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

# Ensure project root is on sys.path for consistent import resolution
_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

from config.defaults import (  # noqa: E402
    CACHE_BACKEND,
    DB_PATH,
    DEFAULT_LOG_LEVEL,
    FETCH_LIMIT,
    MIN_CONFIDENCE_FOR_ALERT,
    OUTPUT_ROOT,
)
from config.settings import ConfigurationError, FusionConfig  # noqa: E402


def build_arg_parser() -> argparse.ArgumentParser:
    """Build the argparse argument parser."""
    parser = argparse.ArgumentParser(
        prog="run_fusion",
        description="HazardFusion — coastal hazard report fusion engine",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    # ── Storage ──────────────────────────────────────────────────────────────────
    parser.add_argument("--db", type=str, default=DB_PATH, help="SQLite database path")
    parser.add_argument(
        "--fetch-limit",
        type=int,
        default=FETCH_LIMIT,
        help="Maximum recent reports loaded per cycle",
    )

    # ── Scheduling ───────────────────────────────────────────────────────────────
    parser.add_argument(
        "--cycles",
        type=int,
        default=1,
        help="Number of cycles to run (0 = run until interrupted)",
    )
    parser.add_argument(
        "--interval",
        type=float,
        default=60.0,
        help="Seconds between cycles",
    )

    # ── Thresholds ───────────────────────────────────────────────────────────────
    parser.add_argument(
        "--min-confidence",
        type=float,
        default=MIN_CONFIDENCE_FOR_ALERT,
        help="Minimum cluster confidence (0–100) to raise or update an alert",
    )

    # ── Outputs ──────────────────────────────────────────────────────────────────
    parser.add_argument(
        "--output-root",
        type=str,
        default=None,
        help=f"Write each cycle's FusionResult as JSON under this directory (e.g. {OUTPUT_ROOT})",
    )
    parser.add_argument(
        "--cache-backend",
        type=str,
        default=CACHE_BACKEND,
        choices=["memory", "redis"],
        help="Cache backend whose alert views are invalidated after each cycle",
    )
    parser.add_argument(
        "--webhook",
        type=str,
        nargs="*",
        default=[],
        metavar="URL",
        help="Webhook URLs notified of new and updated alerts",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=DEFAULT_LOG_LEVEL,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity",
    )
    return parser


def args_to_config(args: argparse.Namespace) -> FusionConfig:
    """Convert parsed CLI arguments to a FusionConfig instance."""
    return FusionConfig(
        db_path=args.db,
        fetch_limit=args.fetch_limit,
        min_confidence_for_alert=args.min_confidence,
        cache_backend=args.cache_backend,
        output_root=args.output_root or OUTPUT_ROOT,
        log_level=args.log_level,
    )


def main() -> None:
    """CLI entrypoint — parse arguments, build config, run fusion cycles."""
    parser = build_arg_parser()
    args = parser.parse_args()

    from hazardfusion.utils.logging_utils import configure_logging

    configure_logging(log_level=args.log_level)
    logger = logging.getLogger("hazardfusion.run_fusion")

    try:
        config = args_to_config(args)
    except ConfigurationError as exc:
        logger.error("Invalid configuration: %s", exc)
        sys.exit(2)

    from hazardfusion.broadcast import AlertBroadcaster, Subscription
    from hazardfusion.cache.backends import create_cache_backend
    from hazardfusion.cache.invalidator import CacheInvalidator
    from hazardfusion.clients.webhook_client import WebhookClient
    from hazardfusion.exceptions import RepositoryError
    from hazardfusion.io.persistence import save_fusion_result
    from hazardfusion.io.sqlite_repository import SQLiteRepository
    from hazardfusion.pipeline import FusionOrchestrator

    broadcaster = None
    if args.webhook:
        client = WebhookClient(
            max_retries=config.webhook_max_retries,
            backoff_base=config.webhook_backoff_base,
            request_timeout=config.webhook_request_timeout,
        )
        broadcaster = AlertBroadcaster(
            [Subscription(id=f"cli-{i}", webhook_url=url) for i, url in enumerate(args.webhook)],
            client=client,
        )

    logger.info(
        "HazardFusion starting — db: %s | cycles: %s | interval: %.0fs",
        config.db_path, args.cycles or "unbounded", args.interval,
    )

    cycle = 0
    try:
        with SQLiteRepository(config.db_path) as repository:
            orchestrator = FusionOrchestrator(
                repository,
                CacheInvalidator(create_cache_backend(config), config),
                config,
            )
            while True:
                cycle += 1
                result = orchestrator.run_fusion_cycle()
                if result is not None and args.output_root:
                    save_fusion_result(result, config.output_root)
                # Delivered after the cycle returns, outside the cycle lock
                if result is not None and broadcaster is not None:
                    broadcaster.broadcast(result)
                if args.cycles and cycle >= args.cycles:
                    break
                time.sleep(args.interval)
    except KeyboardInterrupt:
        logger.info("Interrupted by user after %d cycle(s)", cycle)
    except RepositoryError as exc:
        logger.error("Fusion cycle %d failed: %s", cycle, exc)
        sys.exit(1)
    except Exception as exc:
        logger.exception("Fusion failed with unhandled exception: %s", exc)
        sys.exit(1)
    finally:
        if broadcaster is not None:
            broadcaster.close()


if __name__ == "__main__":
    main()
