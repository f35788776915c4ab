import argparse
from pathlib import Path
from typing import Optional, Tuple

from . import __version__
from .config import ScrapeConfig, load_config
from .errors import ConfigurationError, StorageConnectionError
from .logger import StructuredLogger, configure_logger
from .pipeline import run_cycle
from .scheduler import Scheduler
from .scrapers.common import new_session
from .storage import PasteStore


def bootstrap(args: argparse.Namespace) -> Tuple[ScrapeConfig, StructuredLogger, PasteStore]:
    """Load config, set up logging, open the store and provision the schema."""
    try:
        config = load_config(Path(args.config) if args.config else None)
    except ConfigurationError as e:
        raise SystemExit(f"Invalid configuration: {e}")

    logger = configure_logger(level=config.log_level, log_dir=config.log_dir)
    for warning in config.warnings:
        logger.warning(warning)

    try:
        store = PasteStore.from_dsn(config.dsn)
        store.ensure_schema()
    except StorageConnectionError as e:
        logger.critical("Failed to connect to database", error=str(e))
        raise SystemExit(1)
    return config, logger, store


def cmd_run(args: argparse.Namespace) -> None:
    config, logger, store = bootstrap(args)
    session = new_session()

    def cycle():
        report = run_cycle(store, session, config)
        logger.log_metrics_summary()
        logger.reset_metrics()
        return report

    scheduler = Scheduler(cycle, config.monitor_interval)
    logger.info(
        f"Starting monitoring with an interval of '{config.monitor_interval}' minutes "
        f"with a limit of '{config.paste_limit}' pastes per request."
    )

    if args.test or config.test_mode:
        scheduler.run_once()
        return

    try:
        scheduler.run()
    except KeyboardInterrupt:
        logger.info(f"Interrupted after {scheduler.cycles_run} cycles")


def cmd_init_db(args: argparse.Namespace) -> None:
    config, logger, _ = bootstrap(args)
    logger.info("Schema ready", dsn=config.dsn)
    print("Schema ready.")


def cmd_status(args: argparse.Namespace) -> None:
    _, _, store = bootstrap(args)
    print(f"Records:  {store.count_records()}")
    print(f"Contents: {store.count_contents()}")
    print(f"Pending:  {len(store.list_pending_keys())}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="pastescrape", description="Harvest public paste listings and contents")
    parser.add_argument("--version", action="store_true", help="Show version")

    subparsers = parser.add_subparsers(dest="command")

    run = subparsers.add_parser("run", help="Poll the listing and backfill contents on an interval")
    run.add_argument("-c", "--config", help="Path to config file (default: ./pastescrape.env)")
    run.add_argument("--test", action="store_true", help="Run exactly one cycle and exit")
    run.set_defaults(func=cmd_run)

    init = subparsers.add_parser("init-db", help="Create the paste tables if missing")
    init.add_argument("-c", "--config", help="Path to config file (default: ./pastescrape.env)")
    init.set_defaults(func=cmd_init_db)

    status = subparsers.add_parser("status", help="Show record, content and pending counts")
    status.add_argument("-c", "--config", help="Path to config file (default: ./pastescrape.env)")
    status.set_defaults(func=cmd_status)

    return parser


def main(argv: Optional[list] = None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.version:
        print(__version__)
        return

    if hasattr(args, "func"):
        args.func(args)
        return

    parser.print_help()


if __name__ == "__main__":
    main()
