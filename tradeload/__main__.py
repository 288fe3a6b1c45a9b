import argparse
import sys
from typing import Any, Optional

from .config.loader import ConfigLoader
from .engine import LoadTestRunner
from .errors import ConfigurationError, ProvisioningError
from .logging.config import configure_logging, get_logger

EXIT_OK = 0
EXIT_FAILURE = 1


def _csv(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def _named_key(value: str) -> tuple[str, str]:
    name, sep, key = value.partition("=")
    if not sep or not name or not key:
        raise argparse.ArgumentTypeError("expected NAME=KEY_OR_PATH")
    return name, key


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="tradeload", description="Trading engine order load generator")
    sub = parser.add_subparsers(dest="command")

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--config", default=None, help="YAML run configuration")
    common.add_argument("--root-url", default=None, help="API root, e.g. http://localhost:8000")
    common.add_argument("--currencies", type=_csv, default=None, help="Comma separated, at least 2")
    common.add_argument("--markets", type=_csv, default=None, help="Comma separated, at least 1")
    common.add_argument("--traders", type=int, default=None, help="Number of traders (>= 2)")
    common.add_argument("--orders", type=int, default=None, help="Target completed orders")
    common.add_argument("--workers", type=int, default=None, help="Parallel workers")
    common.add_argument("--volume-min", type=float, default=None)
    common.add_argument("--volume-max", type=float, default=None)
    common.add_argument("--volume-step", type=float, default=None)
    common.add_argument("--price-min", type=float, default=None)
    common.add_argument("--price-max", type=float, default=None)
    common.add_argument("--price-step", type=float, default=None)
    common.add_argument("--trader-key", default=None, help="PEM key or path for trader tokens")
    common.add_argument("--management-key", type=_named_key, action="append", default=None,
                        help="NAME=PEM_OR_PATH, repeat for multiple signers")
    common.add_argument("--funding-amount", type=float, default=None, help="Deposit per currency")
    common.add_argument("--provisioning-workers", type=int, default=None)
    common.add_argument("--request-timeout", type=float, default=None, help="Seconds; unset waits indefinitely")
    common.add_argument("--report-path", default=None, help="Write the report (.yml/.yaml or .json)")
    common.add_argument("--log-level", default="INFO", type=str.upper,
                        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"])
    common.add_argument("--log-json", action="store_true", help="JSON log lines")
    common.add_argument("--log-threads", action="store_true", help="Add the emitting thread name to log lines")

    p_run = sub.add_parser("run", parents=[common], help="Provision traders and submit orders")
    p_run.add_argument("--seed", type=int, default=None, help="Seed order sampling")

    sub.add_parser("validate", parents=[common], help="Check run parameters without contacting the engine")
    return parser


def overrides_from_args(args: argparse.Namespace) -> dict[str, Any]:
    """Map command line options onto the configuration tree; unset options stay None."""
    return {
        "root_url": args.root_url,
        "currencies": args.currencies,
        "markets": args.markets,
        "traders": args.traders,
        "orders": args.orders,
        "workers": args.workers,
        "volume": {"min": args.volume_min, "max": args.volume_max, "step": args.volume_step},
        "price": {"min": args.price_min, "max": args.price_max, "step": args.price_step},
        "credentials": {
            "trader_key": args.trader_key,
            "management_keys": dict(args.management_key) if args.management_key else None,
        },
        "funding_amount": args.funding_amount,
        "provisioning_workers": args.provisioning_workers,
        "request_timeout_seconds": args.request_timeout,
        "report_path": args.report_path,
    }


def validate(args: argparse.Namespace) -> int:
    """Print every problem with the merged run parameters."""
    try:
        params = ConfigLoader.create(args.config).load(overrides_from_args(args))
    except ConfigurationError as e:
        if not e.errors:
            print(f"Configuration error: {e}")
            return EXIT_FAILURE
        print(f"Found {len(e.errors)} validation errors:")
        for error in e.errors:
            print(f"  - {error.field}: {error.message} (value: {error.value!r})")
        return EXIT_FAILURE

    print("Configuration is valid")
    for key, value in params.describe().items():
        print(f"  {key}: {value}")
    return EXIT_OK


def run(args: argparse.Namespace) -> int:
    log = get_logger(__name__)

    try:
        params = ConfigLoader.create(args.config).load(overrides_from_args(args))
        report = LoadTestRunner(params, seed=args.seed).run()
    except ConfigurationError as e:
        log.error("Configuration error", error=str(e))
        return EXIT_FAILURE
    except ProvisioningError as e:
        log.error("Provisioning failed", error=str(e), trader_uid=e.trader_uid)
        return EXIT_FAILURE

    if report.insufficient_data:
        log.warning("Run finished without enough data", reason=report.reason)
    return EXIT_OK


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return EXIT_FAILURE

    configure_logging(level=args.log_level, format_json=args.log_json, include_thread=args.log_threads)

    if args.command == "validate":
        return validate(args)
    return run(args)


if __name__ == "__main__":
    sys.exit(main())
