"""
Command-line interface for the AbuseIPDB client.

This module provides the main CLI entry point with commands for:
- report / check / check-block / clear / bulk-report / blacklist: API calls
- categories: List the report categories and their codes
- config: Configuration management

Exit codes: 0 on success, 1 when the API call failed (transport or decode),
2 for invalid input or configuration.
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Callable, Optional

from . import __version__
from .audit_logger import AuditLogger
from .categories import CATEGORY_NAMES, parse_categories
from .client import AbuseIpDbClient
from .config import (
    DEFAULT_CONFIG_LOCATION,
    ConfigStore,
    SystemConfig,
    config_from_store,
    load_system_config,
    save_config_to_file,
)
from .enums import LogLevel, ReportCategory, ResultStatus
from .exceptions import ConfigError, InputError
from .factory import ClientFactory
from .models import MAX_IPS_BASIC_SUB, ApiResult, BlacklistQuery


EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE_ERROR = 2

ApiAction = Callable[[AbuseIpDbClient, argparse.Namespace, SystemConfig], ApiResult]


def create_logger(config: SystemConfig, verbose: bool = False) -> AuditLogger:
    """
    Create the audit logger from configuration.

    Raises:
        ConfigError: If the configured level or output format is unknown
    """
    try:
        level = LogLevel.DEBUG if verbose else LogLevel.from_name(config.logging.level)
        return AuditLogger(output_format=config.logging.output_format, level=level)
    except ValueError as e:
        raise ConfigError(
            code="invalid_value",
            message=f"Invalid logging configuration: {e}",
        ) from e


def load_config(args: argparse.Namespace) -> SystemConfig:
    """Load configuration for a command, honouring --config and --api-key."""
    path = Path(args.config) if args.config else None
    # Only complain about a missing file if the user named one
    bootstrap = AuditLogger(output_format="text", level=LogLevel.ERROR) if path else None
    config = load_system_config(path, logger=bootstrap)
    if getattr(args, "api_key", None):
        config.api.api_key = args.api_key
    return config


def print_result(result: ApiResult) -> int:
    """Print an API result and return the matching exit code."""
    if result.status == ResultStatus.PLAINTEXT:
        print(result.text or "")
        return EXIT_OK

    if result.status == ResultStatus.TRANSPORT_ERROR:
        print(f"Error: request failed: {result.error}", file=sys.stderr)
        return EXIT_FAILURE

    if result.status == ResultStatus.DECODE_ERROR:
        print("Error: the API returned a response that is not valid JSON", file=sys.stderr)
        return EXIT_FAILURE

    print(json.dumps(result.document, indent=2, ensure_ascii=False))
    return EXIT_OK


def run_api_command(args: argparse.Namespace, action: ApiAction) -> int:
    """Set up config, logger and client, then run one API action."""
    try:
        config = load_config(args)
        logger = create_logger(config, args.verbose)
    except ConfigError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return EXIT_USAGE_ERROR

    if not config.api.api_key:
        print(
            "Error: no API key configured. Use --api-key, ABUSEIPDB_API_KEY or api.key in the config file.",
            file=sys.stderr,
        )
        return EXIT_USAGE_ERROR

    with ClientFactory(logger=logger, config=config.api) as factory:
        client = factory.get_instance(config.api.api_key)
        try:
            result = action(client, args, config)
        except InputError as e:
            print(f"Error: {e.message}", file=sys.stderr)
            return EXIT_USAGE_ERROR

    return print_result(result)


def _split_countries(raw: Optional[str]) -> list[str]:
    if not raw:
        return []
    return [code.strip().upper() for code in raw.split(",") if code.strip()]


def _parse_network(network: str, cidr: Optional[int]) -> tuple[str, int]:
    if "/" in network:
        address, _, size = network.partition("/")
        try:
            return address, int(size)
        except ValueError:
            raise InputError(
                code="invalid_network",
                message=f"Invalid subnet size in {network!r}",
            ) from None
    return network, cidr if cidr is not None else 24


def _action_report(client: AbuseIpDbClient, args: argparse.Namespace, config: SystemConfig) -> ApiResult:
    categories = parse_categories(args.categories)
    comment = args.comment if args.comment is not None else config.report.default_comment
    return client.report_ip(args.ip, categories, comment)


def _action_check(client: AbuseIpDbClient, args: argparse.Namespace, config: SystemConfig) -> ApiResult:
    return client.check_ip_address(args.ip)


def _action_check_block(client: AbuseIpDbClient, args: argparse.Namespace, config: SystemConfig) -> ApiResult:
    address, size = _parse_network(args.network, args.cidr)
    return client.check_block(address, size)


def _action_clear(client: AbuseIpDbClient, args: argparse.Namespace, config: SystemConfig) -> ApiResult:
    return client.clear_ip_address(args.ip)


def _action_bulk_report(client: AbuseIpDbClient, args: argparse.Namespace, config: SystemConfig) -> ApiResult:
    return client.bulk_report(args.csv)


def _action_blacklist(client: AbuseIpDbClient, args: argparse.Namespace, config: SystemConfig) -> ApiResult:
    query = BlacklistQuery(
        limit=args.limit,
        minimum_confidence=args.confidence,
        only_countries=_split_countries(args.only_countries),
        except_countries=_split_countries(args.except_countries),
    )
    if args.plaintext:
        return client.get_blacklist_plaintext(query)
    return client.get_blacklist(query)


def cmd_report(args: argparse.Namespace) -> int:
    """Handle the 'report' command."""
    return run_api_command(args, _action_report)


def cmd_check(args: argparse.Namespace) -> int:
    """Handle the 'check' command."""
    return run_api_command(args, _action_check)


def cmd_check_block(args: argparse.Namespace) -> int:
    """Handle the 'check-block' command."""
    return run_api_command(args, _action_check_block)


def cmd_clear(args: argparse.Namespace) -> int:
    """Handle the 'clear' command."""
    return run_api_command(args, _action_clear)


def cmd_bulk_report(args: argparse.Namespace) -> int:
    """Handle the 'bulk-report' command."""
    return run_api_command(args, _action_bulk_report)


def cmd_blacklist(args: argparse.Namespace) -> int:
    """Handle the 'blacklist' command."""
    return run_api_command(args, _action_blacklist)


def cmd_categories(args: argparse.Namespace) -> int:
    """Handle the 'categories' command."""
    for category in ReportCategory:
        code = category.wire_code
        name = category.name.lower().replace("_", "-")
        print(f"{code:>2}  {name:<16} {CATEGORY_NAMES[code]}")
    return EXIT_OK


def cmd_config(args: argparse.Namespace) -> int:
    """Handle the 'config' command."""
    config_path = Path(args.config) if args.config else DEFAULT_CONFIG_LOCATION

    if args.action == "show":
        store = ConfigStore(config_path).load()
        if not store.loaded_from_file:
            print(f"No configuration found at: {config_path}")
            print("Use 'config init' to create a default configuration.")
            return EXIT_FAILURE

        try:
            config = config_from_store(store)
        except ConfigError as e:
            print(f"Error: {e.message}", file=sys.stderr)
            return EXIT_USAGE_ERROR

        key = config.api.api_key
        masked = f"***{key[-4:]}" if len(key) > 4 else ("***" if key else "(none)")
        print(f"Configuration from: {config_path}")
        print(f"  API key: {masked}")
        print(f"  Base URL: {config.api.base_url}")
        print(f"  Timeout: {config.api.timeout_seconds}s")
        print(f"  Verify TLS: {config.api.verify_tls}")
        print(f"  Log level: {config.logging.level}")
        print(f"  Log format: {config.logging.output_format}")
        return EXIT_OK

    elif args.action == "init":
        if config_path.exists() and not args.force:
            print(f"Configuration already exists at: {config_path}")
            print("Use --force to overwrite.")
            return EXIT_FAILURE

        config = SystemConfig()
        if args.api_key:
            config.api.api_key = args.api_key
        try:
            save_config_to_file(config, config_path)
        except ConfigError as e:
            print(f"Error: {e.message}", file=sys.stderr)
            return EXIT_USAGE_ERROR
        print(f"Configuration created at: {config_path}")
        return EXIT_OK

    elif args.action == "validate":
        logger = AuditLogger(output_format="text", level=LogLevel.ERROR)
        store = ConfigStore(config_path, logger=logger).load()
        if not store.loaded_from_file:
            print(f"Error: Could not load config from {config_path}", file=sys.stderr)
            return EXIT_USAGE_ERROR
        try:
            create_logger(config_from_store(store))
        except ConfigError as e:
            print(f"Error: {e.message}", file=sys.stderr)
            return EXIT_USAGE_ERROR

        print(f"Configuration at {config_path} is valid.")
        return EXIT_OK

    return EXIT_USAGE_ERROR


def _confidence(value: str) -> int:
    number = int(value)
    if not 0 <= number <= 100:
        raise argparse.ArgumentTypeError("confidence must be between 0 and 100")
    return number


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError("must be a positive integer")
    return number


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--config", "-c",
        help=f"Path to configuration file (default: {DEFAULT_CONFIG_LOCATION})",
    )
    common.add_argument(
        "--api-key",
        help="AbuseIPDB API key (overrides config and ABUSEIPDB_API_KEY)",
    )
    common.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose output",
    )

    parser = argparse.ArgumentParser(
        prog="abuseipdb-client",
        description="Command-line client for the AbuseIPDB API",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # 'report' command
    report_parser = subparsers.add_parser(
        "report",
        parents=[common],
        help="Report an abusive IP address",
    )
    report_parser.add_argument("ip", help="IP address to report")
    report_parser.add_argument(
        "--categories", "-C",
        required=True,
        help="Comma-separated category names or codes (e.g. ssh,brute-force or 18,22)",
    )
    report_parser.add_argument(
        "--comment", "-m",
        help="Comment for the report (strip personal information!)",
    )
    report_parser.set_defaults(func=cmd_report)

    # 'check' command
    check_parser = subparsers.add_parser(
        "check",
        parents=[common],
        help="Check whether an IP address has been reported",
    )
    check_parser.add_argument("ip", help="IP address to check")
    check_parser.set_defaults(func=cmd_check)

    # 'check-block' command
    check_block_parser = subparsers.add_parser(
        "check-block",
        parents=[common],
        help="Check a subnet for reported addresses",
    )
    check_block_parser.add_argument(
        "network",
        help="Network address, optionally in CIDR notation (e.g. 193.41.200.0/24)",
    )
    check_block_parser.add_argument(
        "--cidr",
        type=int,
        help="Subnet size if not given in the network argument (default: 24)",
    )
    check_block_parser.set_defaults(func=cmd_check_block)

    # 'clear' command
    clear_parser = subparsers.add_parser(
        "clear",
        parents=[common],
        help="Clear your reports of an IP address",
    )
    clear_parser.add_argument("ip", help="IP address to clear")
    clear_parser.set_defaults(func=cmd_clear)

    # 'bulk-report' command
    bulk_parser = subparsers.add_parser(
        "bulk-report",
        parents=[common],
        help="Upload a CSV of reports",
    )
    bulk_parser.add_argument("csv", help="Path to the CSV file")
    bulk_parser.set_defaults(func=cmd_bulk_report)

    # 'blacklist' command
    blacklist_parser = subparsers.add_parser(
        "blacklist",
        parents=[common],
        help="Download the blacklist",
    )
    blacklist_parser.add_argument(
        "--limit",
        type=_positive_int,
        default=MAX_IPS_BASIC_SUB,
        help=f"Maximum number of entries (default: {MAX_IPS_BASIC_SUB})",
    )
    blacklist_parser.add_argument(
        "--confidence",
        type=_confidence,
        default=100,
        help="Minimum abuse confidence, 0-100 (default: 100)",
    )
    blacklist_parser.add_argument(
        "--only-countries",
        help="Comma-separated country codes to include (takes precedence)",
    )
    blacklist_parser.add_argument(
        "--except-countries",
        help="Comma-separated country codes to exclude",
    )
    blacklist_parser.add_argument(
        "--plaintext",
        action="store_true",
        help="Get the list as plain text, one address per line",
    )
    blacklist_parser.set_defaults(func=cmd_blacklist)

    # 'categories' command
    categories_parser = subparsers.add_parser(
        "categories",
        help="List report categories",
    )
    categories_parser.set_defaults(func=cmd_categories)

    # 'config' command
    config_parser = subparsers.add_parser(
        "config",
        parents=[common],
        help="Configuration management",
    )
    config_parser.add_argument(
        "action",
        choices=["show", "init", "validate"],
        help="Configuration action",
    )
    config_parser.add_argument(
        "--force", "-f",
        action="store_true",
        help="Force overwrite existing configuration",
    )
    config_parser.set_defaults(func=cmd_config)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return EXIT_OK

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
