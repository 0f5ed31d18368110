"""
Command-line interface for Uptimechamps.

Running ``uptimechamps`` with no command prints the uptime champions report.
Diagnostic commands help locate the boot time Extension Attribute.

Uses Python's argparse module (no external CLI libraries).
"""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence
from datetime import datetime
from pathlib import Path
from typing import NoReturn

from uptimechamps import __version__
from uptimechamps.config.settings import (
    ConfigurationError,
    Settings,
    load_config,
)
from uptimechamps.inventory import (
    AuthenticationError,
    DeviceNotFoundError,
    InventoryError,
    JamfClient,
)
from uptimechamps.reports import (
    NoDataError,
    ReportBuilder,
    render_attribute_details,
    render_computers,
    render_extension_attributes,
    render_report,
)
from uptimechamps.scan import ScanPlanner
from uptimechamps.storage import CacheError, RankedCache

# Set up logging
logger = logging.getLogger(__name__)

# Global verbosity settings (set during main() based on args)
_quiet_mode = False
_verbose_level = 0

BANNER = "=" * 41
RULE = "-" * 40


def set_output_mode(quiet: bool = False, verbose: int = 0) -> None:
    """
    Set the output mode for the CLI.

    Args:
        quiet: If True, suppress non-essential output.
        verbose: Verbosity level (0=normal, 1+=verbose).
    """
    global _quiet_mode, _verbose_level
    _quiet_mode = quiet
    _verbose_level = verbose


def output(message: str = "", force: bool = False) -> None:
    """
    Print a message to stdout, respecting quiet mode.

    Args:
        message: The message to print.
        force: If True, print even in quiet mode (for the report table itself).
    """
    if force or not _quiet_mode:
        print(message)


def output_verbose(message: str, level: int = 1) -> None:
    """
    Print a verbose message only if verbosity is high enough.

    Args:
        message: The message to print.
        level: Required verbosity level to show this message.
    """
    if _verbose_level >= level and not _quiet_mode:
        print(message)


def output_error(message: str) -> None:
    """
    Print an error message (always shown, even in quiet mode).

    Args:
        message: The error message to print.
    """
    print(message, file=sys.stderr)


def _add_full_scan_argument(parser: argparse.ArgumentParser, default: object) -> None:
    parser.add_argument(
        "-f", "--full-scan",
        action="store_true",
        dest="full_scan",
        default=default,
        help="Ignore the cache and scan every computer",
    )


def create_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser for the Uptimechamps CLI."""
    parser = argparse.ArgumentParser(
        prog="uptimechamps",
        description="Rank Jamf Pro computers by uptime",
        epilog="With no command, the uptime report is printed.",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"uptimechamps {__version__}",
    )

    parser.add_argument(
        "--config",
        metavar="PATH",
        help="Override config file location (default: ~/.uptimechamps/config.yaml)",
    )

    parser.add_argument(
        "--env-file",
        metavar="PATH",
        help="File with JAMF_URL, JAMF_CLIENT_ID, JAMF_CLIENT_SECRET (default: ./.env)",
    )

    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase output verbosity (can be repeated)",
    )

    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Suppress non-essential output",
    )

    _add_full_scan_argument(parser, default=False)

    subparsers = parser.add_subparsers(
        title="commands",
        dest="command",
        metavar="<command>",
    )

    # report command
    report_parser = subparsers.add_parser(
        "report",
        help="Print the uptime champions report (default)",
        description="Rank computers by the boot time Extension Attribute.",
    )
    # SUPPRESS so "-f report" is not reset by the sub-command default
    _add_full_scan_argument(report_parser, default=argparse.SUPPRESS)
    report_parser.set_defaults(func=cmd_report)

    # attributes command
    attributes_parser = subparsers.add_parser(
        "attributes",
        help="List computer Extension Attributes",
        description="List Extension Attribute definitions to find the uptime attribute name.",
    )
    attributes_parser.set_defaults(func=cmd_attributes)

    # sample command
    sample_parser = subparsers.add_parser(
        "sample",
        help="List a few computers with their IDs",
        description="Show the first computers in Jamf, for use with the debug command.",
    )
    sample_parser.add_argument(
        "--limit",
        type=int,
        default=10,
        help="Number of computers to show (default: 10)",
    )
    sample_parser.set_defaults(func=cmd_sample)

    # debug command
    debug_parser = subparsers.add_parser(
        "debug",
        help="Show one computer's Extension Attributes",
        description="Show every Extension Attribute reported by one computer.",
    )
    debug_parser.add_argument(
        "identifier",
        help="Jamf computer ID (numeric) or serial number",
    )
    debug_parser.set_defaults(func=cmd_debug)

    parser.set_defaults(func=cmd_report)
    return parser


def setup_logging(verbose: int, quiet: bool) -> None:
    """Configure logging based on verbosity level."""
    if quiet:
        level = logging.ERROR
    elif verbose == 0:
        level = logging.WARNING
    elif verbose == 1:
        level = logging.INFO
    else:
        level = logging.DEBUG

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def _load_settings(args: argparse.Namespace) -> Settings:
    config_path = Path(args.config).expanduser() if args.config else None
    env_file = Path(args.env_file).expanduser() if args.env_file else None
    settings = load_config(config_path, env_file)

    # Configured level applies only when no -v/-q was given
    if args.verbose == 0 and not args.quiet:
        logging.getLogger().setLevel(settings.log_level)

    return settings


def _connect(settings: Settings) -> JamfClient | None:
    """Authenticate with Jamf, printing progress. Returns None on failure."""
    settings.require_credentials()
    client = JamfClient(settings)

    output("Authenticating with Jamf...")
    try:
        client.authenticate()
    except InventoryError as e:
        output_error(f"Error: Failed to retrieve Bearer token. {e.message}")
        return None

    output("Authentication successful.")
    output()
    return client


def _print_header(title: str) -> None:
    output(BANNER)
    output(title)
    output(BANNER)
    output()


def cmd_report(args: argparse.Namespace) -> int:
    """Print the uptime champions report."""
    settings = _load_settings(args)
    attribute_name = settings.report.attribute_name
    cache_top_n = settings.cache.top_n
    max_age_days = settings.cache.max_age_days

    _print_header("Jamf Uptime Champions Report")

    client = _connect(settings)
    if client is None:
        return 1

    now = datetime.now().astimezone()
    cache = RankedCache.load(settings.cache_path)
    planner = ScanPlanner(max_age_days=max_age_days, cache_top_n=cache_top_n)

    try:
        decision = planner.plan(cache, args.full_scan, client.list_computer_ids, now)
    except InventoryError as e:
        output_error(f"Error: {e.message}")
        return 1

    if decision.is_quick:
        output(
            f"Cache found ({decision.cache_age_days} days old). "
            f"Performing quick scan of top {cache_top_n} machines..."
        )
        output("Use --full-scan or -f flag to force a full scan of all computers.")
        output(f"Quick scan mode: Checking {len(decision.candidate_ids)} computers from cache...")
    else:
        if decision.reason == "forced":
            output("Full scan requested. Scanning all computers...")
        elif decision.reason == "stale":
            output(
                f"Cache is {decision.cache_age_days} days old "
                f"(older than {max_age_days} days). Performing full scan..."
            )
        else:
            output("No cache found. Performing initial full scan...")
        output(f"Found {len(decision.candidate_ids)} computers. Retrieving uptime data...")
    output()

    def progress(processed: int, total: int) -> None:
        suffix = " Done!" if processed == total else ""
        output(f"Processing: {processed}/{total} computers...{suffix}")

    builder = ReportBuilder(
        settings.cache_path,
        attribute_name=attribute_name,
        cache_top_n=cache_top_n,
        display_top_k=settings.report.display_top_k,
    )

    try:
        result = builder.run(decision, client.get_computer, now, progress=progress)
    except NoDataError:
        output_error("No uptime data found. Please verify:")
        output_error(f"1. The extension attribute name is correct: '{attribute_name}'")
        output_error("2. Computers have reported uptime data")
        return 1
    except CacheError as e:
        output_error(f"Error: {e}")
        return 1

    if result.skipped:
        output_verbose(f"Skipped {len(result.skipped)} computers:")
        for device_id, reason in result.skipped.items():
            output_verbose(f"  {device_id}: {reason}")

    output()
    output(f"Updated cache with top {cache_top_n} results at: {settings.cache_path}")
    output()
    _print_header(f"TOP {settings.report.display_top_k} LONGEST UPTIME CHAMPIONS")
    output(render_report(result.records), force=True)
    output()
    output(BANNER)
    output("Report completed successfully")
    output(BANNER)
    output()

    if decision.is_quick:
        remaining = max_age_days - (decision.cache_age_days or 0)
        output(f"Quick scan mode: Scanned top {cache_top_n} computers from cache")
        output(f"Next full scan will run in {remaining} days")
        output("Run with --full-scan or -f flag to force a full scan now")
    else:
        output(f"Full scan mode: Scanned all {result.scanned} computers")
        output(f"Cache saved. Next run will use quick scan for {max_age_days} days")
    output()
    output(f"Note: Uptime is based on the '{attribute_name}' extension attribute in Jamf")
    return 0


def cmd_attributes(args: argparse.Namespace) -> int:
    """List computer Extension Attribute definitions."""
    settings = _load_settings(args)
    _print_header("Jamf Extension Attributes List")

    client = _connect(settings)
    if client is None:
        return 1

    output("Retrieving extension attributes...")
    try:
        attributes = client.list_extension_attributes()
    except InventoryError as e:
        output_error(f"Error: Failed to retrieve extension attributes. {e.message}")
        return 1

    output("Computer Extension Attributes:")
    output(RULE)
    output(render_extension_attributes(attributes), force=True)
    output(RULE)
    output()
    output("Look for an extension attribute related to 'uptime' in the list above.")
    output(
        "Set its exact NAME as report.attribute_name in the config file "
        "or UPTIMECHAMPS_ATTRIBUTE_NAME."
    )
    return 0


def cmd_sample(args: argparse.Namespace) -> int:
    """List the first few computers with their IDs."""
    if args.limit < 1:
        output_error("Error: --limit must be at least 1")
        return 1

    settings = _load_settings(args)
    _print_header("Sample Computer List")

    client = _connect(settings)
    if client is None:
        return 1

    output("Retrieving computer list...")
    try:
        computers = client.list_computers()
    except InventoryError as e:
        output_error(f"Error: {e.message}")
        return 1

    output(f"First {args.limit} computers in your Jamf instance:")
    output(RULE)
    output(render_computers(computers[: args.limit]), force=True)
    output()
    output("Use one of these IDs with the debug command:")
    output("uptimechamps debug <ID>")
    return 0


def cmd_debug(args: argparse.Namespace) -> int:
    """Show every Extension Attribute reported by one computer."""
    settings = _load_settings(args)
    _print_header("Extension Attribute Debug")

    client = _connect(settings)
    if client is None:
        return 1

    identifier = args.identifier.strip()
    try:
        if identifier.isdigit():
            output(f"Using computer ID: {identifier}...")
            record = client.get_computer(identifier)
        else:
            output(f"Using serial number: {identifier}...")
            record = client.get_computer_by_serial(identifier)
    except DeviceNotFoundError:
        output_error(f"Error: Computer {identifier} not found.")
        return 1
    except InventoryError as e:
        output_error(f"Error: {e.message}")
        return 1

    output("Computer Information:")
    output(RULE)
    output(f"Computer ID: {record.id or 'N/A'}", force=True)
    output(f"Computer Name: {record.name or 'N/A'}", force=True)
    output(f"Username: {record.username or 'N/A'}", force=True)
    output()

    output("ALL Extension Attributes:")
    output(RULE)
    output(render_attribute_details(record.extension_attributes), force=True)
    output()

    uptime_attributes = [
        ea for ea in record.extension_attributes if "uptime" in ea.name.lower()
    ]
    output("Searching for 'uptime' (case-insensitive):")
    output(RULE)
    output(render_attribute_details(uptime_attributes), force=True)

    configured = settings.report.attribute_name
    if record.attribute_value(configured) is None:
        output()
        output(f"Note: the configured attribute '{configured}' has no value on this computer.")
    return 0


def main(argv: Sequence[str] | None = None) -> NoReturn:
    """Main entry point for the Uptimechamps CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    # Set up logging and output mode
    setup_logging(args.verbose, args.quiet)
    set_output_mode(args.quiet, args.verbose)

    try:
        exit_code = args.func(args)
        sys.exit(exit_code)
    except KeyboardInterrupt:
        output("\nOperation cancelled.")
        sys.exit(130)
    except ConfigurationError as e:
        output_error(f"Configuration error: {e}")
        sys.exit(2)
    except AuthenticationError as e:
        output_error(f"Authentication error: {e}")
        sys.exit(1)
    except Exception as e:
        if args.verbose > 0:
            raise
        output_error(f"Error: {e}")
        logger.debug("Command failed", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
