"""
Command-line interface for the directory auditor.

Usage:
    vci-directory-auditor [-d URL] [-l DIRECTORY_LOG] [-a AUDIT_LOG]
                          [-p PREVIOUS_LOG] [-t] [-v]
"""

import argparse
import asyncio
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

from . import __version__
from .audit_logger import AuditLogger
from .config import AuditorConfig, LoggingConfig, VCI_ISSUERS_DIR_URL, create_config
from .enums import LogLevel
from .exceptions import AuditorError
from .i18n import SUPPORTED_LANGUAGES, get_message
from .jwks_client import DEFAULT_TIMEOUT_SECONDS
from .models import AuditReport
from .orchestrator import AuditOrchestrator


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="vci-directory-auditor",
        description="Audit a directory of issuers and their published key sets",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--directory", "-d",
        help=f"URL of the directory to audit (default: {VCI_ISSUERS_DIR_URL})",
    )
    parser.add_argument(
        "--directorylog", "-l",
        help="Output log file storing directory issuer keys "
             "(default: logs/directory_log_<time>.json)",
    )
    parser.add_argument(
        "--auditlog", "-a",
        help="Output audit file on the directory (default: logs/audit_log_<time>.json)",
    )
    parser.add_argument(
        "--previous", "-p",
        help="Directory log file from a previous audit",
    )
    parser.add_argument(
        "--test", "-t",
        action="store_true",
        help="Test mode: treat 'audit-N' issuer URL segments as the same issuer",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=DEFAULT_TIMEOUT_SECONDS,
        help=f"Per-request timeout in seconds (default: {DEFAULT_TIMEOUT_SECONDS:g})",
    )
    parser.add_argument(
        "--language",
        choices=sorted(SUPPORTED_LANGUAGES),
        default="en",
        help="Output language (default: en)",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Write structured log entries to stderr",
    )
    parser.add_argument(
        "--log-format",
        choices=list(AuditLogger.OUTPUT_FORMATS),
        default="text",
        help="Format of the structured log entries (default: text)",
    )
    return parser


def build_config(args: argparse.Namespace, now: datetime) -> AuditorConfig:
    """Build the run configuration from parsed arguments."""
    return create_config(
        now=now,
        directory_url=args.directory,
        directory_log_path=Path(args.directorylog) if args.directorylog else None,
        audit_log_path=Path(args.auditlog) if args.auditlog else None,
        previous_log_path=Path(args.previous) if args.previous else None,
        test_mode=args.test,
        timeout_seconds=args.timeout,
        language=args.language,
        logging=LoggingConfig(
            enabled=args.verbose,
            level="debug" if args.verbose else "info",
            output_format=args.log_format,
        ),
    )


def create_logger(config: AuditorConfig) -> Optional[AuditLogger]:
    """Create the structured logger, if enabled."""
    if not config.logging.enabled:
        return None
    return AuditLogger(
        output_format=config.logging.output_format,
        min_level=LogLevel(config.logging.level),
    )


def print_summary(report: AuditReport, language: str) -> None:
    """Print a short summary of the audit report."""
    print(get_message(
        "summary.issuers",
        language,
        count=report.issuer_count,
        errors=len(report.issuers_with_errors),
    ))
    print(get_message(
        "summary.duplicates",
        language,
        kids=len(report.duplicated_kids),
        iss=len(report.duplicated_iss),
        names=len(report.duplicated_names),
    ))
    if report.compared:
        print(get_message(
            "summary.changes",
            language,
            new=report.new_issuer_count,
            deleted=report.deleted_issuer_count,
            removed=len(report.removed_kids),
        ))


async def run_audit(config: AuditorConfig, now: datetime) -> int:
    """
    Run one audit.

    Returns:
        Exit code (0 on completion, 1 on a fatal error)
    """
    logger = create_logger(config)

    async with AuditOrchestrator(config=config, logger=logger) as orchestrator:
        try:
            result = await orchestrator.run(now)
        except AuditorError as e:
            if logger:
                logger.log_error("AuditOrchestrator", "Audit aborted", error=e, additional_data=e.details)
            print(get_message("cli.fatal_error", config.language, error=e.message), file=sys.stderr)
            return 1

    print_summary(result.report, config.language)
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code
    """
    # Single run time for the default file names and both logs
    now = datetime.now()

    parser = create_parser()
    args = parser.parse_args(argv)
    if args.timeout <= 0:
        parser.error("--timeout must be positive")

    config = build_config(args, now)
    return asyncio.run(run_audit(config, now))


if __name__ == "__main__":
    sys.exit(main())
