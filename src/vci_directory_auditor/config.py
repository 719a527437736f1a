"""
Configuration dataclasses for the directory auditor.

A run is configured entirely from command-line flags. Defaults for the
output paths and the snapshot timestamp all derive from one ``now`` value
captured when the run starts.
"""

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Optional

from .jwks_client import DEFAULT_TIMEOUT_SECONDS

VCI_ISSUERS_DIR_URL = (
    "https://raw.githubusercontent.com/the-commons-project/vci-directory/main/vci-issuers.json"
)
DEFAULT_LOGS_DIR = Path("logs")

SNAPSHOT_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"
FILENAME_TIME_FORMAT = "%Y-%m-%d-%H%M%S"
LOG_KINDS = ("directory", "audit")


def format_snapshot_time(now: datetime) -> str:
    """Format the run time as stored in the directory and audit logs."""
    return now.strftime(SNAPSHOT_TIME_FORMAT)


def default_log_path(kind: str, now: datetime, logs_dir: Path = DEFAULT_LOGS_DIR) -> Path:
    """
    Get the default output path of a log file.

    Args:
        kind: 'directory' or 'audit'
        now: Run start time
        logs_dir: Directory holding the logs

    Returns:
        Path like ``logs/audit_log_2024-01-31-120000.json``
    """
    if kind not in LOG_KINDS:
        raise ValueError(f"Invalid log kind: {kind}")
    return Path(logs_dir) / f"{kind}_log_{now.strftime(FILENAME_TIME_FORMAT)}.json"


@dataclass
class LoggingConfig:
    """Logging configuration."""

    enabled: bool = False
    level: str = "info"
    output_format: str = "text"  # 'json', 'text', 'both'


@dataclass
class AuditorConfig:
    """Main configuration of an audit run."""

    directory_url: str
    directory_log_path: Path
    audit_log_path: Path
    previous_log_path: Optional[Path] = None
    test_mode: bool = False
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    language: str = "en"
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def create_config(
    now: datetime,
    directory_url: Optional[str] = None,
    directory_log_path: Optional[Path] = None,
    audit_log_path: Optional[Path] = None,
    previous_log_path: Optional[Path] = None,
    test_mode: bool = False,
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    language: str = "en",
    logging: Optional[LoggingConfig] = None,
) -> AuditorConfig:
    """
    Create a run configuration, filling unset values with defaults.

    Args:
        now: Run start time, used for default log file names
        directory_url: Directory to audit (defaults to the VCI directory)
        directory_log_path: Output path of the directory log
        audit_log_path: Output path of the audit log
        previous_log_path: Directory log of an earlier run to compare with
        test_mode: Normalize ``audit-<digit>`` issuer URL segments when diffing
        timeout_seconds: Per-request timeout
        language: Console language ('en' or 'de')
        logging: Logging configuration

    Returns:
        AuditorConfig with defaults applied
    """
    if timeout_seconds <= 0:
        raise ValueError(f"Timeout must be positive: {timeout_seconds}")

    return AuditorConfig(
        directory_url=directory_url or VCI_ISSUERS_DIR_URL,
        directory_log_path=Path(directory_log_path) if directory_log_path else default_log_path("directory", now),
        audit_log_path=Path(audit_log_path) if audit_log_path else default_log_path("audit", now),
        previous_log_path=Path(previous_log_path) if previous_log_path else None,
        test_mode=test_mode,
        timeout_seconds=timeout_seconds,
        language=language,
        logging=logging or LoggingConfig(),
    )
