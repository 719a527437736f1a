"""
VCI Directory Auditor - integrity checks for a directory of key-publishing issuers.

This package fetches an issuer directory and every issuer's published JWK
set, writes a snapshot of the result, and reports anomalies and changes
against the snapshot of an earlier run.
"""

__version__ = "0.1.0"
__author__ = "VCI Directory Auditor Team"

from vci_directory_auditor.exceptions import (
    AuditorError,
    NetworkError,
    ParseError,
    PreviousSnapshotLoadError,
    PersistenceError,
)
from vci_directory_auditor.enums import (
    FetchErrorCode,
    FetchStatus,
    LogLevel,
)
from vci_directory_auditor.models import (
    Issuer,
    Directory,
    Key,
    IssuerSnapshot,
    DirectorySnapshot,
    IssuerKids,
    AuditReport,
)
from vci_directory_auditor.dedup import get_duplicates
from vci_directory_auditor.config import (
    VCI_ISSUERS_DIR_URL,
    LoggingConfig,
    AuditorConfig,
    create_config,
    default_log_path,
    format_snapshot_time,
)
from vci_directory_auditor.jwks_client import (
    JWKSClient,
    KeySetResponse,
    KeySetError,
    jwks_url,
)
from vci_directory_auditor.fetcher import DirectoryFetcher
from vci_directory_auditor.auditor import (
    audit,
    find_removed_kids,
    normalize_issuer_url,
)
from vci_directory_auditor.snapshot_store import (
    load_previous_snapshot,
    write_audit_log,
    write_directory_log,
)
from vci_directory_auditor.audit_logger import (
    AuditLogger,
    LogEntry,
)
from vci_directory_auditor.i18n import get_message
from vci_directory_auditor.orchestrator import (
    AuditOrchestrator,
    AuditRunResult,
)
from vci_directory_auditor.cli import (
    main as cli_main,
    create_parser,
)

__all__ = [
    # Exceptions
    "AuditorError",
    "NetworkError",
    "ParseError",
    "PreviousSnapshotLoadError",
    "PersistenceError",
    # Enums
    "FetchErrorCode",
    "FetchStatus",
    "LogLevel",
    # Models
    "Issuer",
    "Directory",
    "Key",
    "IssuerSnapshot",
    "DirectorySnapshot",
    "IssuerKids",
    "AuditReport",
    # Dedup
    "get_duplicates",
    # Configuration
    "VCI_ISSUERS_DIR_URL",
    "LoggingConfig",
    "AuditorConfig",
    "create_config",
    "default_log_path",
    "format_snapshot_time",
    # JWKS Client
    "JWKSClient",
    "KeySetResponse",
    "KeySetError",
    "jwks_url",
    # Fetcher
    "DirectoryFetcher",
    # Auditor
    "audit",
    "find_removed_kids",
    "normalize_issuer_url",
    # Snapshot Store
    "load_previous_snapshot",
    "write_audit_log",
    "write_directory_log",
    # Audit Logger
    "AuditLogger",
    "LogEntry",
    # I18n
    "get_message",
    # Orchestrator
    "AuditOrchestrator",
    "AuditRunResult",
    # CLI
    "cli_main",
    "create_parser",
]
