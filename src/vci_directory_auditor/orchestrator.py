"""
Audit orchestrator.

Runs one audit end to end:
1. Fetch the current directory snapshot (fatal on failure)
2. Persist it as the directory log
3. Load the previous directory log, if one was given (warning on failure)
4. Audit the snapshot
5. Persist the audit report as the audit log

No step is retried.
"""

import sys
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, TextIO

from .audit_logger import AuditLogger
from .auditor import audit
from .config import AuditorConfig
from .enums import LogLevel
from .exceptions import PreviousSnapshotLoadError
from .fetcher import DirectoryFetcher
from .i18n import get_message
from .jwks_client import JWKSClient
from .models import AuditReport, DirectorySnapshot
from .snapshot_store import load_previous_snapshot, write_audit_log, write_directory_log


@dataclass
class AuditRunResult:
    """Result of an orchestrated audit run."""

    snapshot: DirectorySnapshot
    report: AuditReport
    previous_loaded: bool


class AuditOrchestrator:
    """
    Coordinates the fetcher, the auditor and the snapshot store.

    Progress messages go to ``output`` (stdout by default) in the configured
    language; structured entries go to the optional logger.
    """

    def __init__(
        self,
        config: AuditorConfig,
        client: Optional[JWKSClient] = None,
        logger: Optional[AuditLogger] = None,
        output: Optional[TextIO] = None,
    ) -> None:
        """
        Initialize the orchestrator.

        Args:
            config: Run configuration
            client: Optional client; one is created from the config otherwise
            logger: Optional audit logger
            output: Stream for progress messages (defaults to sys.stdout)
        """
        self._config = config
        self._client = client or JWKSClient(timeout=config.timeout_seconds)
        self._logger = logger
        self._output = output or sys.stdout
        self._fetcher = DirectoryFetcher(self._client, logger=logger)

    async def __aenter__(self) -> "AuditOrchestrator":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self._client.close()

    async def run(self, now: datetime) -> AuditRunResult:
        """
        Run the audit.

        Args:
            now: Run start time, recorded in both logs

        Returns:
            AuditRunResult with the snapshot and the report

        Raises:
            NetworkError: If the directory can't be downloaded
            ParseError: If the directory document is malformed
            PersistenceError: If a log file can't be written
        """
        config = self._config
        self._print("cli.auditing", directory=config.directory_url)

        snapshot = await self._fetcher.fetch(config.directory_url, now)
        write_directory_log(config.directory_log_path, snapshot)
        self._print("cli.directory_log_written", path=config.directory_log_path)

        previous = self._load_previous()

        report = audit(config.test_mode, snapshot, previous)
        self._log_info(
            "Audit completed",
            {
                "issuer_count": report.issuer_count,
                "issuers_with_errors": len(report.issuers_with_errors),
                "duplicated_kids": len(report.duplicated_kids),
                "duplicated_iss": len(report.duplicated_iss),
                "duplicated_names": len(report.duplicated_names),
                "compared": report.compared,
            },
        )

        write_audit_log(config.audit_log_path, report)
        self._print("cli.audit_log_written", path=config.audit_log_path)

        return AuditRunResult(
            snapshot=snapshot,
            report=report,
            previous_loaded=previous is not None,
        )

    def _load_previous(self) -> Optional[DirectorySnapshot]:
        path = self._config.previous_log_path
        if path is None:
            return None

        try:
            previous = load_previous_snapshot(path)
        except PreviousSnapshotLoadError as e:
            self._print("cli.previous_unreadable", path=path, error=e.message)
            if self._logger:
                self._logger.log_error(
                    "AuditOrchestrator",
                    "Previous directory log not loaded; auditing without a diff",
                    error=e,
                    additional_data={"path": str(path)},
                    level=LogLevel.WARN,
                )
            return None

        self._log_info(
            f"Loaded previous directory log from {path}",
            {"path": str(path), "time": previous.time, "issuer_count": len(previous.issuer_info)},
        )
        return previous

    def _print(self, key: str, **kwargs) -> None:
        print(get_message(key, self._config.language, **kwargs), file=self._output)

    def _log_info(self, message: str, data: dict) -> None:
        if self._logger:
            self._logger.log(LogLevel.INFO, "AuditOrchestrator", message, data)

    @property
    def config(self) -> AuditorConfig:
        return self._config
