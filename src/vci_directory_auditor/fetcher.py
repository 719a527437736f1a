"""
Directory fetcher.

Downloads the issuer directory, then every issuer's key set concurrently,
and assembles the directory snapshot. A failing issuer only marks its own
entry; the snapshot is built once every fetch has settled.
"""

import asyncio
from datetime import datetime
from typing import Optional

from .audit_logger import AuditLogger
from .config import format_snapshot_time
from .enums import FetchStatus, LogLevel
from .jwks_client import JWKSClient, jwks_url
from .models import DirectorySnapshot, Issuer, IssuerSnapshot


class DirectoryFetcher:
    """Builds a DirectorySnapshot from live network data."""

    def __init__(
        self,
        client: JWKSClient,
        logger: Optional[AuditLogger] = None,
    ) -> None:
        """
        Initialize the fetcher.

        Args:
            client: Client used for the directory and key set requests
            logger: Optional audit logger
        """
        self._client = client
        self._logger = logger

    async def fetch(self, directory_url: str, now: datetime) -> DirectorySnapshot:
        """
        Fetch the directory and all issuer key sets.

        Args:
            directory_url: URL of the directory document
            now: Run start time recorded in the snapshot

        Returns:
            DirectorySnapshot with one entry per issuer, in directory order

        Raises:
            NetworkError: If the directory itself can't be downloaded
            ParseError: If the directory document is malformed
        """
        self._log(LogLevel.INFO, f"Fetching directory {directory_url}", {"url": directory_url})
        directory = await self._client.fetch_directory(directory_url)
        issuers = directory.participating_issuers

        self._log(
            LogLevel.INFO,
            f"Fetching key sets of {len(issuers)} issuer(s)",
            {"issuer_count": len(issuers)},
        )
        outcomes = await asyncio.gather(
            *(self._fetch_issuer(issuer) for issuer in issuers),
            return_exceptions=True,
        )

        issuer_info: list[IssuerSnapshot] = []
        for issuer, outcome in zip(issuers, outcomes):
            if isinstance(outcome, IssuerSnapshot):
                issuer_info.append(outcome)
            else:
                # _fetch_issuer records expected failures itself; anything
                # else still only affects this issuer's slot
                issuer_info.append(IssuerSnapshot(
                    issuer=issuer,
                    keys=[],
                    errors=[f"{type(outcome).__name__}: {outcome}"],
                ))
                self._log_issuer_failure(issuer, str(outcome), None)

        failed = sum(1 for info in issuer_info if info.has_errors)
        self._log(
            LogLevel.INFO,
            f"Fetched {len(issuer_info)} issuer(s), {failed} with errors",
            {"issuer_count": len(issuer_info), "failed_count": failed},
        )

        return DirectorySnapshot(
            directory=directory_url,
            time=format_snapshot_time(now),
            issuer_info=issuer_info,
        )

    async def _fetch_issuer(self, issuer: Issuer) -> IssuerSnapshot:
        response = await self._client.fetch_key_set(issuer)
        if response.status == FetchStatus.OK:
            return IssuerSnapshot(issuer=issuer, keys=response.keys, errors=[])

        message = response.error.describe() if response.error else "unknown error"
        status_code = response.error.http_status_code if response.error else None
        self._log_issuer_failure(issuer, message, status_code)
        return IssuerSnapshot(issuer=issuer, keys=[], errors=[message])

    def _log_issuer_failure(
        self, issuer: Issuer, message: str, status_code: Optional[int]
    ) -> None:
        if self._logger:
            self._logger.log_error(
                "DirectoryFetcher",
                f"Key set fetch failed for {issuer.iss}",
                request_url=jwks_url(issuer.iss),
                response_status_code=status_code,
                additional_data={"iss": issuer.iss, "error": message},
                level=LogLevel.WARN,
            )

    def _log(self, level: LogLevel, message: str, data: dict) -> None:
        if self._logger:
            self._logger.log(level, "DirectoryFetcher", message, data)
