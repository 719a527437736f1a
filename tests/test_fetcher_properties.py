"""
Property-based tests for the directory fetcher.

A fake client stands in for the network so completion order, failures and
concurrency can be controlled per issuer.
"""

import asyncio
from datetime import datetime
from io import StringIO

import httpx
import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from vci_directory_auditor.audit_logger import AuditLogger
from vci_directory_auditor.enums import FetchErrorCode, FetchStatus, LogLevel
from vci_directory_auditor.exceptions import NetworkError
from vci_directory_auditor.fetcher import DirectoryFetcher
from vci_directory_auditor.jwks_client import JWKSClient, KeySetError, KeySetResponse, jwks_url
from vci_directory_auditor.models import Directory, Issuer, Key

DIRECTORY_URL = "https://example.org/vci-issuers.json"
NOW = datetime(2024, 1, 31, 12, 0, 5)


class FakeJWKSClient:
    """Fake client answering from per-issuer outcomes."""

    def __init__(self, outcomes: dict, delays: dict = None, barrier_size: int = 0) -> None:
        # outcomes: iss -> list of kids, or an Exception to raise, or None for a failed fetch
        self._outcomes = outcomes
        self._delays = delays or {}
        self._barrier_size = barrier_size
        self._started = 0
        self._all_started = None
        self.requested: list[str] = []

    async def fetch_directory(self, directory_url: str) -> Directory:
        return Directory(participating_issuers=[
            Issuer(iss=iss, name=f"Issuer {n}") for n, iss in enumerate(self._outcomes)
        ])

    async def fetch_key_set(self, issuer: Issuer) -> KeySetResponse:
        self.requested.append(issuer.iss)
        if self._all_started is None:
            self._all_started = asyncio.Event()
        self._started += 1
        if self._barrier_size and self._started >= self._barrier_size:
            self._all_started.set()
        if self._barrier_size:
            # Only completes if every fetch was launched before any finished
            await asyncio.wait_for(self._all_started.wait(), timeout=2.0)
        await asyncio.sleep(self._delays.get(issuer.iss, 0))

        outcome = self._outcomes[issuer.iss]
        if isinstance(outcome, Exception):
            raise outcome
        if outcome is None:
            return KeySetResponse(
                status=FetchStatus.ERROR,
                url=jwks_url(issuer.iss),
                error=KeySetError(
                    code=FetchErrorCode.TIMEOUT,
                    message="Request timed out after 5.0s",
                ),
            )
        return KeySetResponse(
            status=FetchStatus.OK,
            url=jwks_url(issuer.iss),
            keys=[Key(raw={"kty": "EC", "kid": kid}) for kid in outcome],
        )


def run_fetch(client, logger=None):
    return asyncio.run(DirectoryFetcher(client, logger=logger).fetch(DIRECTORY_URL, NOW))


@st.composite
def outcomes_strategy(draw) -> dict:
    """Generate per-issuer outcomes: kids, a recorded failure, or a raised exception."""
    count = draw(st.integers(min_value=0, max_value=8))
    outcomes = {}
    for n in range(count):
        outcomes[f"https://issuer{n}.example"] = draw(st.one_of(
            st.lists(st.sampled_from(["k1", "k2", "k3"]), unique=True, max_size=3),
            st.none(),
            st.just(RuntimeError("boom")),
        ))
    return outcomes


class TestSnapshotShape:
    """
    Property-based tests for snapshot assembly.

    **Feature: vci-directory-auditor, Property 9: One entry per issuer, in directory order**
    """

    @given(outcomes=outcomes_strategy(), delays=st.lists(st.sampled_from([0, 0.001, 0.003]), min_size=8, max_size=8))
    @settings(max_examples=30, deadline=None)
    def test_order_and_isolation(self, outcomes: dict, delays: list) -> None:
        """
        Property 9: issuerInfo preserves directory order whatever the
        completion order, and each issuer's outcome lands in its own slot.

        **Feature: vci-directory-auditor, Property 9: One entry per issuer, in directory order**
        """
        delay_map = dict(zip(outcomes, delays))
        snapshot = run_fetch(FakeJWKSClient(outcomes, delays=delay_map))

        assert [i.issuer.iss for i in snapshot.issuer_info] == list(outcomes)
        for info in snapshot.issuer_info:
            outcome = outcomes[info.issuer.iss]
            if isinstance(outcome, list):
                assert info.errors == []
                assert info.kids == outcome
            else:
                assert info.keys == []
                assert len(info.errors) > 0

    def test_snapshot_metadata(self) -> None:
        snapshot = run_fetch(FakeJWKSClient({"https://a.example": ["k1"]}))
        assert snapshot.directory == DIRECTORY_URL
        assert snapshot.time == "2024-01-31 12:00:05"

    def test_empty_directory(self) -> None:
        snapshot = run_fetch(FakeJWKSClient({}))
        assert snapshot.issuer_info == []

    def test_failure_does_not_affect_other_issuers(self) -> None:
        snapshot = run_fetch(FakeJWKSClient({
            "https://a.example": ["k1"],
            "https://b.example": None,
            "https://c.example": ConnectionResetError("reset by peer"),
            "https://d.example": ["k4"],
        }))
        by_iss = {i.issuer.iss: i for i in snapshot.issuer_info}
        assert by_iss["https://a.example"].kids == ["k1"]
        assert by_iss["https://d.example"].kids == ["k4"]
        assert by_iss["https://b.example"].errors == ["timeout: Request timed out after 5.0s"]
        assert by_iss["https://c.example"].errors == ["ConnectionResetError: reset by peer"]


class TestConcurrentFanOut:
    """All key set fetches are launched before any is awaited to completion."""

    def test_all_fetches_in_flight_together(self) -> None:
        outcomes = {f"https://issuer{n}.example": [f"k{n}"] for n in range(5)}
        client = FakeJWKSClient(outcomes, barrier_size=len(outcomes))
        snapshot = run_fetch(client)
        assert sorted(client.requested) == sorted(outcomes)
        assert all(not info.errors for info in snapshot.issuer_info)

    def test_slow_issuer_does_not_reorder(self) -> None:
        outcomes = {"https://slow.example": ["s"], "https://fast.example": ["f"]}
        client = FakeJWKSClient(outcomes, delays={"https://slow.example": 0.02})
        snapshot = run_fetch(client)
        assert [i.issuer.iss for i in snapshot.issuer_info] == list(outcomes)


class TestLogging:
    """Failures are logged as warnings by the fetcher."""

    def test_failed_issuer_logged(self) -> None:
        logger = AuditLogger(output_format="json", output_stream=StringIO())
        run_fetch(FakeJWKSClient({"https://a.example": None, "https://b.example": ["k1"]}), logger)
        warnings = [e for e in logger.entries if e.level == LogLevel.WARN]
        assert len(warnings) == 1
        assert warnings[0].data["iss"] == "https://a.example"
        assert warnings[0].data["request_url"] == "https://a.example/.well-known/jwks.json"


class TestWithHttpTransport:
    """End-to-end fetch through the real client on a mock transport."""

    def test_directory_and_key_sets(self) -> None:
        directory = {
            "participating_issuers": [
                {"iss": "https://a.example", "name": "A"},
                {"iss": "https://b.example", "name": "B"},
                {"iss": "https://c.example", "name": "C"},
            ]
        }

        def handler(request: httpx.Request) -> httpx.Response:
            url = str(request.url)
            if url == DIRECTORY_URL:
                return httpx.Response(200, json=directory)
            if url == "https://a.example/.well-known/jwks.json":
                return httpx.Response(200, json={"keys": [{"kty": "EC", "kid": "a1"}]})
            if url == "https://b.example/.well-known/jwks.json":
                raise httpx.ConnectTimeout("timed out", request=request)
            return httpx.Response(200, text="not json")

        async def run():
            async with JWKSClient(timeout=1.0, transport=httpx.MockTransport(handler)) as client:
                return await DirectoryFetcher(client).fetch(DIRECTORY_URL, NOW)

        snapshot = asyncio.run(run())
        assert [i.issuer.iss for i in snapshot.issuer_info] == [
            "https://a.example",
            "https://b.example",
            "https://c.example",
        ]
        a, b, c = snapshot.issuer_info
        assert a.kids == ["a1"] and a.errors == []
        assert b.keys == [] and b.errors and b.errors[0].startswith("timeout")
        assert c.keys == [] and c.errors and c.errors[0].startswith("parse_error")

    def test_unreachable_directory_aborts(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async def run():
            async with JWKSClient(timeout=1.0, transport=httpx.MockTransport(handler)) as client:
                return await DirectoryFetcher(client).fetch(DIRECTORY_URL, NOW)

        with pytest.raises(NetworkError):
            asyncio.run(run())
