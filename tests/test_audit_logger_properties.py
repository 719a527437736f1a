"""
Property-based tests for the audit logger.

Uses Hypothesis for property-based testing to verify output formats and
level filtering.
"""

import json
from io import StringIO

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from vci_directory_auditor.audit_logger import AuditLogger
from vci_directory_auditor.enums import LogLevel
from vci_directory_auditor.exceptions import NetworkError


@st.composite
def component_name_strategy(draw) -> str:
    """Generate valid component names."""
    return draw(st.text(
        alphabet=st.sampled_from("abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789_-"),
        min_size=1,
        max_size=50,
    ))


@st.composite
def message_strategy(draw) -> str:
    """Generate valid log messages."""
    return draw(st.text(
        alphabet=st.characters(
            whitelist_categories=('L', 'N', 'P', 'S', 'Zs'),
            blacklist_characters='\x00\n\r',
        ),
        min_size=1,
        max_size=200,
    ))


@st.composite
def data_strategy(draw) -> dict:
    """Generate simple JSON-serializable data dictionaries."""
    return draw(st.dictionaries(
        st.text(alphabet="abcdefghijklmnopqrstuvwxyz_", min_size=1, max_size=15),
        st.one_of(
            st.text(max_size=30),
            st.integers(min_value=-1000, max_value=1000),
            st.booleans(),
            st.none(),
        ),
        max_size=5,
    ))


class TestDualFormatProperty:
    """
    Property-based tests for dual format logging.

    **Feature: vci-directory-auditor, Property 12: Log entries render in both formats**
    """

    @given(
        level=st.sampled_from(list(LogLevel)),
        component=component_name_strategy(),
        message=message_strategy(),
        data=data_strategy(),
    )
    @settings(max_examples=100)
    def test_both_formats_written(self, level: LogLevel, component: str, message: str, data: dict) -> None:
        """
        Property 12: With output_format='both' every entry yields one JSON
        line and one text line carrying the same content.

        **Feature: vci-directory-auditor, Property 12: Log entries render in both formats**
        """
        stream = StringIO()
        logger = AuditLogger(output_format="both", output_stream=stream, min_level=LogLevel.DEBUG)
        entry = logger.log(level, component, message, data)

        lines = stream.getvalue().rstrip("\n").split("\n")
        assert len(lines) == 2

        parsed = json.loads(lines[0])
        assert parsed["level"] == level.value
        assert parsed["component"] == component
        assert parsed["message"] == message
        assert parsed["data"] == data
        assert parsed["timestamp"] == entry.timestamp

        assert lines[1].startswith(f"[{entry.timestamp}] {level.value.upper()} [{component}]")
        assert message in lines[1]

    def test_rejects_unknown_format(self) -> None:
        with pytest.raises(ValueError):
            AuditLogger(output_format="xml")


class TestLevelFilterProperty:
    """
    Property-based tests for minimum level filtering.

    **Feature: vci-directory-auditor, Property 13: Entries below the minimum level are dropped**
    """

    @given(level=st.sampled_from(list(LogLevel)), min_level=st.sampled_from(list(LogLevel)))
    @settings(max_examples=50)
    def test_filtering(self, level: LogLevel, min_level: LogLevel) -> None:
        """
        Property 13: An entry is kept iff its level ranks at or above min_level.

        **Feature: vci-directory-auditor, Property 13: Entries below the minimum level are dropped**
        """
        stream = StringIO()
        logger = AuditLogger(output_format="text", output_stream=stream, min_level=min_level)
        entry = logger.log(level, "Test", "message")

        if level.rank >= min_level.rank:
            assert entry is not None
            assert logger.entries == [entry]
            assert stream.getvalue()
        else:
            assert entry is None
            assert logger.entries == []
            assert stream.getvalue() == ""


class TestErrorContext:
    """log_error records exception and request context."""

    def test_error_context(self) -> None:
        logger = AuditLogger(output_format="json", output_stream=StringIO())
        error = NetworkError(code="timeout", message="Directory request timed out after 5.0s")
        entry = logger.log_error(
            "AuditOrchestrator",
            "Audit aborted",
            error=error,
            request_url="https://example.org/vci-issuers.json",
            response_status_code=504,
            additional_data={"attempt": 1},
        )
        assert entry.level == LogLevel.ERROR
        assert entry.data == {
            "attempt": 1,
            "error_message": "Directory request timed out after 5.0s",
            "error_type": "NetworkError",
            "error_code": "timeout",
            "request_url": "https://example.org/vci-issuers.json",
            "response_status_code": 504,
        }

    def test_recovered_failure_logged_as_warning(self) -> None:
        logger = AuditLogger(output_format="text", output_stream=StringIO())
        entry = logger.log_error("DirectoryFetcher", "Key set fetch failed", level=LogLevel.WARN)
        assert entry.level == LogLevel.WARN

    def test_clear_entries(self) -> None:
        logger = AuditLogger(output_format="text", output_stream=StringIO())
        logger.log(LogLevel.INFO, "Test", "one")
        logger.clear_entries()
        assert logger.entries == []
