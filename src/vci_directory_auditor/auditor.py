"""
Directory auditor.

Derives the audit report from a directory snapshot, optionally diffing it
against the snapshot of an earlier run. All functions here are pure.

Keys are compared by ``kid`` only; key material is never verified
cryptographically.
"""

import re
from typing import Optional

from .dedup import get_duplicates
from .models import AuditReport, DirectorySnapshot, IssuerKids

# Test fixtures live under numbered "audit-N" folders to simulate a
# directory changing over time
_TEST_ISSUER_SEGMENT = re.compile(r"audit-[0-9]")


def normalize_issuer_url(iss: str, is_test_mode: bool) -> str:
    """
    Get the comparison key of an issuer.

    In test mode the first ``audit-<digit>`` segment is replaced with
    ``audit``; otherwise the identifier is used verbatim.
    """
    if not is_test_mode:
        return iss
    return _TEST_ISSUER_SEGMENT.sub("audit", iss, count=1)


def issuer_urls(snapshot: DirectorySnapshot, is_test_mode: bool) -> list[str]:
    """Normalized issuer identifiers of a snapshot, in snapshot order."""
    return [normalize_issuer_url(info.issuer.iss, is_test_mode) for info in snapshot.issuer_info]


def issuer_kids(snapshot: DirectorySnapshot, is_test_mode: bool) -> list[IssuerKids]:
    """Key identifiers per issuer, keyed by normalized identifier."""
    return [
        IssuerKids(iss=normalize_issuer_url(info.issuer.iss, is_test_mode), kids=info.kids)
        for info in snapshot.issuer_info
    ]


def find_removed_kids(
    previous: list[IssuerKids], current: list[IssuerKids]
) -> list[IssuerKids]:
    """
    Find keys that disappeared from issuers present in both snapshots.

    Every (previous, current) pair with the same ``iss`` is compared, so an
    issuer listed more than once is checked once per matching pair.
    Removed kids keep their order from the previous key set.
    """
    removed: list[IssuerKids] = []
    for prev in previous:
        for cur in current:
            if prev.iss != cur.iss:
                continue
            current_kids = set(cur.kids)
            gone = [kid for kid in prev.kids if kid not in current_kids]
            if gone:
                removed.append(IssuerKids(iss=prev.iss, kids=gone))
    return removed


def audit(
    is_test_mode: bool,
    current: DirectorySnapshot,
    previous: Optional[DirectorySnapshot] = None,
) -> AuditReport:
    """
    Audit a directory snapshot.

    Args:
        is_test_mode: Normalize test fixture issuer URLs before comparing
        current: Snapshot of this run
        previous: Optional snapshot of an earlier run

    Returns:
        AuditReport; the diff fields are set only when ``previous`` is given
    """
    current_iss = issuer_urls(current, is_test_mode)

    report = AuditReport(
        directory=current.directory,
        time=current.time,
        issuer_count=len(current.issuer_info),
        issuers_with_errors=[info for info in current.issuer_info if info.has_errors],
        duplicated_kids=get_duplicates(
            kid for info in current.issuer_info for kid in info.kids
        ),
        duplicated_iss=get_duplicates(current_iss),
        duplicated_names=get_duplicates(info.issuer.name for info in current.issuer_info),
    )

    if previous is not None:
        previous_iss = issuer_urls(previous, is_test_mode)
        previous_set = set(previous_iss)
        current_set = set(current_iss)
        report.new_issuer_count = sum(1 for iss in current_iss if iss not in previous_set)
        report.deleted_issuer_count = sum(1 for iss in previous_iss if iss not in current_set)
        report.removed_kids = find_removed_kids(
            issuer_kids(previous, is_test_mode),
            issuer_kids(current, is_test_mode),
        )

    return report
