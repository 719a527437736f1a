"""
Snapshot store for directory and audit logs.

Logs are flat, pretty-printed JSON files. Writes are not atomic: a crash
mid-write can leave a truncated file.
"""

import json
from pathlib import Path
from typing import Any

from .exceptions import ParseError, PersistenceError, PreviousSnapshotLoadError
from .models import AuditReport, DirectorySnapshot

JSON_INDENT = 4


def write_json(path: Path, document: Any) -> Path:
    """
    Write a document as pretty-printed JSON.

    Args:
        path: Output file; parent directories are created
        document: JSON-serializable document

    Returns:
        The written path

    Raises:
        PersistenceError: If the file cannot be written
    """
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(document, f, indent=JSON_INDENT, ensure_ascii=False)
    except OSError as e:
        raise PersistenceError(
            code="io_error",
            message=f"Failed to write {path}: {e}",
            details={"path": str(path)},
        ) from e
    return path


def write_directory_log(path: Path, snapshot: DirectorySnapshot) -> Path:
    """Persist a directory snapshot verbatim."""
    return write_json(path, snapshot.to_dict())


def write_audit_log(path: Path, report: AuditReport) -> Path:
    """Persist an audit report."""
    return write_json(path, report.to_dict())


def load_previous_snapshot(path: Path) -> DirectorySnapshot:
    """
    Load the directory log of an earlier run.

    Args:
        path: Directory log file

    Returns:
        The parsed DirectorySnapshot

    Raises:
        PreviousSnapshotLoadError: If the file is missing, unreadable, not
            JSON, or not a directory log
    """
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            raw_data = json.load(f)
    except FileNotFoundError as e:
        raise PreviousSnapshotLoadError(
            code="not_found",
            message=f"No such file: {path}",
            details={"path": str(path)},
        ) from e
    except json.JSONDecodeError as e:
        raise PreviousSnapshotLoadError(
            code="parse_error",
            message=f"Failed to parse {path}: {e}",
            details={"path": str(path)},
        ) from e
    except (OSError, UnicodeDecodeError) as e:
        raise PreviousSnapshotLoadError(
            code="io_error",
            message=f"Failed to read {path}: {e}",
            details={"path": str(path)},
        ) from e

    try:
        return DirectorySnapshot.from_dict(raw_data)
    except ParseError as e:
        raise PreviousSnapshotLoadError(
            code="parse_error",
            message=f"{path} is not a directory log: {e.message}",
            details={"path": str(path), **e.details},
        ) from e
