"""
Data models for the directory auditor.

This module defines the upstream directory documents, the per-run directory
snapshot persisted as the directory log, and the audit report derived from it.
Every model serializes to the JSON field names used by the persisted logs and
can be rebuilt from them.
"""

from dataclasses import dataclass, field
from typing import Any, Optional

from .exceptions import ParseError


def _require_list(data: dict, key: str, context: str) -> list:
    value = data.get(key)
    if not isinstance(value, list):
        raise ParseError(
            code="parse_error",
            message=f"{context} is missing a '{key}' array",
            details={"field": key},
        )
    return value


def _require_object(value: Any, context: str) -> dict:
    if not isinstance(value, dict):
        raise ParseError(
            code="parse_error",
            message=f"{context} must be a JSON object",
            details={"type": type(value).__name__},
        )
    return value


@dataclass
class Issuer:
    """An entry of the issuer directory."""

    iss: str  # Base URL, unique within a directory
    name: str  # Display name, not guaranteed unique
    extra: dict = field(default_factory=dict)  # Other published fields, kept verbatim

    @classmethod
    def from_dict(cls, data: Any) -> "Issuer":
        data = _require_object(data, "Issuer entry")
        iss = data.get("iss")
        if not isinstance(iss, str):
            raise ParseError(
                code="parse_error",
                message="Issuer entry is missing an 'iss' string",
                details={"entry": data},
            )
        name = data.get("name")
        if name is None:
            name = ""
        extra = {k: v for k, v in data.items() if k not in ("iss", "name")}
        return cls(iss=iss, name=name if isinstance(name, str) else str(name), extra=extra)

    def to_dict(self) -> dict:
        return {"iss": self.iss, "name": self.name, **self.extra}


@dataclass
class Directory:
    """The upstream issuer directory document."""

    participating_issuers: list[Issuer]

    @classmethod
    def from_dict(cls, data: Any) -> "Directory":
        data = _require_object(data, "Issuer directory")
        entries = _require_list(data, "participating_issuers", "Issuer directory")
        return cls(participating_issuers=[Issuer.from_dict(e) for e in entries])


@dataclass
class Key:
    """
    A published public key.

    The JWK is kept exactly as served; no cryptographic validation is done.
    """

    raw: dict

    @property
    def kid(self) -> Optional[str]:
        kid = self.raw.get("kid")
        return kid if isinstance(kid, str) else None

    @classmethod
    def from_dict(cls, data: Any) -> "Key":
        return cls(raw=dict(_require_object(data, "Key")))

    def to_dict(self) -> dict:
        return dict(self.raw)


@dataclass
class IssuerSnapshot:
    """Result of fetching one issuer's key set."""

    issuer: Issuer
    keys: list[Key] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return len(self.errors) > 0

    @property
    def kids(self) -> list[str]:
        return [key.kid for key in self.keys if key.kid is not None]

    @classmethod
    def from_dict(cls, data: Any) -> "IssuerSnapshot":
        data = _require_object(data, "Issuer info")
        keys = data.get("keys", [])
        if not isinstance(keys, list):
            raise ParseError(
                code="parse_error",
                message="Issuer info 'keys' must be an array",
                details={"iss": data.get("issuer")},
            )
        errors = data.get("errors")
        if errors is None:
            errors = []
        elif not isinstance(errors, list):
            raise ParseError(
                code="parse_error",
                message="Issuer info 'errors' must be an array",
                details={"iss": data.get("issuer")},
            )
        return cls(
            issuer=Issuer.from_dict(data.get("issuer")),
            keys=[Key.from_dict(k) for k in keys],
            errors=[str(e) for e in errors],
        )

    def to_dict(self) -> dict:
        return {
            "issuer": self.issuer.to_dict(),
            "keys": [key.to_dict() for key in self.keys],
            "errors": list(self.errors),
        }


@dataclass
class DirectorySnapshot:
    """
    Point-in-time capture of a directory and each issuer's key set.

    Persisted verbatim as the directory log. ``issuer_info`` holds exactly one
    entry per directory issuer, in directory order.
    """

    directory: str  # Source URL
    time: str
    issuer_info: list[IssuerSnapshot] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> "DirectorySnapshot":
        data = _require_object(data, "Directory log")
        entries = _require_list(data, "issuerInfo", "Directory log")
        return cls(
            directory=str(data.get("directory", "")),
            time=str(data.get("time", "")),
            issuer_info=[IssuerSnapshot.from_dict(e) for e in entries],
        )

    def to_dict(self) -> dict:
        return {
            "directory": self.directory,
            "time": self.time,
            "issuerInfo": [info.to_dict() for info in self.issuer_info],
        }


@dataclass
class IssuerKids:
    """Key identifiers of one issuer, used when diffing snapshots."""

    iss: str
    kids: list[str]

    def to_dict(self) -> dict:
        return {"iss": self.iss, "kids": list(self.kids)}


@dataclass
class AuditReport:
    """
    Diff and anomaly summary of a directory snapshot.

    ``new_issuer_count``, ``deleted_issuer_count`` and ``removed_kids`` are
    None unless a previous snapshot was compared.
    """

    directory: str
    time: str
    issuer_count: int
    issuers_with_errors: list[IssuerSnapshot]
    duplicated_kids: list[str]
    duplicated_iss: list[str]
    duplicated_names: list[str]
    new_issuer_count: Optional[int] = None
    deleted_issuer_count: Optional[int] = None
    removed_kids: Optional[list[IssuerKids]] = None

    @property
    def compared(self) -> bool:
        return self.removed_kids is not None

    def to_dict(self) -> dict:
        report: dict = {
            "directory": self.directory,
            "time": self.time,
            "issuerCount": self.issuer_count,
        }
        if self.new_issuer_count is not None:
            report["newIssuerCount"] = self.new_issuer_count
        if self.deleted_issuer_count is not None:
            report["deletedIssuerCount"] = self.deleted_issuer_count
        report["issuersWithErrors"] = [info.to_dict() for info in self.issuers_with_errors]
        report["duplicatedKids"] = list(self.duplicated_kids)
        report["duplicatedIss"] = list(self.duplicated_iss)
        report["duplicatedNames"] = list(self.duplicated_names)
        if self.removed_kids is not None:
            report["removedKids"] = [entry.to_dict() for entry in self.removed_kids]
        return report
