"""Structured result of a schema validation run."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum

import orjson


class Severity(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class FindingKind(str, Enum):
    """What a finding is about."""

    LIVE_ONLY_FIELD = "live_only_field"
    MISSING_FIELD = "missing_field"
    PROPERTY_MISMATCH = "property_mismatch"
    UNKNOWN_PROPERTY = "unknown_property"
    UNKNOWN_FIELD_TYPE = "unknown_field_type"
    INVALID_FIELD = "invalid_field"
    UNRESOLVED_COPY_FIELD = "unresolved_copy_field"
    INVALID_COPY_FIELD = "invalid_copy_field"
    MISSING_COPY_FIELD = "missing_copy_field"
    LIVE_ONLY_COPY_FIELD = "live_only_copy_field"
    COPY_FIELD_RULE = "copy_field_rule"


class CheckState(str, Enum):
    """Lifecycle of one validation run."""

    IDLE = "idle"
    FETCHING = "fetching"
    PARSING = "parsing"
    VALIDATED = "validated"
    FAILED = "failed"


class FailureKind(str, Enum):
    """Why a run ended in FAILED before any validation could happen."""

    TRANSPORT = "transport"
    PROTOCOL = "protocol"
    CATALOG = "catalog"


@dataclass(frozen=True, slots=True)
class Finding:
    """One discrepancy between the live and the expected schema."""

    kind: FindingKind
    severity: Severity
    message: str
    subject: str | None = None

    def to_dict(self) -> dict[str, str | None]:
        return {
            "kind": self.kind.value,
            "severity": self.severity.value,
            "message": self.message,
            "subject": self.subject,
        }


@dataclass(slots=True)
class ValidationReport:
    """Findings of one validation run plus how the run ended."""

    collection: str | None = None
    state: CheckState = CheckState.IDLE
    schema_version: float | None = None
    findings: list[Finding] = field(default_factory=list)
    failure_kind: FailureKind | None = None
    error: str | None = None
    duration_s: float = 0.0

    def add(self, kind: FindingKind, severity: Severity, message: str, subject: str | None = None) -> Finding:
        finding = Finding(kind=kind, severity=severity, message=message, subject=subject)
        self.findings.append(finding)
        return finding

    def fail(self, failure_kind: FailureKind, error: str) -> None:
        self.state = CheckState.FAILED
        self.failure_kind = failure_kind
        self.error = error

    def by_kind(self, kind: FindingKind) -> list[Finding]:
        return [finding for finding in self.findings if finding.kind is kind]

    def by_severity(self, severity: Severity) -> list[Finding]:
        return [finding for finding in self.findings if finding.severity is severity]

    @property
    def live_only(self) -> list[Finding]:
        return self.by_kind(FindingKind.LIVE_ONLY_FIELD)

    @property
    def expected_only(self) -> list[Finding]:
        return self.by_kind(FindingKind.MISSING_FIELD)

    @property
    def mismatched(self) -> list[Finding]:
        return self.by_kind(FindingKind.PROPERTY_MISMATCH)

    @property
    def has_errors(self) -> bool:
        return any(finding.severity is Severity.ERROR for finding in self.findings)

    @property
    def has_warnings(self) -> bool:
        return any(finding.severity is Severity.WARNING for finding in self.findings)

    @property
    def ok(self) -> bool:
        return self.state is CheckState.VALIDATED and not self.has_errors

    @property
    def status(self) -> str:
        if self.state is CheckState.FAILED:
            return "failed"
        if self.has_errors:
            return "invalid"
        if self.state is CheckState.VALIDATED:
            return "ok"
        return self.state.value

    def to_dict(self) -> dict[str, object]:
        payload = asdict(self)
        payload["state"] = self.state.value
        payload["failure_kind"] = self.failure_kind.value if self.failure_kind else None
        payload["findings"] = [finding.to_dict() for finding in self.findings]
        payload["status"] = self.status
        return payload

    def to_json(self) -> str:
        return orjson.dumps(self.to_dict(), option=orjson.OPT_SORT_KEYS).decode("utf-8")
