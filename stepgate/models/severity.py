"""Severity levels and validation issues for inter-step gating."""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum

from pydantic import BaseModel, ConfigDict


class Severity(str, Enum):
    """Classification of a validation issue.  Only CRITICAL halts a run."""

    OK = "ok"
    WARNING = "warning"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]

    @classmethod
    def highest(cls, severities: Iterable[Severity]) -> Severity:
        """Return the most severe level in *severities* (OK when empty)."""
        result = cls.OK
        for severity in severities:
            if severity.rank > result.rank:
                result = severity
        return result


_SEVERITY_RANK: dict[Severity, int] = {
    Severity.OK: 0,
    Severity.WARNING: 1,
    Severity.CRITICAL: 2,
}


class IssueKind(str, Enum):
    """Every kind of problem the output validator can report."""

    MISSING_OUTPUT = "missing_output"
    UNREADABLE_OUTPUT = "unreadable_output"
    MALFORMED_STRUCTURED_DATA = "malformed_structured_data"
    EMPTY_OUTPUT = "empty_output"
    SMALL_OUTPUT = "small_output"  # advisory
    INVALID_RENDERED_DOCUMENT = "invalid_rendered_document"


class Issue(BaseModel):
    """A single human-readable finding tagged with its severity."""

    model_config = ConfigDict(frozen=True)

    kind: IssueKind
    severity: Severity
    message: str
