"""Validation result, policy and step record models."""

from __future__ import annotations

from collections.abc import Iterable

from pydantic import BaseModel, ConfigDict, Field, model_validator

from stepgate.models.severity import Issue, IssueKind, Severity


class ValidationPolicy(BaseModel):
    """Thresholds and per-step exceptions applied by the output validator.

    ``allow_empty_steps`` lists steps whose structured output may
    legitimately be an empty collection; for those steps emptiness is
    reported as a WARNING instead of halting the run.
    """

    model_config = ConfigDict(frozen=True)

    small_output_threshold: int = Field(default=50, ge=0)
    min_document_length: int = Field(default=100, ge=0)
    allow_empty_steps: frozenset[int] = frozenset()


class ValidationResult(BaseModel):
    """Outcome of validating one step's output artifact.

    ``can_continue`` is True exactly when no finding is CRITICAL.
    """

    model_config = ConfigDict(frozen=True)

    step: int
    severity: Severity
    issues: tuple[str, ...] = ()
    can_continue: bool
    findings: tuple[Issue, ...] = ()

    @model_validator(mode="after")
    def _check_consistency(self) -> ValidationResult:
        if self.can_continue != (self.severity != Severity.CRITICAL):
            raise ValueError(
                f"can_continue={self.can_continue} contradicts severity={self.severity.value}"
            )
        if self.findings:
            expected = Severity.highest(f.severity for f in self.findings)
            if expected != self.severity:
                raise ValueError(
                    f"severity {self.severity.value} does not match findings ({expected.value})"
                )
        return self

    @classmethod
    def from_findings(cls, step: int, findings: Iterable[Issue]) -> ValidationResult:
        """Aggregate *findings* into a result (max severity wins)."""
        findings = tuple(findings)
        severity = Severity.highest(f.severity for f in findings)
        return cls(
            step=step,
            severity=severity,
            issues=tuple(f.message for f in findings),
            can_continue=severity != Severity.CRITICAL,
            findings=findings,
        )

    @classmethod
    def critical(cls, step: int, kind: IssueKind, message: str) -> ValidationResult:
        """Short-circuit result carrying a single CRITICAL issue."""
        return cls.from_findings(
            step, [Issue(kind=kind, severity=Severity.CRITICAL, message=message)]
        )

    @property
    def warnings(self) -> tuple[str, ...]:
        """Messages of the advisory (WARNING) findings."""
        return tuple(f.message for f in self.findings if f.severity == Severity.WARNING)


class StepRecord(BaseModel):
    """One completed step as seen by the gate controller."""

    model_config = ConfigDict(frozen=True)

    step: int
    validation: ValidationResult
    duration_ms: int = 0
