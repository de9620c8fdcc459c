"""Output validator: fast structural checks on a step's output artifact.

Checks run in a fixed order and the fatal ones short-circuit:

    exists -> readable -> parses (structured data) -> non-empty / size
           -> document root present (rendered documents)

Problems are never raised.  They come back as a ``ValidationResult`` so
the gate controller can decide without exception-driven control flow.
The validator only reads the filesystem.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any

from stepgate.models.severity import Issue, IssueKind, Severity
from stepgate.models.validation import ValidationPolicy, ValidationResult

logger = logging.getLogger(__name__)

# extension -> (format label, parser)
STRUCTURED_FORMATS: dict[str, tuple[str, Callable[[str], Any]]] = {
    ".json": ("JSON", json.loads),
}

# extension -> (format label, document-root marker)
DOCUMENT_FORMATS: dict[str, tuple[str, str]] = {
    ".html": ("HTML", "<html"),
    ".htm": ("HTML", "<html"),
}


def count_items(data: Any) -> int:
    """Return the element count of a list or the key count of a mapping.

    Scalars and ``null`` have no items, so a top-level JSON string, number
    or ``null`` is reported as empty output (CRITICAL unless the step is
    in ``allow_empty_steps``).  This holds however long the string is.
    """
    if isinstance(data, (list, dict)):
        return len(data)
    return 0


class OutputValidator:
    """Validates declared step outputs against a ``ValidationPolicy``.

    Parameters
    ----------
    policy:
        Size thresholds and per-step empty-output exceptions.  Defaults
        to ``ValidationPolicy()``.
    """

    def __init__(self, policy: ValidationPolicy | None = None) -> None:
        self.policy = policy or ValidationPolicy()

    def validate(
        self,
        step: int,
        project_root: Path | str,
        output_map: Mapping[int, str],
    ) -> ValidationResult:
        """Validate the artifact declared for *step* under *project_root*."""
        relative = output_map.get(step)
        if relative is None:
            logger.debug("No output declared for step %d", step)
            return ValidationResult.critical(
                step,
                IssueKind.MISSING_OUTPUT,
                f"Output file missing: <no output declared for step {step}>",
            )

        path = Path(project_root) / relative
        if not path.exists():
            return ValidationResult.critical(
                step, IssueKind.MISSING_OUTPUT, f"Output file missing: {relative}"
            )

        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            return ValidationResult.critical(
                step, IssueKind.UNREADABLE_OUTPUT, f"Unreadable output {relative}: {exc}"
            )

        suffix = path.suffix.lower()
        findings: list[Issue] = []

        if suffix in STRUCTURED_FORMATS:
            label, parse = STRUCTURED_FORMATS[suffix]
            try:
                data = parse(content)
            except (ValueError, RecursionError) as exc:
                return ValidationResult.critical(
                    step,
                    IssueKind.MALFORMED_STRUCTURED_DATA,
                    f"Invalid {label} in {relative}: {exc}",
                )
            findings.extend(self._check_structured(step, relative, content, data))

        if suffix in DOCUMENT_FORMATS:
            label, marker = DOCUMENT_FORMATS[suffix]
            if (
                len(content) < self.policy.min_document_length
                or marker not in content.lower()
            ):
                return ValidationResult.critical(
                    step,
                    IssueKind.INVALID_RENDERED_DOCUMENT,
                    f"Invalid {label} in {relative}",
                )

        result = ValidationResult.from_findings(step, findings)
        logger.debug(
            "Step %d output %s: %s (%d issues)",
            step,
            relative,
            result.severity.value,
            len(result.issues),
        )
        return result

    def _check_structured(
        self, step: int, relative: str, content: str, data: Any
    ) -> list[Issue]:
        findings: list[Issue] = []
        if count_items(data) == 0:
            severity = (
                Severity.WARNING
                if step in self.policy.allow_empty_steps
                else Severity.CRITICAL
            )
            findings.append(
                Issue(
                    kind=IssueKind.EMPTY_OUTPUT,
                    severity=severity,
                    message=f"{relative} is empty (0 keys/items)",
                )
            )
        if len(content) < self.policy.small_output_threshold:
            findings.append(
                Issue(
                    kind=IssueKind.SMALL_OUTPUT,
                    severity=Severity.WARNING,
                    message=f"{relative} is very small ({len(content)} bytes)",
                )
            )
        return findings


def validate_output(
    step: int,
    project_root: Path | str,
    output_map: Mapping[int, str],
    policy: ValidationPolicy | None = None,
) -> ValidationResult:
    """Convenience wrapper: ``OutputValidator(policy).validate(...)``."""
    return OutputValidator(policy).validate(step, project_root, output_map)
