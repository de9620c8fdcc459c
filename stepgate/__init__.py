"""Stepgate: automatic continue-or-halt gating between pipeline steps.

After every step the gate validates the step's declared output artifact,
halts only on critical problems, and routes progress, warnings, and
questions to an asynchronous notification channel:
  - Structural output validation (missing, malformed, empty, undersized)
  - Severity aggregation: OK < WARNING < CRITICAL, only CRITICAL halts
  - Best-effort notifications with local logging fallback and timeouts
  - Sequential pipeline runner with a validate-only mode
"""

__version__ = "0.1.0"
__description__ = "Inter-step validation and continue/halt gating for agent pipelines"

from stepgate.core.controller import GateController
from stepgate.core.runner import PipelineRunner, RunOutcome, RunState
from stepgate.core.validator import OutputValidator, validate_output
from stepgate.models.severity import Severity
from stepgate.models.validation import ValidationResult
from stepgate.routing.formatting import format_event
from stepgate.routing.notifier import NotificationSink

__all__ = [
    "GateController",
    "NotificationSink",
    "OutputValidator",
    "PipelineRunner",
    "RunOutcome",
    "RunState",
    "Severity",
    "ValidationResult",
    "format_event",
    "validate_output",
    "__version__",
]
