"""Gate configuration model."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from stepgate.models.events import DEFAULT_REPORT_FILE
from stepgate.models.validation import ValidationPolicy

# Declared output artifact of each step of the standard pipeline.
DEFAULT_OUTPUT_MAP: dict[int, str] = {
    0: "0-outcome-requirements.json",
    1: "1-indexed-keywords.json",
    2: "2-categories-balanced.json",
    3: "3-presence-matrix.json",
    4: "4-grades-statistics.json",
    5: "5-timeline-history.json",
    6: "6-analysis-narratives.json",
    7: DEFAULT_REPORT_FILE,
}


class GateConfig(BaseModel):
    """Everything a GateController needs besides its notifier.

    ``output_map`` maps each step number to its artifact path relative
    to ``project_root``.
    """

    model_config = ConfigDict(frozen=True)

    project_root: Path = Path(".")
    output_map: dict[int, str] = Field(
        default_factory=lambda: dict(DEFAULT_OUTPUT_MAP)
    )
    final_step: int = 7
    policy: ValidationPolicy = ValidationPolicy()
    report_file: str = DEFAULT_REPORT_FILE
