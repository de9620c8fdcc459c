"""Runtime settings: env-driven via pydantic-settings.

Reads from a .env file and STEPGATE_* environment variables.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

from stepgate.models.config import DEFAULT_OUTPUT_MAP, GateConfig
from stepgate.models.events import DEFAULT_REPORT_FILE
from stepgate.models.validation import ValidationPolicy
from stepgate.routing.notifier import NotificationSink, PostCallback, SupportsLog


class GateSettings(BaseSettings):
    """Gate settings with environment variable overrides.

    Examples
    --------
    Override via environment::

        export STEPGATE_LOG_LEVEL=DEBUG
        export STEPGATE_CHANNEL_ID=1234567890
        export STEPGATE_ALLOW_EMPTY_STEPS='[3, 5]'

    Or via .env file::

        STEPGATE_FINAL_STEP=5
        STEPGATE_DELIVERY_TIMEOUT_SECONDS=3
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="STEPGATE_",
        env_file_encoding="utf-8",
    )

    # Logging
    log_level: str = "INFO"

    # Pipeline layout
    project_root: Path = Path(".")
    final_step: int = 7
    report_file: str = DEFAULT_REPORT_FILE

    # Validation thresholds
    small_output_threshold: int = 50
    min_document_length: int = 100
    allow_empty_steps: list[int] = []

    # Notifications
    channel_id: str | None = None
    delivery_timeout_seconds: float = 10.0

    def to_policy(self) -> ValidationPolicy:
        """Build the ``ValidationPolicy`` these settings describe."""
        return ValidationPolicy(
            small_output_threshold=self.small_output_threshold,
            min_document_length=self.min_document_length,
            allow_empty_steps=frozenset(self.allow_empty_steps),
        )

    def to_gate_config(
        self,
        output_map: dict[int, str] | None = None,
        project_root: Path | None = None,
    ) -> GateConfig:
        """Build a ``GateConfig``; the default output map is used when none is given."""
        return GateConfig(
            project_root=project_root or self.project_root,
            output_map=output_map if output_map is not None else dict(DEFAULT_OUTPUT_MAP),
            final_step=self.final_step,
            policy=self.to_policy(),
            report_file=self.report_file,
        )

    def to_notifier(
        self,
        post_callback: PostCallback | None = None,
        log: SupportsLog | None = None,
        *,
        clock: Callable[[], datetime] | None = None,
    ) -> NotificationSink:
        """Build a ``NotificationSink`` for the configured channel."""
        return NotificationSink(
            self.channel_id,
            post_callback,
            log,
            delivery_timeout=self.delivery_timeout_seconds,
            clock=clock,
        )
