from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from snapdiff.models import PercentThreshold, PixelThreshold, policy_from_options

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

ENV_SCREENSHOT_DIR = "SNAPDIFF_SCREENSHOT_DIR"
ENV_THRESHOLD = "SNAPDIFF_THRESHOLD"
ENV_THRESHOLD_TYPE = "SNAPDIFF_THRESHOLD_TYPE"
ENV_LOG_LEVEL = "LOG_LEVEL"


class SnapdiffSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    screenshot_dir: Path = Path("screenshots")
    threshold: float | None = Field(default=None, ge=0)
    threshold_type: str | None = None
    log_level: LogLevel = "INFO"

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_level(cls, value: object) -> object:
        if isinstance(value, str):
            value = value.strip().upper()
            if value == "WARN":
                return "WARNING"
        return value

    def policy(self) -> PixelThreshold | PercentThreshold:
        return policy_from_options(self.threshold, self.threshold_type)


def load_settings(environ: Mapping[str, str] | None = None) -> SnapdiffSettings:
    """Read settings from the environment. Empty variables count as unset."""
    environ = os.environ if environ is None else environ
    values: dict[str, str] = {}
    for field, key in (
        ("screenshot_dir", ENV_SCREENSHOT_DIR),
        ("threshold", ENV_THRESHOLD),
        ("threshold_type", ENV_THRESHOLD_TYPE),
        ("log_level", ENV_LOG_LEVEL),
    ):
        raw = environ.get(key, "").strip()
        if raw:
            values[field] = raw
    settings = SnapdiffSettings.model_validate(values)
    # Fail at load time rather than on the first comparison.
    settings.policy()
    return settings


def configure_logging(settings: SnapdiffSettings) -> None:
    """Set the package logger level. Handlers stay the application's business."""
    logging.getLogger("snapdiff").setLevel(settings.log_level)
