from __future__ import annotations

from pathlib import Path
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, computed_field

from snapdiff.errors import InvalidPolicyError
from snapdiff.verdict import diff_ratio

DEFAULT_THRESHOLD = 0.01
DEFAULT_THRESHOLD_TYPE = "percent"


class PixelThreshold(BaseModel):
    """Pass while at most ``limit`` pixels differ."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: Literal["pixel"] = "pixel"
    limit: int = Field(ge=0)


class PercentThreshold(BaseModel):
    """Pass while at most ``limit`` (a 0-1 fraction) of compared pixels differ."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: Literal["percent"] = "percent"
    limit: float = Field(ge=0.0, le=1.0)


ThresholdPolicy = Annotated[PixelThreshold | PercentThreshold, Field(discriminator="kind")]

DEFAULT_POLICY = PercentThreshold(limit=DEFAULT_THRESHOLD)

_policy_adapter: TypeAdapter[PixelThreshold | PercentThreshold] = TypeAdapter(ThresholdPolicy)


def parse_policy(data: object) -> PixelThreshold | PercentThreshold:
    try:
        return _policy_adapter.validate_python(data)
    except ValidationError as e:
        raise InvalidPolicyError(f"Invalid threshold policy {data!r}: {e}") from e


def policy_from_options(
    threshold: float | None = None,
    threshold_type: str | None = None,
) -> PixelThreshold | PercentThreshold:
    """Build a policy from a loose ``threshold``/``threshold_type`` pair.

    Missing values fall back to a 1% percent threshold.
    """
    kind = (threshold_type or DEFAULT_THRESHOLD_TYPE).strip().lower()
    limit = DEFAULT_THRESHOLD if threshold is None else threshold
    return parse_policy({"kind": kind, "limit": limit})


class ComparisonRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    baseline_path: Path
    actual_path: Path
    diff_path: Path
    policy: ThresholdPolicy = DEFAULT_POLICY


class ComparisonResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    baseline_path: Path
    actual_path: Path
    diff_path: Path
    diff_pixel_count: int = Field(ge=0)
    total_pixels: int = Field(ge=0)
    passed: bool
    baseline_created: bool = False
    baseline_size: tuple[int, int] | None = None
    actual_size: tuple[int, int] | None = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def diff_ratio(self) -> float:
        return diff_ratio(self.diff_pixel_count, self.total_pixels)

    @property
    def size_mismatch(self) -> bool:
        return (
            self.baseline_size is not None
            and self.actual_size is not None
            and self.baseline_size != self.actual_size
        )
