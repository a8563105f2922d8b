from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from snapdiff.models import ThresholdPolicy


def diff_ratio(diff_pixel_count: int, total_pixels: int) -> float:
    if total_pixels <= 0:
        return 0.0
    return diff_pixel_count / total_pixels


def is_passing(diff_pixel_count: int, total_pixels: int, policy: ThresholdPolicy) -> bool:
    """Apply a threshold policy to an exact diff count. Both limits are inclusive."""
    if policy.kind == "pixel":
        return diff_pixel_count <= policy.limit
    return diff_ratio(diff_pixel_count, total_pixels) <= policy.limit
