from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from snapdiff.baseline import create_baseline_if_missing
from snapdiff.image_diff.decode import decode_png, encode_png
from snapdiff.image_diff.pixelmatch import diff_images
from snapdiff.models import (
    DEFAULT_POLICY,
    ComparisonRequest,
    ComparisonResult,
    PercentThreshold,
    PixelThreshold,
)
from snapdiff.verdict import is_passing

logger = logging.getLogger(__name__)


def compare_or_create_baseline(
    baseline_path: str | Path,
    actual_path: str | Path,
    diff_path: str | Path,
    policy: PixelThreshold | PercentThreshold | None = None,
) -> ComparisonResult:
    """Compare a fresh capture against its baseline.

    If the baseline does not exist yet, the capture is copied into place and a
    passing result is returned without decoding anything. Otherwise both PNGs
    are decoded, the overlapping region is diffed, the diff image is written to
    ``diff_path`` and the policy decides ``passed``.

    Decode and write failures raise ``SnapdiffError`` subclasses; they are
    never reported as a failing result.
    """
    request = ComparisonRequest(
        baseline_path=Path(baseline_path),
        actual_path=Path(actual_path),
        diff_path=Path(diff_path),
        policy=DEFAULT_POLICY if policy is None else policy,
    )
    return compare_request(request)


def compare_request(request: ComparisonRequest) -> ComparisonResult:
    if create_baseline_if_missing(request.baseline_path, request.actual_path):
        return ComparisonResult(
            baseline_path=request.baseline_path,
            actual_path=request.actual_path,
            diff_path=request.diff_path,
            diff_pixel_count=0,
            total_pixels=0,
            passed=True,
            baseline_created=True,
        )

    baseline = decode_png(request.baseline_path)
    actual = decode_png(request.actual_path)

    if baseline.size != actual.size:
        logger.warning(
            "Image size mismatch. Baseline: %dx%d, Actual: %dx%d",
            baseline.width,
            baseline.height,
            actual.width,
            actual.height,
            extra={"baseline_path": str(request.baseline_path)},
        )

    diff_pixel_count, diff_image = diff_images(baseline, actual)
    encode_png(diff_image, request.diff_path)

    total_pixels = diff_image.pixel_count
    result = ComparisonResult(
        baseline_path=request.baseline_path,
        actual_path=request.actual_path,
        diff_path=request.diff_path,
        diff_pixel_count=diff_pixel_count,
        total_pixels=total_pixels,
        passed=is_passing(diff_pixel_count, total_pixels, request.policy),
        baseline_size=baseline.size,
        actual_size=actual.size,
    )

    logger.info(
        "Visual comparison result - diffPixels: %d, diffRatio: %.3f%%, passed: %s",
        result.diff_pixel_count,
        result.diff_ratio * 100,
        result.passed,
        extra={
            "baseline_path": str(request.baseline_path),
            "diff_path": str(request.diff_path),
            "policy": request.policy.kind,
            "limit": request.policy.limit,
        },
    )
    return result


def compare_requests(requests: Iterable[ComparisonRequest]) -> list[ComparisonResult]:
    """Run several comparisons in order; the first engine error aborts the batch."""
    return [compare_request(request) for request in requests]
