from snapdiff.compare import compare_or_create_baseline, compare_request, compare_requests
from snapdiff.errors import ArtifactWriteError, DecodeError, InvalidPolicyError, SnapdiffError
from snapdiff.models import (
    ComparisonRequest,
    ComparisonResult,
    PercentThreshold,
    PixelThreshold,
    ThresholdPolicy,
    parse_policy,
    policy_from_options,
)

__all__ = (
    "ArtifactWriteError",
    "ComparisonRequest",
    "ComparisonResult",
    "DecodeError",
    "InvalidPolicyError",
    "PercentThreshold",
    "PixelThreshold",
    "SnapdiffError",
    "ThresholdPolicy",
    "compare_or_create_baseline",
    "compare_request",
    "compare_requests",
    "parse_policy",
    "policy_from_options",
)
