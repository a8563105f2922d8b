from __future__ import annotations

from pathlib import Path


class SnapdiffError(Exception):
    """Base class for failures of the comparison engine itself.

    These are never folded into a failing ``ComparisonResult``; a result with
    ``passed=False`` only means the images differed beyond the policy.
    """


class DecodeError(SnapdiffError):
    def __init__(self, path: str | Path, reason: str) -> None:
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Unable to decode PNG {self.path}: {reason}")


class ArtifactWriteError(SnapdiffError):
    def __init__(self, path: str | Path, reason: str) -> None:
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Unable to write {self.path}: {reason}")


class InvalidPolicyError(SnapdiffError, ValueError):
    pass
