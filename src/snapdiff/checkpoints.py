from __future__ import annotations

import logging
import re
import time
from datetime import datetime, timezone
from pathlib import Path

from pydantic import BaseModel, ConfigDict

from snapdiff.errors import ArtifactWriteError
from snapdiff.models import DEFAULT_POLICY, ComparisonRequest, PercentThreshold, PixelThreshold

logger = logging.getLogger(__name__)

BASELINE_DIR = "baseline"
ACTUAL_DIR = "actual"
DIFF_DIR = "diff"

_CHECKPOINT_UNSAFE = re.compile(r"[^a-zA-Z0-9_-]")
_TEST_NAME_UNSAFE = re.compile(r"[^a-zA-Z0-9]")


def sanitize_name(name: str) -> str:
    return _CHECKPOINT_UNSAFE.sub("_", name)


def sanitize_test_name(name: str) -> str:
    return _TEST_NAME_UNSAFE.sub("_", name)


def artifact_timestamp(now: datetime | None = None) -> str:
    """ISO-8601 UTC timestamp that is safe to embed in a file name."""
    now = now or datetime.now(timezone.utc)
    stamp = now.astimezone(timezone.utc).isoformat(timespec="milliseconds")
    return stamp.replace("+00:00", "Z").replace(":", "-").replace(".", "-")


class CheckpointPaths(BaseModel):
    """File locations of one visual checkpoint under a screenshot root.

    The baseline name is stable across runs; actual captures and diffs carry
    a timestamp so earlier runs are kept for audit.
    """

    model_config = ConfigDict(frozen=True)

    baseline_path: Path
    actual_path: Path
    diff_path: Path

    @classmethod
    def build(
        cls,
        root: str | Path,
        test_name: str,
        checkpoint: str,
        timestamp: str | None = None,
    ) -> CheckpointPaths:
        root = Path(root)
        stem = f"{sanitize_test_name(test_name)}_{sanitize_name(checkpoint)}"
        timestamp = timestamp or artifact_timestamp()
        return cls(
            baseline_path=root / BASELINE_DIR / f"{stem}.png",
            actual_path=root / ACTUAL_DIR / f"{stem}_{timestamp}.png",
            diff_path=root / DIFF_DIR / f"{stem}_{timestamp}_diff.png",
        )

    def to_request(
        self, policy: PixelThreshold | PercentThreshold | None = None
    ) -> ComparisonRequest:
        return ComparisonRequest(
            baseline_path=self.baseline_path,
            actual_path=self.actual_path,
            diff_path=self.diff_path,
            policy=DEFAULT_POLICY if policy is None else policy,
        )


def cleanup_old_artifacts(
    directory: str | Path,
    days_old: int = 7,
    now: float | None = None,
) -> int:
    """Delete files directly inside ``directory`` not modified for ``days_old`` days.

    Subdirectories are left alone, so pointing this at the actual or diff
    folder never touches baselines. Returns the number of files removed.
    """
    directory = Path(directory)
    if not directory.is_dir():
        return 0

    cutoff = (time.time() if now is None else now) - days_old * 86400
    deleted = 0
    try:
        for entry in directory.iterdir():
            if entry.is_file() and entry.stat().st_mtime < cutoff:
                entry.unlink()
                deleted += 1
    except OSError as e:
        logger.exception("Failed to clean up old artifacts", extra={"directory": str(directory)})
        raise ArtifactWriteError(directory, str(e)) from e

    logger.info("Cleaned up %d old artifacts", deleted, extra={"directory": str(directory)})
    return deleted
