from __future__ import annotations

import logging
import shutil
from pathlib import Path

from snapdiff.errors import ArtifactWriteError, DecodeError

logger = logging.getLogger(__name__)


def ensure_parent_dir(path: Path) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ArtifactWriteError(path.parent, str(e)) from e


def create_baseline_if_missing(baseline_path: str | Path, actual_path: str | Path) -> bool:
    """Promote the actual capture to baseline when no baseline exists yet.

    Returns True when a new baseline was written. This is the only place the
    engine mutates a baseline; concurrent first runs for the same checkpoint
    are not serialised here.
    """
    baseline_path = Path(baseline_path)
    actual_path = Path(actual_path)

    if baseline_path.exists():
        return False

    logger.info(
        "Baseline image not found, creating new baseline",
        extra={"baseline_path": str(baseline_path), "actual_path": str(actual_path)},
    )
    if not actual_path.is_file():
        raise DecodeError(actual_path, "file does not exist")

    ensure_parent_dir(baseline_path)
    try:
        shutil.copyfile(actual_path, baseline_path)
    except OSError as e:
        logger.exception(
            "Failed to create baseline",
            extra={"baseline_path": str(baseline_path), "actual_path": str(actual_path)},
        )
        raise ArtifactWriteError(baseline_path, str(e)) from e
    return True
