from __future__ import annotations

import os
import time
from datetime import datetime, timezone

import pytest

from snapdiff.checkpoints import (
    CheckpointPaths,
    artifact_timestamp,
    cleanup_old_artifacts,
    sanitize_name,
    sanitize_test_name,
)
from snapdiff.compare import compare_request
from snapdiff.models import DEFAULT_POLICY, PixelThreshold


class TestNames:
    def test_sanitize_checkpoint(self):
        assert sanitize_name("header/nav bar-1_ok") == "header_nav_bar-1_ok"

    def test_sanitize_test_title(self):
        assert sanitize_test_name("login page-works") == "login_page_works"

    def test_timestamp_is_filename_safe(self):
        stamp = artifact_timestamp(datetime(2024, 3, 5, 7, 8, 9, 123000, tzinfo=timezone.utc))
        assert stamp == "2024-03-05T07-08-09-123Z"


class TestCheckpointPaths:
    def test_layout(self, tmp_path):
        paths = CheckpointPaths.build(tmp_path, "login test", "form:main", timestamp="TS")
        assert paths.baseline_path == tmp_path / "baseline" / "login_test_form_main.png"
        assert paths.actual_path == tmp_path / "actual" / "login_test_form_main_TS.png"
        assert paths.diff_path == tmp_path / "diff" / "login_test_form_main_TS_diff.png"

    def test_baseline_name_is_stable(self, tmp_path):
        first = CheckpointPaths.build(tmp_path, "t", "c", timestamp="1")
        second = CheckpointPaths.build(tmp_path, "t", "c", timestamp="2")
        assert first.baseline_path == second.baseline_path
        assert first.actual_path != second.actual_path

    def test_to_request(self, tmp_path):
        paths = CheckpointPaths.build(tmp_path, "t", "c", timestamp="1")
        assert paths.to_request().policy == DEFAULT_POLICY
        request = paths.to_request(PixelThreshold(limit=2))
        assert request.policy == PixelThreshold(limit=2)
        assert request.diff_path == paths.diff_path

    def test_first_run_then_compare(self, write_png, tmp_path):
        first = CheckpointPaths.build(tmp_path / "shots", "t", "c", timestamp="1")
        write_png(str(first.actual_path.relative_to(tmp_path)), 6, 6)
        assert compare_request(first.to_request()).baseline_created

        second = CheckpointPaths.build(tmp_path / "shots", "t", "c", timestamp="2")
        write_png(str(second.actual_path.relative_to(tmp_path)), 6, 6)
        result = compare_request(second.to_request(PixelThreshold(limit=0)))
        assert result.passed
        assert second.diff_path.exists()


class TestCleanupOldArtifacts:
    def test_removes_only_old_files(self, tmp_path):
        now = time.time()
        old = tmp_path / "old.png"
        fresh = tmp_path / "fresh.png"
        nested = tmp_path / "baseline"
        nested.mkdir()
        for path in (old, fresh, nested / "kept.png"):
            path.write_bytes(b"x")
        ten_days = now - 10 * 86400
        os.utime(old, (ten_days, ten_days))
        os.utime(nested / "kept.png", (ten_days, ten_days))

        assert cleanup_old_artifacts(tmp_path, days_old=7, now=now) == 1
        assert not old.exists()
        assert fresh.exists()
        assert (nested / "kept.png").exists()

    def test_missing_directory(self, tmp_path):
        assert cleanup_old_artifacts(tmp_path / "nothing") == 0

    @pytest.mark.parametrize("days_old", [0, 1])
    def test_cutoff(self, tmp_path, days_old):
        now = time.time()
        path = tmp_path / "a.png"
        path.write_bytes(b"x")
        stamp = now - 3600
        os.utime(path, (stamp, stamp))
        removed = cleanup_old_artifacts(tmp_path, days_old=days_old, now=now)
        assert removed == (1 if days_old == 0 else 0)
