"""Unit tests for RenameProcessor."""

import io
from pathlib import Path

import pytest
from rich.console import Console

from ffr.errors import OperationError
from ffr.log import RunLog
from ffr.models.rename import RenameStatus
from ffr.processors.rename_operations import prefix
from ffr.processors.rename_processor import RenameProcessor


@pytest.fixture
def log():
    """Create a quiet run log."""
    return RunLog(console=Console(file=io.StringIO()))


@pytest.fixture
def sample_files(tmp_path):
    """Create a few files to rename."""
    paths = []
    for name in ["a.txt", "b.txt", "c.txt"]:
        path = tmp_path / name
        path.write_text(name)
        paths.append(path)
    return paths


def add_prefix(path: Path) -> str:
    return prefix(path.name, "new")


class TestCollectFiles:
    """Tests for RenameProcessor.collect_files."""

    def test_keeps_order(self, log, sample_files):
        """Test that files are returned in the given order."""
        processor = RenameProcessor(log=log)

        assert processor.collect_files(sample_files) == sample_files
        assert "file is okay" in log

    def test_backwards(self, log, sample_files):
        """Test that backwards reverses the processing order."""
        processor = RenameProcessor(log=log)

        assert processor.collect_files(sample_files, backwards=True) == list(reversed(sample_files))

    def test_no_files(self, log):
        """Test that an empty list is rejected."""
        with pytest.raises(ValueError, match="no files provided"):
            RenameProcessor(log=log).collect_files([])

    def test_missing_file(self, log, tmp_path, sample_files):
        """Test that a missing file aborts the whole collection."""
        with pytest.raises(FileNotFoundError, match="argument is not a file"):
            RenameProcessor(log=log).collect_files([*sample_files, tmp_path / "missing.txt"])

    def test_directory(self, log, tmp_path):
        """Test that directories are rejected."""
        with pytest.raises(IsADirectoryError, match="file is a directory"):
            RenameProcessor(log=log).collect_files([tmp_path])


class TestPlan:
    """Tests for RenameProcessor.plan."""

    def test_new_path_keeps_directory(self, log, sample_files):
        """Test that the new name is placed in the file's directory."""
        plan = RenameProcessor(log=log).plan(sample_files[0], add_prefix)

        assert plan.old_path == sample_files[0]
        assert plan.new_path == sample_files[0].parent / "new-a.txt"
        assert plan.status == RenameStatus.PLANNED


class TestRun:
    """Tests for RenameProcessor.run."""

    def test_renames_files(self, log, sample_files, tmp_path):
        """Test renaming every file."""
        result = RenameProcessor(log=log).run(sample_files, add_prefix)

        assert result.renamed_count == 3
        assert sorted(p.name for p in tmp_path.iterdir()) == ["new-a.txt", "new-b.txt", "new-c.txt"]
        assert (tmp_path / "new-a.txt").read_text() == "a.txt"
        assert "all done in" in log

    def test_dry_run_does_not_touch_files(self, log, sample_files, tmp_path):
        """Test that dry-run only reports the renames."""
        result = RenameProcessor(log=log, dry_run=True).run(sample_files, add_prefix)

        assert all(plan.status == RenameStatus.PREVIEWED for plan in result.plans)
        assert sorted(p.name for p in tmp_path.iterdir()) == ["a.txt", "b.txt", "c.txt"]
        assert f"{sample_files[0]} -> {tmp_path / 'new-a.txt'}" in log

    def test_unchanged_name(self, log, sample_files):
        """Test that operations returning the same name do nothing."""
        result = RenameProcessor(log=log).run(sample_files[:1], lambda path: path.name)

        assert result.plans[0].status == RenameStatus.UNCHANGED
        assert sample_files[0].exists()
        assert "no file name change" in log

    def test_existing_destination_is_skipped(self, log, sample_files, tmp_path):
        """Test that an existing destination is never overwritten by default."""
        (tmp_path / "new-a.txt").write_text("existing")

        result = RenameProcessor(log=log).run(sample_files[:1], add_prefix)

        assert result.plans[0].status == RenameStatus.SKIPPED
        assert sample_files[0].exists()
        assert (tmp_path / "new-a.txt").read_text() == "existing"
        assert "file already exists" in log

    def test_force_overwrite(self, log, sample_files, tmp_path):
        """Test that force overwrite replaces an existing destination."""
        (tmp_path / "new-a.txt").write_text("existing")

        result = RenameProcessor(log=log, force_overwrite=True).run(sample_files[:1], add_prefix)

        assert result.plans[0].status == RenameStatus.RENAMED
        assert not sample_files[0].exists()
        assert (tmp_path / "new-a.txt").read_text() == "a.txt"
        assert "force overwrite" in log

    def test_failure_does_not_stop_batch(self, log, sample_files, tmp_path):
        """Test that a failing file is logged and the others are still renamed."""

        def operation(path: Path) -> str:
            if path.name == "a.txt":
                raise OperationError("no matches")
            return prefix(path.name, "new")

        result = RenameProcessor(log=log).run(sample_files, operation)

        assert result.failed_count == 1
        assert result.failures[0].path == sample_files[0]
        assert result.renamed_count == 2
        assert (tmp_path / "a.txt").exists()
        assert (tmp_path / "new-b.txt").exists()
        assert f"{sample_files[0]}: no matches" in log

    def test_later_files_see_earlier_renames(self, log, tmp_path):
        """Test that files are processed one after the other."""
        first = tmp_path / "a.txt"
        second = tmp_path / "new-a.txt"
        first.write_text("first")
        second.write_text("second")

        result = RenameProcessor(log=log).run([second, first], add_prefix)

        assert result.renamed_count == 2
        assert (tmp_path / "new-new-a.txt").read_text() == "second"
        assert (tmp_path / "new-a.txt").read_text() == "first"
