"""Batch driver applying a rename operation to a list of files."""

import time
from collections.abc import Callable
from pathlib import Path

from ffr.errors import FfrError
from ffr.log import RunLog
from ffr.models.rename import RenameFailure, RenamePlan, RenameResult, RenameStatus


# Computes the new file name (without directory) for a file
NameOperation = Callable[[Path], str]


class RenameProcessor:
    """Processor running rename operations over a batch of files."""

    def __init__(self, log: RunLog, dry_run: bool = False, force_overwrite: bool = False) -> None:
        """Initialize the rename processor.

        Args:
            log: Run log receiving progress and error messages.
            dry_run: If True, renames are only reported.
            force_overwrite: If True, existing destination files are replaced.
        """
        self.log = log
        self.dry_run = dry_run
        self.force_overwrite = force_overwrite

    def collect_files(self, paths: list[Path], backwards: bool = False) -> list[Path]:
        """Check that every path is a regular file and put them in processing order.

        Args:
            paths: Paths given on the command line.
            backwards: If True, the files are processed in reverse order.

        Returns:
            The files in processing order.

        Raises:
            ValueError: If no paths are given.
            FileNotFoundError: If a path does not exist.
            IsADirectoryError: If a path is a directory.
        """
        if not paths:
            raise ValueError("no files provided")

        files: list[Path] = []
        for path in paths:
            if not path.exists():
                raise FileNotFoundError(f"argument is not a file: {path}")
            if path.is_dir():
                raise IsADirectoryError(f"file is a directory: {path}")

            self.log.log(f"file is okay: {path}")
            files.append(path)

        if backwards:
            files.reverse()

        return files

    def plan(self, path: Path, operation: NameOperation) -> RenamePlan:
        """Compute the rename of a single file.

        Raises:
            FfrError: If the operation cannot be applied to the file.
        """
        new_name = operation(path)
        return RenamePlan(old_path=path, new_path=path.parent / new_name, dry_run=self.dry_run)

    def apply(self, plan: RenamePlan) -> RenamePlan:
        """Carry out a planned rename, or only report it in dry-run mode.

        An existing destination is left alone unless `force_overwrite` is set.

        Returns:
            The plan with its final status.

        Raises:
            FfrError: If the file system refuses the rename.
        """
        if plan.is_noop:
            self.log.log(f"no file name change. path: {plan.new_path}")
            plan.status = RenameStatus.UNCHANGED
            return plan

        self.log.log(f"{plan.old_path} -> {plan.new_path}")

        if plan.dry_run:
            plan.status = RenameStatus.PREVIEWED
            return plan

        if plan.new_path.exists():
            if not self.force_overwrite:
                self.log.log(f"file already exists. path: {plan.new_path}")
                plan.status = RenameStatus.SKIPPED
                return plan

            self.log.log(f"force overwrite. path: {plan.new_path}")

        try:
            plan.old_path.replace(plan.new_path)
        except OSError as e:
            raise FfrError(f"unexpected error during renaming file {plan.old_path} to {plan.new_path}: {e}") from e
        plan.status = RenameStatus.RENAMED

        return plan

    def for_each(self, files: list[Path], action: Callable[[Path], object]) -> list[RenameFailure]:
        """Run an action on every file, logging and collecting per-file failures.

        Args:
            files: Files in processing order.
            action: Callable run for each file.

        Returns:
            Failures of the files whose action raised an `FfrError`.
        """
        failures: list[RenameFailure] = []

        started = time.monotonic()
        for path in files:
            file_started = time.monotonic()
            try:
                action(path)
            except FfrError as e:
                self.log.error(f"{path}: {e}")
                failures.append(RenameFailure(path=path, message=str(e)))
            self.log.info(f"done in {time.monotonic() - file_started:.3f}s.")
        self.log.info(f"all done in {time.monotonic() - started:.3f}s.")

        return failures

    def run(self, files: list[Path], operation: NameOperation) -> RenameResult:
        """Plan and apply a rename operation for every file.

        Args:
            files: Files in processing order, see `collect_files`.
            operation: Callable computing the new file name of a file.

        Returns:
            RenameResult with the plan of every processed file and the failures.
        """
        result = RenameResult()

        def rename(path: Path) -> None:
            result.plans.append(self.apply(self.plan(path, operation)))

        result.failures = self.for_each(files, rename)

        return result
