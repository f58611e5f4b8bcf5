"""Rename plan and result data models."""

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field


class RenameStatus(str, Enum):
    """Outcome of a single planned rename."""

    PLANNED = "planned"
    PREVIEWED = "previewed"
    UNCHANGED = "unchanged"
    RENAMED = "renamed"
    SKIPPED = "skipped"


class RenamePlan(BaseModel):
    """A single file rename computed by a rename operation."""

    old_path: Path = Field(description="Current path of the file")
    new_path: Path = Field(description="Path the file should be renamed to")
    dry_run: bool = Field(default=False, description="Only report the change, never touch the file system")
    status: RenameStatus = Field(default=RenameStatus.PLANNED)

    def __str__(self) -> str:
        return f"RenamePlan('{self.old_path}' -> '{self.new_path}', status={self.status.value})"

    @property
    def is_noop(self) -> bool:
        """Whether the new path is identical to the old one."""
        return self.old_path == self.new_path

    @property
    def should_rename(self) -> bool:
        """Whether applying the plan mutates the file system."""
        return not self.dry_run and not self.is_noop


class RenameFailure(BaseModel):
    """A file whose operation failed."""

    path: Path
    message: str


class RenameResult(BaseModel):
    """Result of running a rename operation over a batch of files."""

    plans: list[RenamePlan] = Field(default_factory=list)
    failures: list[RenameFailure] = Field(default_factory=list)

    def __len__(self) -> int:
        return len(self.plans)

    def _count(self, status: RenameStatus) -> int:
        return sum(1 for plan in self.plans if plan.status == status)

    @property
    def renamed_count(self) -> int:
        return self._count(RenameStatus.RENAMED)

    @property
    def skipped_count(self) -> int:
        return self._count(RenameStatus.SKIPPED)

    @property
    def failed_count(self) -> int:
        return len(self.failures)

    def summary(self) -> str:
        """Return a human-readable summary of the batch."""
        lines = [
            "Rename Summary:",
            f"  Files: {len(self.plans) + self.failed_count}",
            f"  Renamed: {self.renamed_count}",
            f"  Previewed: {self._count(RenameStatus.PREVIEWED)}",
            f"  Unchanged: {self._count(RenameStatus.UNCHANGED)}",
            f"  Skipped: {self.skipped_count}",
            f"  Failed: {self.failed_count}",
        ]
        return "\n".join(lines)
