"""Run settings shared by all commands."""

from pydantic import BaseModel, Field


class Settings(BaseModel):
    """Settings collected from the global command line options and environment."""

    dry_run: bool = Field(default=False, description="Only report changes, never touch files")
    verbose: bool = Field(default=False, description="Print detail messages")
    force_overwrite: bool = Field(default=False, description="Overwrite existing destination files")
    backwards: bool = Field(default=False, description="Process the files in reverse order")
    ffmpeg_path: str = Field(default="ffmpeg", description="ffmpeg executable")
    ffprobe_path: str = Field(default="ffprobe", description="ffprobe executable")

    @property
    def show_details(self) -> bool:
        """Detail messages are shown when verbose or previewing."""
        return self.verbose or self.dry_run
