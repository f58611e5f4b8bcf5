"""File name data model."""

from pydantic import BaseModel, Field


SEPARATOR = "-"


class FileName(BaseModel):
    """A file name decomposed into its dash-delimited segments."""

    base_path: str = Field(description="File name without directory and extension")
    extension: str = Field(description="Extension including the leading dot, or empty")
    segments: list[str] = Field(description="Base name split on the separator")

    def __str__(self) -> str:
        return self.base_path + self.extension

    @property
    def name(self) -> str:
        """The full file name (base name and extension)."""
        return str(self)
