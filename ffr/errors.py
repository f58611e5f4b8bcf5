"""Exception types raised by ffr operations."""


class FfrError(Exception):
    """Base class for errors that abort the processing of a single file."""


class OperationError(FfrError, ValueError):
    """A rename operation could not be applied to a file name."""


class ToolError(FfrError):
    """ffmpeg or ffprobe failed or produced unusable output."""
