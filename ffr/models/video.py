"""Video probe data model."""

from pydantic import BaseModel, Field


class VideoInfo(BaseModel):
    """Properties of the first video stream of a file, as reported by ffprobe."""

    name: str = Field(description="File name")
    size: int = Field(default=0, description="File size in bytes")
    bit_rate: int = Field(default=0, description="Video stream bit rate (0 when unknown)")
    duration: float = Field(default=0.0, description="Container duration in seconds")
    frame_rate: float = Field(default=0.0, description="Frames per second")
    width: int = Field(default=0)
    height: int = Field(default=0)
    codec: str = Field(default="", description="Codec name of the video stream")
    key_frames: list[str] = Field(default_factory=list, description="Leading key frame timestamps")

    @property
    def dimensions(self) -> str:
        """Dimensions in `WIDTHxHEIGHT` form."""
        return f"{self.width}x{self.height}"
