"""
Payload kinds understood by the write operations.
"""

from enum import Enum

from pydantic import BaseModel, Field, model_validator


class PayloadKind(str, Enum):
    """Determines the encoding used when writing to a file."""

    TEXT = "text"
    BYTE_STREAM = "byte_stream"
    PIXEL_BUFFER = "pixel_buffer"


class PixelBuffer(BaseModel):
    """
    A raw bitmap pixel buffer. ``data`` is written verbatim, with no image
    encoding or compression.
    """

    width: int = Field(ge=0)
    height: int = Field(ge=0)
    data: bytes = b""
    bytes_per_pixel: int = Field(default=4, ge=1)

    class Config:
        """Pydantic model configuration."""

        frozen = True

    @model_validator(mode="after")
    def validate_buffer_size(self) -> "PixelBuffer":
        """Ensures the buffer holds exactly width * height pixels."""
        expected = self.width * self.height * self.bytes_per_pixel
        if len(self.data) != expected:
            raise ValueError(
                f"Pixel buffer holds {len(self.data)} bytes, expected {expected} "
                f"for {self.width}x{self.height} at {self.bytes_per_pixel} B/px."
            )
        return self
