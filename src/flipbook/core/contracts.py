"""Common Pydantic models shared across pipeline steps."""

from __future__ import annotations

from fractions import Fraction
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

PixelFormat = Literal["gray", "bgr24", "rgb24", "bgra", "rgba", "yuv420p"]

# Channels per packed pixel; yuv420p is planar and stored as one (h * 3 / 2, w) array
PIXEL_FORMATS: dict[str, int] = {
    "gray": 1,
    "bgr24": 3,
    "rgb24": 3,
    "bgra": 4,
    "rgba": 4,
    "yuv420p": 1,
}


class StepMeta(BaseModel):
    """Metadata attached to every step output for reproducibility."""

    step_name: str
    elapsed_seconds: float = 0.0
    params: dict[str, Any] = Field(default_factory=dict)


class TargetFormat(BaseModel):
    """Resolution and pixel format the video encoder requires."""

    model_config = ConfigDict(frozen=True)

    width: int = Field(1920, gt=0, description="Output frame width in pixels")
    height: int = Field(1080, gt=0, description="Output frame height in pixels")
    pix_fmt: PixelFormat = Field("bgr24", description="Pixel format fed to the encoder")


class EncoderSettings(BaseModel):
    """Fixed encoder configuration, built once per combination run."""

    model_config = ConfigDict(frozen=True)

    codec: str = Field("mpeg4", description="FFmpeg encoder name (MPEG-4 Part 2, FourCC mp4v)")
    codec_pix_fmt: str = Field("yuv420p", description="Pixel format the encoder works in")
    bit_rate: int = Field(8_000_000, gt=0, description="Target bit rate in bits/s")
    fps: int = Field(30, gt=0, description="Frame rate; codec time base is 1/fps")
    gop_size: int = Field(10, ge=0, description="Frames between key frames")
    max_b_frames: int = Field(1, ge=0, description="Consecutive B-frames allowed")
    stream_timescale: int = Field(90_000, gt=0, description="Ticks per second of the output stream")
    target: TargetFormat = Field(default_factory=TargetFormat)

    @property
    def time_base(self) -> Fraction:
        return Fraction(1, self.fps)

    @property
    def stream_time_base(self) -> Fraction:
        return Fraction(1, self.stream_timescale)
