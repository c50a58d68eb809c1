"""Configuration for Step 01: Video to Frames."""

from typing import Literal

from pydantic import BaseModel, Field


class ExtractFramesConfig(BaseModel):
    output_format: str = Field("png", description="Still image format / file extension")
    prefix: str = Field("frame_", description="Filename prefix of every still")
    still_pix_fmt: Literal["gray", "bgr24", "bgra"] = Field(
        "bgr24", description="Pixel format stills are normalized to before encoding"
    )
    png_compression: int = Field(3, ge=0, le=9, description="PNG zlib compression level")
    on_error: Literal["skip", "abort"] = Field(
        "skip", description="Per-frame failure policy: skip the frame or abort the run"
    )
