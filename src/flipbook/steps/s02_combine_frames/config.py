"""Configuration for Step 02: Frames to Video."""

from typing import Literal

from pydantic import BaseModel, Field

from flipbook.core.contracts import EncoderSettings


class CombineFramesConfig(BaseModel):
    input_format: str = Field("png", description="Extension of the stills to combine")
    encoder: EncoderSettings = Field(default_factory=EncoderSettings, description="Fixed encoder settings")
    on_error: Literal["skip", "abort"] = Field(
        "skip", description="Per-image failure policy: skip the image or abort the run"
    )
