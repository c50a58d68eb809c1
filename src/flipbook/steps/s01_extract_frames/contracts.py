"""I/O contracts for Step 01: Video to Frames extraction."""

from pathlib import Path

from pydantic import BaseModel, Field

from flipbook.core.contracts import StepMeta


class ExtractFramesInput(BaseModel):
    video_path: Path = Field(..., description="Path to input video file")
    output_dir: Path | None = Field(None, description="Directory for stills (default: <data_root>/frames)")
    leading_zeros: int | None = Field(
        None, ge=1, description="Zero-pad width; counted from the video when omitted"
    )
    source_tag: str | None = Field(
        None, description="Suffix keeping this video's stills distinct in a shared directory"
    )


class ExtractFramesOutput(BaseModel):
    frames_dir: Path = Field(..., description="Directory containing extracted frames")
    frame_count: int = Field(..., description="Number of stills written")
    skipped_count: int = Field(0, description="Frames decoded but not written")
    leading_zeros: int = Field(..., description="Zero-pad width used in filenames")
    frame_list: list[str] = Field(default_factory=list, description="List of frame filenames")
    meta: StepMeta | None = None
