"""I/O contracts for Step 02: Frames to Video combination."""

from pathlib import Path

from pydantic import BaseModel, Field

from flipbook.core.contracts import StepMeta


class CombineFramesInput(BaseModel):
    frames_dir: Path = Field(..., description="Directory of numbered stills")
    output_path: Path = Field(..., description="Path of the video file to write")


class CombineFramesOutput(BaseModel):
    output_path: Path = Field(..., description="Written video file")
    frame_count: int = Field(..., description="Number of frames encoded")
    skipped_files: list[str] = Field(default_factory=list, description="Stills that failed and were left out")
    timestamps: list[int] = Field(default_factory=list, description="Packet pts in the stream time base, in presentation order")
    stream_time_base: str = Field(..., description="Time base of the output stream, e.g. 1/90000")
    file_size: int = Field(..., description="Size of the finished output in bytes")
    meta: StepMeta | None = None
