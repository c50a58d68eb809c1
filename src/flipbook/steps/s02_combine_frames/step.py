"""Step 02: Encode a directory of numbered stills into one video."""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import ClassVar

from flipbook.core.errors import UnitError
from flipbook.core.step_base import BaseStep
from flipbook.media.encoder import VideoEncoder
from flipbook.media.still import StillImageCodec
from flipbook.media.transform import reconcile
from flipbook.utils.io import list_frame_files
from .config import CombineFramesConfig
from .contracts import CombineFramesInput, CombineFramesOutput

logger = logging.getLogger(__name__)


class CombineState(str, Enum):
    CODEC_READY = "codec_ready"
    OUTPUT_OPENED = "output_opened"
    CONVERTING = "converting"
    FINALIZED = "finalized"
    FAILED = "failed"


class CombineFramesStep(BaseStep[CombineFramesInput, CombineFramesOutput, CombineFramesConfig]):
    name: ClassVar[str] = "combine_frames"
    input_type: ClassVar = CombineFramesInput
    output_type: ClassVar = CombineFramesOutput
    config_type: ClassVar = CombineFramesConfig

    def __init__(self, config: CombineFramesConfig, data_root: Path):
        super().__init__(config, data_root)
        self.codec = StillImageCodec(extension=config.input_format)
        self.state: CombineState | None = None

    def validate_inputs(self, inputs: CombineFramesInput) -> bool:
        if not inputs.frames_dir.is_dir():
            logger.error(f"Frames directory not found: {inputs.frames_dir}")
            return False
        return True

    def run(self, inputs: CombineFramesInput) -> CombineFramesOutput:
        settings = self.config.encoder
        files = list_frame_files(inputs.frames_dir, self.config.input_format)
        logger.info(f"Found {len(files)} {self.codec.suffix} files in {inputs.frames_dir}")
        if not files:
            logger.warning(f"No stills to combine in {inputs.frames_dir}")

        self.state = CombineState.CODEC_READY
        try:
            with VideoEncoder.open(settings, inputs.output_path) as encoder:
                self.state = CombineState.OUTPUT_OPENED
                timestamps, skipped = self._convert(files, encoder)
                timestamps.extend(p.pts for p in encoder.flush())
                stream_time_base = encoder.stream_time_base
                file_size = encoder.finish()
        except Exception:
            self.state = CombineState.FAILED
            raise
        self.state = CombineState.FINALIZED

        logger.info(
            f"Wrote {inputs.output_path} with {len(files) - len(skipped)} frames "
            f"({len(skipped)} skipped, {file_size} bytes)"
        )
        return CombineFramesOutput(
            output_path=inputs.output_path,
            frame_count=len(files) - len(skipped),
            skipped_files=skipped,
            timestamps=sorted(timestamps),
            stream_time_base=str(stream_time_base),
            file_size=file_size,
        )

    def _convert(self, files: list[Path], encoder: VideoEncoder) -> tuple[list[int], list[str]]:
        """Decode, reconcile and encode each still in order.

        The frame index only advances for stills that reach the encoder, so
        skipped files leave no gap in the output timestamps.
        """
        self.state = CombineState.CONVERTING
        target = self.config.encoder.target
        frame_index = 0
        timestamps: list[int] = []
        skipped: list[str] = []

        for path in files:
            try:
                frame = self.codec.decode(path)
                frame = reconcile(frame, target)
                packets = encoder.encode(frame, pts=frame_index)
            except UnitError as e:
                if self.config.on_error == "abort":
                    raise
                skipped.append(path.name)
                logger.warning(f"Skipped {path.name}: {e}")
                continue
            frame_index += 1
            timestamps.extend(p.pts for p in packets)
            logger.info(f"Encoded {path.name}")
        return timestamps, skipped
