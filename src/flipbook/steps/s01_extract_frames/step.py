"""Step 01: Extract every decoded frame of a video as a numbered still."""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import ClassVar

from flipbook.core.errors import UnitError
from flipbook.core.step_base import BaseStep
from flipbook.media.source import VideoSource
from flipbook.media.still import StillImageCodec
from flipbook.utils.io import frame_filename, leading_zeros
from .config import ExtractFramesConfig
from .contracts import ExtractFramesInput, ExtractFramesOutput

logger = logging.getLogger(__name__)


class ExtractState(str, Enum):
    OPENED = "opened"
    DECODING = "decoding"
    DONE = "done"
    FAILED = "failed"


class ExtractFramesStep(BaseStep[ExtractFramesInput, ExtractFramesOutput, ExtractFramesConfig]):
    name: ClassVar[str] = "extract_frames"
    input_type: ClassVar = ExtractFramesInput
    output_type: ClassVar = ExtractFramesOutput
    config_type: ClassVar = ExtractFramesConfig

    def __init__(self, config: ExtractFramesConfig, data_root: Path):
        super().__init__(config, data_root)
        self.codec = StillImageCodec(
            extension=config.output_format,
            pix_fmt=config.still_pix_fmt,
            png_compression=config.png_compression,
        )
        self.state: ExtractState | None = None

    def validate_inputs(self, inputs: ExtractFramesInput) -> bool:
        if not inputs.video_path.exists():
            logger.error(f"Video not found: {inputs.video_path}")
            return False
        return True

    @staticmethod
    def get_leading_zeros(source: VideoSource) -> int:
        """Count every frame, rewind, and return the zero-pad width.

        Must run before decoding starts; the count consumes the stream.
        """
        total = source.count_frames()
        source.rewind()
        width = leading_zeros(total)
        logger.info(f"{source.path.name}: {total} frames, pad width {width}")
        return width

    @classmethod
    def probe_leading_zeros(cls, video_path: Path) -> int:
        with VideoSource.open(video_path) as source:
            return cls.get_leading_zeros(source)

    def run(self, inputs: ExtractFramesInput) -> ExtractFramesOutput:
        output_dir = inputs.output_dir or self.data_root / "frames"
        output_dir.mkdir(parents=True, exist_ok=True)

        try:
            with VideoSource.open(inputs.video_path) as source:
                self.state = ExtractState.OPENED
                width = inputs.leading_zeros or self.get_leading_zeros(source)
                extracted, skipped = self._extract(source, output_dir, width, inputs.source_tag)
        except Exception:
            self.state = ExtractState.FAILED
            raise
        self.state = ExtractState.DONE

        logger.info(f"Extracted {len(extracted)} frames from {inputs.video_path.name} ({skipped} skipped)")
        return ExtractFramesOutput(
            frames_dir=output_dir,
            frame_count=len(extracted),
            skipped_count=skipped,
            leading_zeros=width,
            frame_list=extracted,
        )

    def _extract(
        self, source: VideoSource, output_dir: Path, width: int, tag: str | None
    ) -> tuple[list[str], int]:
        self.state = ExtractState.DECODING
        extracted: list[str] = []
        skipped = 0
        for decoded, frame in enumerate(source):
            fname = frame_filename(
                len(extracted), width,
                extension=self.config.output_format,
                prefix=self.config.prefix,
                tag=tag,
            )
            frame_path = output_dir / fname
            try:
                self.codec.encode(frame, frame_path)
            except UnitError as e:
                if self.config.on_error == "abort":
                    raise
                skipped += 1
                logger.warning(f"Skipped decoded frame {decoded}: {e}")
                continue
            extracted.append(fname)
            logger.info(f"Processed {frame_path}")
        return extracted, skipped
