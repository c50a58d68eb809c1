"""Tests for S02: Combine Frames step."""

import logging
from pathlib import Path

import cv2
import numpy as np
import pytest

from flipbook.core.contracts import EncoderSettings
from flipbook.core.errors import DecodeFailed, OpenFailed, WriteFailed
from flipbook.steps.s02_combine_frames.config import CombineFramesConfig
from flipbook.steps.s02_combine_frames.contracts import CombineFramesInput, CombineFramesOutput
from flipbook.steps.s02_combine_frames.step import CombineFramesStep, CombineState


@pytest.fixture
def combine_step(small_encoder: EncoderSettings, data_root: Path) -> CombineFramesStep:
    return CombineFramesStep(config=CombineFramesConfig(encoder=small_encoder), data_root=data_root)


class TestCombineFramesContracts:
    def test_output_schema(self):
        schema = CombineFramesOutput.model_json_schema()
        assert "output_path" in schema["properties"]
        assert "timestamps" in schema["properties"]

    def test_config_defaults(self):
        cfg = CombineFramesConfig()
        assert cfg.input_format == "png"
        assert cfg.encoder.codec == "mpeg4"
        assert cfg.encoder.bit_rate == 8_000_000
        assert (cfg.encoder.target.width, cfg.encoder.target.height) == (1920, 1080)
        assert cfg.encoder.fps == 30
        assert cfg.encoder.gop_size == 10
        assert cfg.encoder.max_b_frames == 1


class TestCombineFramesStep:
    def test_validate_missing_dir(self, combine_step: CombineFramesStep, tmp_path: Path):
        inp = CombineFramesInput(frames_dir=tmp_path / "missing", output_path=tmp_path / "out.mp4")
        assert combine_step.validate_inputs(inp) is False
        with pytest.raises(OpenFailed):
            combine_step.execute(inp)

    def test_three_valid_stills(self, combine_step, sample_frames_dir: Path, tmp_path: Path, count_frames):
        out = tmp_path / "out.mp4"
        output = combine_step.execute(CombineFramesInput(frames_dir=sample_frames_dir, output_path=out))

        assert output.frame_count == 3
        assert output.skipped_files == []
        assert output.timestamps == [0, 3000, 6000]
        assert output.stream_time_base == "1/90000"
        assert output.file_size == out.stat().st_size > 0
        assert count_frames(out) == (3, (64, 48))
        assert combine_step.state is CombineState.FINALIZED

    def test_corrupt_still_is_skipped(
        self, combine_step, sample_frames_dir: Path, tmp_path: Path, caplog, count_frames
    ):
        (sample_frames_dir / "frame_1a.png").write_bytes(b"\x89PNG garbage")
        out = tmp_path / "out.mp4"
        with caplog.at_level(logging.WARNING):
            output = combine_step.execute(CombineFramesInput(frames_dir=sample_frames_dir, output_path=out))

        assert output.skipped_files == ["frame_1a.png"]
        assert output.frame_count == 3
        # no gap in timestamps where the corrupt still was
        assert output.timestamps == [0, 3000, 6000]
        assert "Skipped frame_1a.png" in caplog.text
        assert count_frames(out)[0] == 3

    def test_order_and_filtering(self, combine_step, tmp_path: Path):
        frames_dir = tmp_path / "mixed"
        (frames_dir / "nested").mkdir(parents=True)
        for name, value in [("frame_2.png", 200), ("frame_0.png", 0), ("frame_1.png", 100)]:
            cv2.imwrite(str(frames_dir / name), np.full((48, 64, 3), value, np.uint8))
        cv2.imwrite(str(frames_dir / "nested" / "frame_3.png"), np.zeros((48, 64, 3), np.uint8))
        cv2.imwrite(str(frames_dir / "notes.jpg"), np.zeros((48, 64, 3), np.uint8))

        seen = []
        real_decode = combine_step.codec.decode

        def recording_decode(path):
            seen.append(path.name)
            return real_decode(path)

        combine_step.codec.decode = recording_decode
        output = combine_step.execute(CombineFramesInput(frames_dir=frames_dir, output_path=tmp_path / "o.mp4"))

        assert seen == ["frame_0.png", "frame_1.png", "frame_2.png"]
        assert output.frame_count == 3

    def test_abort_policy(self, small_encoder, sample_frames_dir: Path, data_root: Path, tmp_path: Path):
        (sample_frames_dir / "frame_1a.png").write_bytes(b"broken")
        step = CombineFramesStep(
            config=CombineFramesConfig(encoder=small_encoder, on_error="abort"), data_root=data_root
        )
        with pytest.raises(DecodeFailed):
            step.execute(CombineFramesInput(frames_dir=sample_frames_dir, output_path=tmp_path / "o.mp4"))
        assert step.state is CombineState.FAILED

    def test_unwritable_output_is_fatal(self, combine_step, sample_frames_dir: Path, tmp_path: Path):
        with pytest.raises(WriteFailed):
            combine_step.execute(CombineFramesInput(
                frames_dir=sample_frames_dir, output_path=tmp_path / "missing" / "out.mp4"
            ))
        assert combine_step.state is CombineState.FAILED
