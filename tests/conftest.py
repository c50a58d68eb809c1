"""Shared pytest fixtures for flipbook tests."""

import wave
from pathlib import Path

import cv2
import numpy as np
import pytest

from flipbook.core.contracts import EncoderSettings, TargetFormat


def create_synthetic_video(
    video_path: Path,
    num_frames: int = 30,
    resolution: tuple[int, int] = (160, 120),
    fps: float = 30.0,
) -> Path:
    """
    Create a synthetic test video with gradients and a frame counter.

    Args:
        video_path: Where to write the .mp4 file
        num_frames: Number of frames to generate
        resolution: Video resolution as (width, height)
        fps: Frames per second

    Returns:
        Path to the created video file
    """
    video_path.parent.mkdir(parents=True, exist_ok=True)
    width, height = resolution
    fourcc = cv2.VideoWriter_fourcc(*"mp4v")
    writer = cv2.VideoWriter(str(video_path), fourcc, fps, (width, height))

    for i in range(num_frames):
        frame = np.zeros((height, width, 3), dtype=np.uint8)
        frame[:, :, 0] = np.linspace(0, 255, width, dtype=np.uint8)
        frame[:, :, 1] = np.linspace(0, 255, height, dtype=np.uint8)[:, np.newaxis]
        frame[:, :, 2] = (i * 8) % 256
        cv2.putText(frame, f"F:{i:03d}", (10, 30), cv2.FONT_HERSHEY_SIMPLEX, 0.5, (255, 255, 255), 1)
        writer.write(frame)

    writer.release()
    return video_path


def count_video_frames(video_path: Path) -> tuple[int, tuple[int, int]]:
    """Decode a video fully; returns (frames, (width, height))."""
    cap = cv2.VideoCapture(str(video_path))
    assert cap.isOpened(), f"cannot reopen {video_path}"
    size = (int(cap.get(cv2.CAP_PROP_FRAME_WIDTH)), int(cap.get(cv2.CAP_PROP_FRAME_HEIGHT)))
    count = 0
    while True:
        ok, _ = cap.read()
        if not ok:
            break
        count += 1
    cap.release()
    return count, size


@pytest.fixture
def data_root(tmp_path: Path) -> Path:
    root = tmp_path / "data"
    root.mkdir()
    return root


@pytest.fixture
def make_video(tmp_path: Path):
    """Factory writing synthetic videos into tmp_path/videos."""

    def _make(name: str = "test.mp4", num_frames: int = 30, resolution: tuple[int, int] = (160, 120)) -> Path:
        return create_synthetic_video(tmp_path / "videos" / name, num_frames=num_frames, resolution=resolution)

    return _make


@pytest.fixture
def test_video(make_video) -> Path:
    return make_video("test.mp4", num_frames=12)


@pytest.fixture
def audio_only_file(tmp_path: Path) -> Path:
    """A WAV file: a valid container without any video stream."""
    path = tmp_path / "tone.wav"
    samples = (np.sin(np.linspace(0, 440 * 2 * np.pi, 8000)) * 3000).astype(np.int16)
    with wave.open(str(path), "wb") as w:
        w.setnchannels(1)
        w.setsampwidth(2)
        w.setframerate(8000)
        w.writeframes(samples.tobytes())
    return path


@pytest.fixture
def sample_frames_dir(tmp_path: Path) -> Path:
    """Three valid 100x80 stills, frame_0.png .. frame_2.png."""
    frames_dir = tmp_path / "frames"
    frames_dir.mkdir()
    rng = np.random.default_rng(0)
    for i in range(3):
        img = rng.integers(0, 255, (80, 100, 3), dtype=np.uint8)
        cv2.imwrite(str(frames_dir / f"frame_{i}.png"), img)
    return frames_dir


@pytest.fixture
def small_encoder() -> EncoderSettings:
    """Default encoder constants at a test-sized resolution."""
    return EncoderSettings(target=TargetFormat(width=64, height=48))


@pytest.fixture
def count_frames():
    """Decode a written video; returns (frames, (width, height))."""
    return count_video_frames
