"""Create a synthetic MP4 for trying the extract/combine round trip by hand."""

from pathlib import Path
import sys

import cv2
import numpy as np


def create_video(
    output_path: Path,
    num_frames: int = 90,
    resolution: tuple[int, int] = (320, 240),
    fps: float = 30.0,
) -> int:
    """Write a gradient video with the frame number burnt in.

    Returns number of frames written.
    """
    width, height = resolution
    output_path.parent.mkdir(parents=True, exist_ok=True)
    fourcc = cv2.VideoWriter_fourcc(*"mp4v")
    writer = cv2.VideoWriter(str(output_path), fourcc, fps, (width, height))

    gradient = np.linspace(0, 255, width, dtype=np.uint8)
    for i in range(num_frames):
        frame = np.zeros((height, width, 3), dtype=np.uint8)
        frame[:, :, 0] = np.roll(gradient, i * 4)
        frame[:, :, 2] = 255 - frame[:, :, 0]
        cv2.putText(frame, f"F:{i:04d}", (10, 30), cv2.FONT_HERSHEY_SIMPLEX, 0.8, (255, 255, 255), 2)
        writer.write(frame)

    writer.release()
    print(f"Created {output_path}: {num_frames} frames, {width}x{height} @ {fps}fps")
    return num_frames


if __name__ == "__main__":
    output = Path(sys.argv[1]) if len(sys.argv) > 1 else Path("data/raw/synthetic.mp4")
    num_frames = int(sys.argv[2]) if len(sys.argv) > 2 else 90
    create_video(output, num_frames=num_frames)
