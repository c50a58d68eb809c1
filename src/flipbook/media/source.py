"""Decode side: a container bound to its first video stream."""

from __future__ import annotations

import logging
import os
from pathlib import Path

import av
import cv2
from av.error import FFmpegError
from pydantic import BaseModel, Field

from flipbook.core.errors import DecoderInitFailed, OpenFailed, StreamNotFound
from .frame import RawFrame

logger = logging.getLogger(__name__)


class StreamInfo(BaseModel):
    """Properties of the selected video stream."""

    path: Path
    codec: str = Field(..., description="FourCC of the stream's codec")
    width: int
    height: int
    fps: float
    frame_count: int = Field(..., description="Frame count reported by the container (may be approximate)")


def fourcc_to_str(value: float) -> str:
    code = int(value)
    chars = "".join(chr((code >> (8 * i)) & 0xFF) for i in range(4))
    return chars.strip("\x00 ") or "unknown"


class VideoSource:
    """An opened container plus the decoder of its first video stream.

    Use as a context manager; the capture is released when the block exits.
    Iterating yields RawFrames in container order, including the frames the
    decoder still buffers once the container is exhausted.
    """

    def __init__(self, path: Path, capture: cv2.VideoCapture):
        self.path = path
        self._capture = capture
        self._eos = False
        self.stream_info = self._read_stream_info()

    @classmethod
    def open(cls, video_path: Path | str) -> VideoSource:
        path = Path(video_path)
        if not path.is_file() or not os.access(path, os.R_OK):
            raise OpenFailed(f"Cannot open video file: {path}")

        _check_container(path)
        capture = _open_capture(path)
        source = cls(path, capture)
        info = source.stream_info
        if info.width <= 0 or info.height <= 0:
            source.close()
            raise DecoderInitFailed(f"Decoder for {path} reports no frame geometry")
        logger.debug(
            f"Opened {path.name}: {info.codec} {info.width}x{info.height} @ {info.fps:.2f}fps"
        )
        return source

    def _read_stream_info(self) -> StreamInfo:
        cap = self._capture
        return StreamInfo(
            path=self.path,
            codec=fourcc_to_str(cap.get(cv2.CAP_PROP_FOURCC)),
            width=int(cap.get(cv2.CAP_PROP_FRAME_WIDTH)),
            height=int(cap.get(cv2.CAP_PROP_FRAME_HEIGHT)),
            fps=float(cap.get(cv2.CAP_PROP_FPS)),
            frame_count=max(0, int(cap.get(cv2.CAP_PROP_FRAME_COUNT))),
        )

    def next(self) -> RawFrame | None:
        """Return the next decoded frame, or None at end of stream."""
        if self._eos:
            return None
        ok, image = self._capture.read()
        if not ok or image is None:
            self._eos = True
            return None
        return RawFrame.from_array(image)

    def __iter__(self):
        while True:
            frame = self.next()
            if frame is None:
                return
            yield frame

    def count_frames(self) -> int:
        """Read the rest of the stream without converting frames; returns how many were decoded."""
        total = 0
        while not self._eos:
            if self._capture.grab():
                total += 1
            else:
                self._eos = True
        return total

    def rewind(self) -> None:
        """Reposition to the first frame by reopening the container."""
        self._capture.release()
        self._capture = _open_capture(self.path)
        self._eos = False

    def close(self) -> None:
        if self._capture is not None:
            self._capture.release()
            self._capture = None

    def __enter__(self) -> VideoSource:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def _check_container(path: Path) -> None:
    """Check that the file is a readable container holding a video stream."""
    try:
        with av.open(str(path)) as container:
            has_video = bool(container.streams.video)
    except (FFmpegError, OSError) as e:
        raise OpenFailed(f"Cannot open video file: {path}: {e}") from e
    if not has_video:
        raise StreamNotFound(f"No video stream in {path}")


def _open_capture(path: Path) -> cv2.VideoCapture:
    capture = cv2.VideoCapture(str(path), cv2.CAP_FFMPEG)
    if not capture.isOpened():
        capture.release()
        raise DecoderInitFailed(f"No decoder for the video stream in {path}")
    return capture


def probe(video_path: Path | str) -> StreamInfo:
    """Open a video just long enough to read its stream properties."""
    with VideoSource.open(video_path) as source:
        return source.stream_info
