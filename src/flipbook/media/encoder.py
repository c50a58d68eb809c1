"""Encode side: one output container holding one video stream."""

from __future__ import annotations

import logging
import math
import os
from dataclasses import dataclass
from fractions import Fraction
from pathlib import Path

import av
from av.error import FFmpegError

from flipbook.core.contracts import EncoderSettings
from flipbook.core.errors import EncodeFailed, EncoderInitFailed, WriteFailed
from .frame import RawFrame

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EncodedPacket:
    """Timestamps of one muxed packet, in the output stream's time base."""

    pts: int
    dts: int
    duration: int
    time_base: Fraction
    keyframe: bool = False


def rescale_ts(value: int, src: Fraction, dst: Fraction) -> int:
    """Convert a timestamp between time bases, rounding halves away from zero."""
    exact = Fraction(value) * src / dst
    half = Fraction(1, 2)
    if exact >= 0:
        return math.floor(exact + half)
    return -math.floor(-exact + half)


class VideoEncoder:
    """Encoder session plus muxer for a single output file.

    Frames must already be in the settings' target format. Each frame is sent
    with an explicit presentation timestamp in codec time base (1/fps). The
    packets the encoder emits are muxed straight away and returned with their
    timestamps rescaled to the stream time base. With B-frames enabled the
    encoder holds frames back, so packets lag the frames that produced them
    until flush(). The file is only complete after finish().
    """

    def __init__(
        self,
        settings: EncoderSettings,
        path: Path,
        container: av.container.OutputContainer,
        stream: av.video.stream.VideoStream,
    ):
        self.settings = settings
        self.path = path
        self._container = container
        self._stream = stream
        self._last_pts: int | None = None
        self._flushed = False

    @classmethod
    def open(cls, settings: EncoderSettings, output_path: Path | str) -> VideoEncoder:
        path = Path(output_path)
        if not path.parent.is_dir():
            raise WriteFailed(f"Output directory does not exist: {path.parent}")
        if path.is_dir():
            raise WriteFailed(f"Output path is a directory: {path}")
        if not os.access(path.parent, os.W_OK):
            raise WriteFailed(f"Output directory is not writable: {path.parent}")

        try:
            container = av.open(str(path), mode="w")
        except (FFmpegError, ValueError) as e:
            raise EncoderInitFailed(f"Cannot create output container {path}: {e}") from e

        target = settings.target
        try:
            stream = container.add_stream(settings.codec, rate=settings.fps)
            ctx = stream.codec_context
            ctx.width = target.width
            ctx.height = target.height
            ctx.pix_fmt = settings.codec_pix_fmt
            ctx.bit_rate = settings.bit_rate
            ctx.gop_size = settings.gop_size
            ctx.max_b_frames = settings.max_b_frames
            ctx.time_base = settings.time_base
            stream.time_base = settings.stream_time_base
            # Opens the codec and writes the header, so bad settings fail here
            container.start_encoding()
        except (FFmpegError, ValueError) as e:
            container.close()
            path.unlink(missing_ok=True)
            raise EncoderInitFailed(
                f"Cannot open {settings.codec} encoder for {path} "
                f"({target.width}x{target.height} @ {settings.fps}fps): {e}"
            ) from e

        logger.info(
            f"Opened {path.name}: {settings.codec} {target.width}x{target.height} "
            f"@ {settings.fps}fps, {ctx.bit_rate} b/s, gop={ctx.gop_size}, "
            f"b-frames={ctx.max_b_frames}, stream time base {stream.time_base}"
        )
        return cls(settings, path, container, stream)

    @property
    def closed(self) -> bool:
        return self._container is None

    @property
    def stream_time_base(self) -> Fraction:
        """Time base the muxer settled on for the output stream."""
        return Fraction(self._stream.time_base)

    def encode(self, frame: RawFrame, pts: int) -> list[EncodedPacket]:
        """Send one frame; returns the packets muxed as a result (possibly none)."""
        if self._container is None or self._flushed:
            raise WriteFailed(f"Encoder for {self.path} is already finished")
        target = self.settings.target
        if not frame.matches(target.width, target.height, target.pix_fmt):
            raise EncodeFailed(
                f"{frame!r} does not match encoder format "
                f"{target.width}x{target.height} {target.pix_fmt}"
            )
        if self._last_pts is not None and pts <= self._last_pts:
            raise WriteFailed(f"Non-increasing timestamp {pts} after {self._last_pts}")

        data = frame.data
        if frame.pix_fmt == "gray" and data.ndim == 3:
            data = data.reshape(data.shape[0], data.shape[1])
        try:
            av_frame = av.VideoFrame.from_ndarray(data, format=frame.pix_fmt)
            av_frame = av_frame.reformat(format=self.settings.codec_pix_fmt)
            av_frame.pts = pts
            av_frame.time_base = self.settings.time_base
            packets = self._stream.encode(av_frame)
        except (FFmpegError, ValueError) as e:
            raise EncodeFailed(f"Encoding frame pts={pts} failed: {e}") from e
        self._last_pts = pts
        return self._mux(packets)

    def flush(self) -> list[EncodedPacket]:
        """Drain the frames the encoder still holds back; returns their packets."""
        if self._container is None:
            raise WriteFailed(f"Encoder for {self.path} is already finished")
        if self._flushed:
            return []
        self._flushed = True
        try:
            packets = self._stream.encode(None)
        except FFmpegError as e:
            raise WriteFailed(f"Flushing encoder for {self.path} failed: {e}") from e
        return self._mux(packets)

    def _mux(self, packets) -> list[EncodedPacket]:
        stream_tb = self.stream_time_base
        records = []
        for packet in packets:
            src_tb = Fraction(packet.time_base or self.settings.time_base)
            pts = rescale_ts(packet.pts, src_tb, stream_tb)
            dts = rescale_ts(packet.dts, src_tb, stream_tb) if packet.dts is not None else pts
            records.append(EncodedPacket(
                pts=pts,
                dts=dts,
                duration=rescale_ts(packet.duration or 0, src_tb, stream_tb),
                time_base=stream_tb,
                keyframe=packet.is_keyframe,
            ))
            try:
                self._container.mux(packet)
            except FFmpegError as e:
                raise WriteFailed(f"Writing packet pts={pts} to {self.path} failed: {e}") from e
        return records

    def finish(self) -> int:
        """Flush the encoder and write the trailer; returns the output size in bytes."""
        if self._container is None:
            raise WriteFailed(f"Encoder for {self.path} is already finished")
        self.flush()
        container, self._container = self._container, None
        try:
            container.close()
        except FFmpegError as e:
            raise WriteFailed(f"Writing trailer of {self.path} failed: {e}") from e

        if not self.path.is_file():
            raise WriteFailed(f"Output was not written: {self.path}")
        size = self.path.stat().st_size
        if size == 0:
            raise WriteFailed(f"Output is empty: {self.path}")
        return size

    def close(self) -> None:
        """Close the container without validating the output."""
        if self._container is None:
            return
        container, self._container = self._container, None
        try:
            container.close()
        except FFmpegError as e:
            logger.warning(f"Closing {self.path} failed: {e}")

    def __enter__(self) -> VideoEncoder:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
