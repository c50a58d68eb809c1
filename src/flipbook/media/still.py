"""Still-image codec: one RawFrame to one image file and back."""

from __future__ import annotations

import logging
from pathlib import Path

import cv2
import numpy as np

from flipbook.core.errors import DecodeFailed, EncodeFailed, TransformFailed
from .frame import RawFrame
from .transform import convert_format

logger = logging.getLogger(__name__)


class StillImageCodec:
    """Encode/decode single frames through OpenCV's image codecs.

    Frames are normalized to ``pix_fmt`` before encoding, so every file written
    by one codec instance shares a pixel format regardless of the source video.
    """

    # Layouts OpenCV's image writers store without reinterpreting channels
    PIXEL_FORMATS = ("gray", "bgr24", "bgra")

    def __init__(self, extension: str = "png", pix_fmt: str = "bgr24", png_compression: int = 3):
        if pix_fmt not in self.PIXEL_FORMATS:
            raise ValueError(f"Still images support {self.PIXEL_FORMATS}, not {pix_fmt}")
        self.extension = extension.lower().lstrip(".")
        self.pix_fmt = pix_fmt
        self.params: list[int] = []
        if self.extension == "png":
            self.params = [cv2.IMWRITE_PNG_COMPRESSION, png_compression]

    @property
    def suffix(self) -> str:
        return f".{self.extension}"

    def encode(self, frame: RawFrame, path: Path) -> None:
        try:
            normalized = convert_format(frame, self.pix_fmt)
        except TransformFailed as e:
            raise EncodeFailed(f"Cannot normalize {frame!r} to {self.pix_fmt}: {e}", path) from e

        try:
            ok, buffer = cv2.imencode(self.suffix, normalized.data, self.params)
        except cv2.error as e:
            raise EncodeFailed(f"Encoder rejected {frame!r}: {e}", path) from e
        if not ok or buffer is None or buffer.size == 0:
            raise EncodeFailed(f"Encoder produced no data for {path.name}", path)

        try:
            Path(path).write_bytes(buffer.tobytes())
        except OSError as e:
            Path(path).unlink(missing_ok=True)
            raise EncodeFailed(f"Cannot write {path}: {e}", path) from e

    def decode(self, path: Path) -> RawFrame:
        try:
            raw = np.fromfile(str(path), dtype=np.uint8)
        except OSError as e:
            raise DecodeFailed(f"Cannot read {path}: {e}", path) from e
        if raw.size == 0:
            raise DecodeFailed(f"Empty image file: {path.name}", path)

        try:
            image = cv2.imdecode(raw, cv2.IMREAD_UNCHANGED)
        except cv2.error as e:
            raise DecodeFailed(f"Cannot decode {path.name}: {e}", path) from e
        if image is None:
            raise DecodeFailed(f"No image decoded from {path.name}", path)

        if image.dtype == np.uint16:
            image = (image >> 8).astype(np.uint8)
        elif image.dtype != np.uint8:
            raise DecodeFailed(f"Unsupported sample type {image.dtype} in {path.name}", path)
        try:
            return RawFrame.from_array(image)
        except ValueError as e:
            raise DecodeFailed(str(e), path) from e
