"""Resolution and pixel-format reconciliation for raw frames.

A ConversionContext is built once per (source geometry/format, target
geometry/format) pair and then applied to frames. Scaling is bicubic so that
repeated runs over the same input produce identical bytes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from functools import lru_cache

import cv2
import numpy as np

from flipbook.core.contracts import PIXEL_FORMATS, TargetFormat
from flipbook.core.errors import TransformFailed
from .frame import RawFrame

logger = logging.getLogger(__name__)

INTERPOLATION = cv2.INTER_CUBIC

# Direct cvtColor codes; any other pair is routed through bgr24
_DIRECT = {
    ("gray", "bgr24"): cv2.COLOR_GRAY2BGR,
    ("rgb24", "bgr24"): cv2.COLOR_RGB2BGR,
    ("bgra", "bgr24"): cv2.COLOR_BGRA2BGR,
    ("rgba", "bgr24"): cv2.COLOR_RGBA2BGR,
    ("yuv420p", "bgr24"): cv2.COLOR_YUV2BGR_I420,
    ("bgr24", "gray"): cv2.COLOR_BGR2GRAY,
    ("bgr24", "rgb24"): cv2.COLOR_BGR2RGB,
    ("bgr24", "bgra"): cv2.COLOR_BGR2BGRA,
    ("bgr24", "rgba"): cv2.COLOR_BGR2RGBA,
    ("bgr24", "yuv420p"): cv2.COLOR_BGR2YUV_I420,
    ("gray", "bgra"): cv2.COLOR_GRAY2BGRA,
    ("gray", "rgba"): cv2.COLOR_GRAY2RGBA,
    ("rgb24", "gray"): cv2.COLOR_RGB2GRAY,
    ("bgra", "gray"): cv2.COLOR_BGRA2GRAY,
    ("rgba", "gray"): cv2.COLOR_RGBA2GRAY,
    ("bgra", "rgba"): cv2.COLOR_BGRA2RGBA,
    ("rgba", "bgra"): cv2.COLOR_RGBA2BGRA,
    ("rgb24", "rgba"): cv2.COLOR_RGB2RGBA,
    ("rgba", "rgb24"): cv2.COLOR_RGBA2RGB,
    ("yuv420p", "gray"): cv2.COLOR_YUV2GRAY_I420,
    ("yuv420p", "rgb24"): cv2.COLOR_YUV2RGB_I420,
    ("yuv420p", "bgra"): cv2.COLOR_YUV2BGRA_I420,
    ("yuv420p", "rgba"): cv2.COLOR_YUV2RGBA_I420,
    ("rgb24", "yuv420p"): cv2.COLOR_RGB2YUV_I420,
    ("bgra", "yuv420p"): cv2.COLOR_BGRA2YUV_I420,
    ("rgba", "yuv420p"): cv2.COLOR_RGBA2YUV_I420,
}


def _color_route(src: str, dst: str) -> list[int]:
    if src == dst:
        return []
    if (src, dst) in _DIRECT:
        return [_DIRECT[(src, dst)]]
    if (src, "bgr24") in _DIRECT and ("bgr24", dst) in _DIRECT:
        return [_DIRECT[(src, "bgr24")], _DIRECT[("bgr24", dst)]]
    raise TransformFailed(f"No conversion route from {src} to {dst}")


@dataclass(frozen=True)
class ConversionContext:
    """Prepared conversion from one frame geometry/format to another.

    Planar sources are unpacked before scaling and planar targets are packed
    after it, since scaling only runs on packed pixels.
    """

    src_width: int
    src_height: int
    src_fmt: str
    dst_width: int
    dst_height: int
    dst_fmt: str
    before_scale: tuple[int, ...] = field(default=())
    after_scale: tuple[int, ...] = field(default=())

    @property
    def scales(self) -> bool:
        return (self.src_width, self.src_height) != (self.dst_width, self.dst_height)

    def convert(self, frame: RawFrame) -> RawFrame:
        if not frame.matches(self.src_width, self.src_height, self.src_fmt):
            raise TransformFailed(f"{frame!r} does not match context source {self.src_fmt}")
        try:
            data = frame.data
            for code in self.before_scale:
                data = cv2.cvtColor(data, code)
            if self.scales:
                data = cv2.resize(data, (self.dst_width, self.dst_height), interpolation=INTERPOLATION)
            for code in self.after_scale:
                data = cv2.cvtColor(data, code)
        except cv2.error as e:
            raise TransformFailed(f"Conversion {self.src_fmt} -> {self.dst_fmt} failed: {e}") from e
        return RawFrame(np.ascontiguousarray(data), self.dst_fmt)


@lru_cache(maxsize=32)
def get_conversion_context(
    src_width: int,
    src_height: int,
    src_fmt: str,
    dst_width: int,
    dst_height: int,
    dst_fmt: str,
) -> ConversionContext:
    """Build (or reuse) the context for one conversion; raises TransformFailed."""
    for fmt in (src_fmt, dst_fmt):
        if fmt not in PIXEL_FORMATS:
            raise TransformFailed(f"Unknown pixel format: {fmt}")
    if min(src_width, src_height, dst_width, dst_height) <= 0:
        raise TransformFailed(
            f"Invalid geometry {src_width}x{src_height} -> {dst_width}x{dst_height}"
        )
    if dst_fmt == "yuv420p" and (dst_width % 2 or dst_height % 2):
        raise TransformFailed(f"yuv420p needs even dimensions, got {dst_width}x{dst_height}")

    scaling = (src_width, src_height) != (dst_width, dst_height)
    if not scaling:
        return ConversionContext(
            src_width, src_height, src_fmt, dst_width, dst_height, dst_fmt,
            before_scale=tuple(_color_route(src_fmt, dst_fmt)),
        )

    # Scale in the source format when it is packed, otherwise in bgr24
    scale_fmt = "bgr24" if src_fmt == "yuv420p" else src_fmt
    return ConversionContext(
        src_width, src_height, src_fmt, dst_width, dst_height, dst_fmt,
        before_scale=tuple(_color_route(src_fmt, scale_fmt)),
        after_scale=tuple(_color_route(scale_fmt, dst_fmt)),
    )


def reconcile(frame: RawFrame, target: TargetFormat) -> RawFrame:
    """Return ``frame`` in the target geometry and pixel format.

    A frame that already matches is returned as is, without a copy.
    """
    if frame.matches(target.width, target.height, target.pix_fmt):
        return frame
    ctx = get_conversion_context(
        frame.width, frame.height, frame.pix_fmt,
        target.width, target.height, target.pix_fmt,
    )
    logger.debug(
        f"Reconciling {frame!r} -> {target.width}x{target.height} {target.pix_fmt}"
    )
    return ctx.convert(frame)


def convert_format(frame: RawFrame, pix_fmt: str) -> RawFrame:
    """Change only the pixel format, keeping the geometry."""
    if frame.pix_fmt == pix_fmt:
        return frame
    ctx = get_conversion_context(
        frame.width, frame.height, frame.pix_fmt,
        frame.width, frame.height, pix_fmt,
    )
    return ctx.convert(frame)
