"""In-memory decoded frames."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from flipbook.core.contracts import PIXEL_FORMATS


@dataclass
class RawFrame:
    """A decoded image: pixel format plus a uint8 numpy buffer.

    Packed formats are stored as (h, w) or (h, w, c). ``yuv420p`` is stored the
    way OpenCV lays out I420: one (h * 3 / 2, w) array holding the Y plane
    followed by the U and V planes.
    """

    data: np.ndarray
    pix_fmt: str

    def __post_init__(self) -> None:
        if self.pix_fmt not in PIXEL_FORMATS:
            raise ValueError(f"Unsupported pixel format: {self.pix_fmt}")
        if self.data.dtype != np.uint8:
            raise ValueError(f"Frame buffer must be uint8, got {self.data.dtype}")
        channels = 1 if self.data.ndim == 2 else self.data.shape[2]
        if channels != PIXEL_FORMATS[self.pix_fmt]:
            raise ValueError(
                f"{self.pix_fmt} expects {PIXEL_FORMATS[self.pix_fmt]} channel(s), buffer has {channels}"
            )

    @classmethod
    def from_array(cls, data: np.ndarray) -> RawFrame:
        """Wrap an OpenCV image, inferring gray / bgr24 / bgra from its channels."""
        if data.ndim == 2 or (data.ndim == 3 and data.shape[2] == 1):
            return cls(data.reshape(data.shape[0], data.shape[1]), "gray")
        if data.ndim == 3 and data.shape[2] == 3:
            return cls(data, "bgr24")
        if data.ndim == 3 and data.shape[2] == 4:
            return cls(data, "bgra")
        raise ValueError(f"Cannot infer pixel format for array of shape {data.shape}")

    @property
    def width(self) -> int:
        return int(self.data.shape[1])

    @property
    def height(self) -> int:
        if self.pix_fmt == "yuv420p":
            return int(self.data.shape[0]) * 2 // 3
        return int(self.data.shape[0])

    @property
    def planes(self) -> list[np.ndarray]:
        if self.pix_fmt != "yuv420p":
            return [self.data]
        h, w = self.height, self.width
        chroma = self.data[h:].reshape(-1)
        quarter = (h // 2) * (w // 2)
        return [
            self.data[:h],
            chroma[:quarter].reshape(h // 2, w // 2),
            chroma[quarter:].reshape(h // 2, w // 2),
        ]

    @property
    def strides(self) -> list[int]:
        """Bytes per row of each plane."""
        return [int(p.strides[0]) for p in self.planes]

    def matches(self, width: int, height: int, pix_fmt: str) -> bool:
        return self.width == width and self.height == height and self.pix_fmt == pix_fmt

    def __repr__(self) -> str:
        return f"RawFrame({self.width}x{self.height} {self.pix_fmt})"
