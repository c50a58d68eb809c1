"""Codec-session adapters: decode, still images, transforms, encode."""

from .frame import RawFrame
from .source import StreamInfo, VideoSource, probe
from .still import StillImageCodec
from .transform import convert_format, get_conversion_context, reconcile
from .encoder import EncodedPacket, VideoEncoder, rescale_ts

__all__ = [
    "RawFrame",
    "StreamInfo",
    "VideoSource",
    "probe",
    "StillImageCodec",
    "convert_format",
    "get_conversion_context",
    "reconcile",
    "EncodedPacket",
    "VideoEncoder",
    "rescale_ts",
]
