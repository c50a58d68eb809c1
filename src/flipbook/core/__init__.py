"""flipbook core: base step, shared contracts, errors, logging."""

from .step_base import BaseStep
from .contracts import EncoderSettings, StepMeta, TargetFormat
from .errors import (
    DecodeFailed,
    DecoderInitFailed,
    EncodeFailed,
    EncoderInitFailed,
    FlipbookError,
    OpenFailed,
    SetupError,
    StreamNotFound,
    TransformFailed,
    UnitError,
    UnsafeWorkDir,
    WriteFailed,
)
from .logging import setup_logging, set_codec_log_level

__all__ = [
    "BaseStep",
    "EncoderSettings",
    "StepMeta",
    "TargetFormat",
    "DecodeFailed",
    "DecoderInitFailed",
    "EncodeFailed",
    "EncoderInitFailed",
    "FlipbookError",
    "OpenFailed",
    "SetupError",
    "StreamNotFound",
    "TransformFailed",
    "UnitError",
    "UnsafeWorkDir",
    "WriteFailed",
    "setup_logging",
    "set_codec_log_level",
]
