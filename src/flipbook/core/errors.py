"""Error taxonomy shared by the extraction and combination pipelines.

Setup errors (opening sources, building codecs, opening outputs) abort the run.
Unit errors describe a single frame or image and are skipped by the loops.
"""

from __future__ import annotations

from pathlib import Path


class FlipbookError(RuntimeError):
    """Base class for all pipeline errors."""


class SetupError(FlipbookError):
    """A source, codec or output could not be constructed."""


class OpenFailed(SetupError):
    """Container or file could not be opened."""


class StreamNotFound(SetupError):
    """The container holds no video stream."""


class DecoderInitFailed(SetupError):
    pass


class EncoderInitFailed(SetupError):
    pass


class UnsafeWorkDir(SetupError):
    """The working directory cannot be cleared without losing files flipbook did not write."""


class WriteFailed(FlipbookError):
    """Output file or packet write failed; the output is not valid."""


class UnitError(FlipbookError):
    """A single frame or image failed; the run may continue without it."""

    def __init__(self, message: str, path: Path | None = None):
        super().__init__(message)
        self.path = path


class DecodeFailed(UnitError):
    pass


class EncodeFailed(UnitError):
    pass


class TransformFailed(UnitError):
    pass
