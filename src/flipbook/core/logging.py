"""Structured logging setup for the flipbook pipeline."""

from __future__ import annotations

import logging
import sys

# FFmpeg-style level names mapped onto (OpenCV level, PyAV/FFmpeg level)
CODEC_LOG_LEVELS = {
    "quiet": ("LOG_LEVEL_SILENT", "QUIET"),
    "panic": ("LOG_LEVEL_FATAL", "PANIC"),
    "fatal": ("LOG_LEVEL_FATAL", "FATAL"),
    "error": ("LOG_LEVEL_ERROR", "ERROR"),
    "warning": ("LOG_LEVEL_WARNING", "WARNING"),
    "info": ("LOG_LEVEL_INFO", "INFO"),
    "verbose": ("LOG_LEVEL_DEBUG", "VERBOSE"),
    "debug": ("LOG_LEVEL_VERBOSE", "DEBUG"),
}


def setup_logging(level: str = "INFO") -> None:
    """Configure structured logging with consistent format."""
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
    )


def set_codec_log_level(level: str = "warning") -> None:
    """Set the verbosity of the codec libraries (OpenCV's and PyAV's FFmpeg)."""
    import av.logging
    import cv2

    names = CODEC_LOG_LEVELS.get(level.lower())
    if names is None:
        raise ValueError(f"Unknown codec log level '{level}', expected one of {sorted(CODEC_LOG_LEVELS)}")
    cv_name, av_name = names
    cv2.utils.logging.setLogLevel(getattr(cv2.utils.logging, cv_name))
    av.logging.set_level(getattr(av.logging, av_name))
