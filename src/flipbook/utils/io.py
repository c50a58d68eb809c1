"""Filesystem helpers: still-image naming, directory listing, work dirs."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Iterable

from flipbook.core.errors import UnsafeWorkDir

logger = logging.getLogger(__name__)

# Written into every work dir flipbook creates; only such dirs are cleared
WORK_DIR_MARKER = ".flipbook-workdir"


def leading_zeros(total_frames: int) -> int:
    """Zero-pad width for a video of ``total_frames`` frames.

    Equals ``max(1, ceil(log10(total_frames + 1)))``, computed on digits so
    large counts do not suffer float rounding: 42 -> 2, 150 -> 3, 0 -> 1.
    """
    if total_frames < 0:
        raise ValueError(f"Frame count cannot be negative: {total_frames}")
    return max(1, len(str(total_frames)))


def frame_filename(
    index: int,
    width: int,
    extension: str = "png",
    prefix: str = "frame_",
    tag: str | None = None,
) -> str:
    """Name of the still for frame ``index``, e.g. ``frame_0007.png``."""
    suffix = f"_{tag}" if tag else ""
    return f"{prefix}{index:0{width}d}{suffix}.{extension.lstrip('.')}"


def list_frame_files(frames_dir: Path, extension: str = "png") -> list[Path]:
    """Regular files in ``frames_dir`` (not recursive) with the extension, sorted by name."""
    suffix = f".{extension.lstrip('.').lower()}"
    files = [
        p for p in Path(frames_dir).iterdir()
        if p.is_file() and p.suffix.lower() == suffix
    ]
    return sorted(files, key=lambda p: p.name)


def _is_within(path: Path, directory: Path) -> bool:
    path, directory = Path(path).resolve(), Path(directory).resolve()
    return path == directory or directory in path.parents


def prepare_work_dir(work_dir: Path, clear: bool = True, protected: Iterable[Path] = ()) -> Path:
    """Create the working directory, removing previous contents when ``clear``.

    Only a directory flipbook created (it holds ``WORK_DIR_MARKER``) or an
    empty one is ever removed, and never one that contains a ``protected``
    path such as an input video or the output file.
    """
    work_dir = Path(work_dir)
    if clear and work_dir.exists():
        remove_work_dir(work_dir, protected)
    if not work_dir.exists():
        work_dir.mkdir(parents=True)
        (work_dir / WORK_DIR_MARKER).touch()
    logger.info(f"Using work dir {work_dir}")
    return work_dir


def remove_work_dir(work_dir: Path, protected: Iterable[Path] = ()) -> None:
    """Delete a work dir, refusing when it holds a protected path or was not created by flipbook."""
    work_dir = Path(work_dir)
    for path in protected:
        if _is_within(path, work_dir):
            raise UnsafeWorkDir(f"Refusing to clear {work_dir}: it contains {path}")
    if any(work_dir.iterdir()) and not (work_dir / WORK_DIR_MARKER).is_file():
        raise UnsafeWorkDir(
            f"Refusing to clear {work_dir}: it was not created by flipbook "
            f"(no {WORK_DIR_MARKER} marker)"
        )
    shutil.rmtree(work_dir)
    logger.info(f"Removed work dir {work_dir}")
