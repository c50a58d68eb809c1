"""Pipeline orchestrator: extract every input into one directory, then combine it."""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, Field

from flipbook.steps.s01_extract_frames.config import ExtractFramesConfig
from flipbook.steps.s01_extract_frames.contracts import ExtractFramesInput, ExtractFramesOutput
from flipbook.steps.s01_extract_frames.step import ExtractFramesStep
from flipbook.steps.s02_combine_frames.config import CombineFramesConfig
from flipbook.steps.s02_combine_frames.contracts import CombineFramesInput, CombineFramesOutput
from flipbook.steps.s02_combine_frames.step import CombineFramesStep
from flipbook.utils.io import prepare_work_dir, remove_work_dir

logger = logging.getLogger(__name__)

DEFAULT_WORK_DIR = Path(".tmp/flipbook_frames")


class PipelineConfig(BaseModel):
    """Top-level pipeline configuration loaded from pipeline.yaml."""

    project_name: str = "flipbook"
    work_dir: Path = DEFAULT_WORK_DIR
    clear_work_dir: bool = Field(True, description="Remove previous stills before extracting")
    keep_work_dir: bool = Field(True, description="Leave the stills on disk after combining")
    log_level: str = "INFO"
    codec_log_level: str = Field("warning", description="Verbosity of the codec library")
    extract: ExtractFramesConfig = Field(default_factory=ExtractFramesConfig)
    combine: CombineFramesConfig = Field(default_factory=CombineFramesConfig)


class PipelineResult(BaseModel):
    work_dir: Path
    leading_zeros: int
    extracted: list[ExtractFramesOutput] = Field(default_factory=list)
    combined: CombineFramesOutput


def load_pipeline_config(config_path: Path) -> PipelineConfig:
    """Load and validate pipeline.yaml."""
    with open(config_path, encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}
    return PipelineConfig(**raw)


def source_tags(count: int) -> list[str | None]:
    """Filename tags for ``count`` inputs; a single input needs none."""
    if count == 1:
        return [None]
    width = len(str(count - 1))
    return [f"s{i:0{width}d}" for i in range(count)]


def run_pipeline(
    video_paths: list[Path],
    output_path: Path,
    config: PipelineConfig | None = None,
) -> PipelineResult:
    """Extract all videos into the work dir, then combine the stills into ``output_path``.

    Every input shares the widest zero-pad width so their stills interleave
    by frame index when the directory is sorted.
    """
    if not video_paths:
        raise ValueError("At least one input video is required")
    config = config or PipelineConfig()
    protected = [*video_paths, output_path]
    work_dir = prepare_work_dir(config.work_dir, clear=config.clear_work_dir, protected=protected)
    logger.info(f"Pipeline '{config.project_name}' with {len(video_paths)} input(s)")

    extract_step = ExtractFramesStep(config=config.extract, data_root=work_dir)
    width = max(ExtractFramesStep.probe_leading_zeros(p) for p in video_paths)
    logger.info(f"Shared pad width: {width}")

    extracted = []
    for video_path, tag in zip(video_paths, source_tags(len(video_paths))):
        logger.info(f"--- Step: {extract_step.name} ({video_path.name}) ---")
        extracted.append(extract_step.execute(ExtractFramesInput(
            video_path=video_path,
            output_dir=work_dir,
            leading_zeros=width,
            source_tag=tag,
        )))

    combine_step = CombineFramesStep(config=config.combine, data_root=work_dir)
    logger.info(f"--- Step: {combine_step.name} ---")
    combined = combine_step.execute(CombineFramesInput(frames_dir=work_dir, output_path=output_path))

    if not config.keep_work_dir:
        remove_work_dir(work_dir, protected)

    logger.info("Pipeline complete.")
    return PipelineResult(
        work_dir=work_dir,
        leading_zeros=width,
        extracted=extracted,
        combined=combined,
    )
