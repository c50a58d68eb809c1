"""CLI entry point for flipbook.

Usage:
    flipbook run first.mp4 [second.mp4] out.mp4   # Extract inputs, combine into out.mp4
    flipbook extract video.mp4 frames/            # Video -> numbered stills
    flipbook combine frames/ out.mp4              # Numbered stills -> video
    flipbook info video.mp4                       # Show video stream info
"""

from __future__ import annotations

from pathlib import Path

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from flipbook import PROGRAM_NAME, __version__
from flipbook.core.errors import FlipbookError, SetupError
from flipbook.core.logging import set_codec_log_level, setup_logging

app = typer.Typer(name=PROGRAM_NAME, help="Convert videos to numbered stills and back")
console = Console()

DEFAULT_CONFIG = Path("configs/pipeline.yaml")

EXIT_ERROR = 1
EXIT_SETUP_ERROR = 2


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"{PROGRAM_NAME} {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False, "--version", "-v", callback=_version_callback, is_eager=True,
        help="Print version information",
    ),
) -> None:
    """Convert videos to numbered stills and back."""


def _load_config(config: Path, log_level: str | None, codec_log_level: str | None):
    from flipbook.core.pipeline_runner import PipelineConfig, load_pipeline_config

    try:
        # Built-in defaults when the default config is not present in the working dir
        if config == DEFAULT_CONFIG and not config.exists():
            cfg = PipelineConfig()
        else:
            cfg = load_pipeline_config(config)
    except (OSError, ValidationError) as e:
        console.print(f"[red]Cannot load config {config}: {e}[/red]")
        raise typer.Exit(EXIT_ERROR)

    setup_logging(log_level or cfg.log_level)
    try:
        set_codec_log_level(codec_log_level or cfg.codec_log_level)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(EXIT_ERROR)
    return cfg


@app.command()
def run(
    paths: list[Path] = typer.Argument(..., help="VIDEO [VIDEO2] OUTPUT"),
    config: Path = typer.Option(DEFAULT_CONFIG, help="Pipeline config path"),
    work_dir: Path = typer.Option(None, help="Directory for intermediate stills"),
    log_level: str = typer.Option(None, help="Log level (DEBUG, INFO, ...)"),
    codec_log_level: str = typer.Option(None, help="Codec library verbosity (quiet ... debug)"),
) -> None:
    """Extract one or two videos into a work dir, then combine the stills into OUTPUT."""
    if len(paths) not in (2, 3):
        console.print("[red]Expected one or two input videos followed by an output path[/red]")
        raise typer.Exit(EXIT_ERROR)

    cfg = _load_config(config, log_level, codec_log_level)
    if work_dir is not None:
        cfg = cfg.model_copy(update={"work_dir": work_dir})

    from flipbook.core.pipeline_runner import run_pipeline

    *inputs, output = paths
    try:
        result = run_pipeline(inputs, output, cfg)
    except FlipbookError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(EXIT_ERROR)

    combined = result.combined
    console.print(
        f"[green]Done.[/green] {combined.output_path}: {combined.frame_count} frames, "
        f"{len(combined.skipped_files)} skipped"
    )


@app.command()
def extract(
    video: Path = typer.Argument(..., help="Input video"),
    output_dir: Path = typer.Argument(..., help="Directory for the stills"),
    tag: str = typer.Option(None, "--tag", help="Filename suffix for this video's stills"),
    leading_zeros: int = typer.Option(None, "--leading-zeros", min=1, help="Zero-pad width override"),
    config: Path = typer.Option(DEFAULT_CONFIG, help="Pipeline config path"),
    log_level: str = typer.Option(None, help="Log level (DEBUG, INFO, ...)"),
    codec_log_level: str = typer.Option(None, help="Codec library verbosity (quiet ... debug)"),
) -> None:
    """Extract every frame of VIDEO as a numbered still."""
    cfg = _load_config(config, log_level, codec_log_level)

    from flipbook.steps.s01_extract_frames.contracts import ExtractFramesInput
    from flipbook.steps.s01_extract_frames.step import ExtractFramesStep

    step = ExtractFramesStep(config=cfg.extract, data_root=output_dir)
    try:
        output = step.execute(ExtractFramesInput(
            video_path=video,
            output_dir=output_dir,
            leading_zeros=leading_zeros,
            source_tag=tag,
        ))
    except SetupError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(EXIT_SETUP_ERROR)
    except FlipbookError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(EXIT_ERROR)
    console.print(f"[green]Done. Output:[/green] {output.model_dump_json(indent=2, exclude={'frame_list'})}")


@app.command()
def combine(
    frames_dir: Path = typer.Argument(..., help="Directory of numbered stills"),
    output: Path = typer.Argument(..., help="Video file to write"),
    config: Path = typer.Option(DEFAULT_CONFIG, help="Pipeline config path"),
    log_level: str = typer.Option(None, help="Log level (DEBUG, INFO, ...)"),
    codec_log_level: str = typer.Option(None, help="Codec library verbosity (quiet ... debug)"),
) -> None:
    """Encode the stills in FRAMES_DIR, in filename order, into OUTPUT."""
    cfg = _load_config(config, log_level, codec_log_level)

    from flipbook.steps.s02_combine_frames.contracts import CombineFramesInput
    from flipbook.steps.s02_combine_frames.step import CombineFramesStep

    step = CombineFramesStep(config=cfg.combine, data_root=frames_dir)
    try:
        result = step.execute(CombineFramesInput(frames_dir=frames_dir, output_path=output))
    except SetupError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(EXIT_SETUP_ERROR)
    except FlipbookError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(EXIT_ERROR)
    console.print(f"[green]Done. Output:[/green] {result.model_dump_json(indent=2, exclude={'timestamps'})}")


@app.command()
def info(
    video: Path = typer.Argument(..., help="Input video"),
    codec_log_level: str = typer.Option("warning", help="Codec library verbosity (quiet ... debug)"),
) -> None:
    """Show the video stream a video would be extracted from."""
    from flipbook.media.source import probe

    set_codec_log_level(codec_log_level)
    try:
        stream = probe(video)
    except SetupError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(EXIT_SETUP_ERROR)

    table = Table(title=f"Video stream: {video.name}")
    table.add_column("Property", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Codec", stream.codec)
    table.add_row("Resolution", f"{stream.width}x{stream.height}")
    table.add_row("Frame rate", f"{stream.fps:.3f}")
    table.add_row("Frames (reported)", str(stream.frame_count))
    console.print(table)


if __name__ == "__main__":
    app()
