"""CLI entry point for framecast.

Usage:
    framecast render slides.html -d 3 -d 5 --fps 30     # Render a job
    framecast plan -d 2 -d 3 --fps 10                   # Show frame ranges
    framecast status <job_id>                           # Job status
    framecast jobs                                      # List jobs
    framecast info                                      # Show pipeline info
"""

from __future__ import annotations

import json
import signal
import sys
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

from framecast.core.logging import setup_logging

app = typer.Typer(name="framecast", help="Render slideshows to frame-accurate video")
console = Console()

DEFAULT_CONFIG = Path("configs/pipeline.yaml")
DEFAULT_JOBS_ROOT = Path("jobs")


def _load_pipeline(config: Path | None):
    from framecast.core.pipeline_runner import default_pipeline, load_pipeline_config

    if config is not None and config.exists():
        return load_pipeline_config(config)
    return default_pipeline()


def _exit_on_sigterm(signum, frame) -> None:
    # SystemExit unwinds through the registry's cleanup
    sys.exit(128 + signum)


@app.command()
def render(
    content: str = typer.Argument(..., help="URL, HTML markup, or path to an .html file"),
    duration: List[float] = typer.Option(..., "--duration", "-d", help="Seconds per segment (repeat)"),
    fps: float = typer.Option(2.0, help="Frames per second"),
    width: Optional[int] = typer.Option(None, help="Frame width (default: preset)"),
    height: Optional[int] = typer.Option(None, help="Frame height (default: preset)"),
    preset: Optional[str] = typer.Option(None, help="youtube|instagram|tiktok|custom"),
    audio: Optional[Path] = typer.Option(None, "--audio", "-a", help="Audio track to mux"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Output video path"),
    jobs_root: Path = typer.Option(DEFAULT_JOBS_ROOT, help="Directory holding job directories"),
    config: Path = typer.Option(DEFAULT_CONFIG, help="Pipeline config path"),
    log_level: str = typer.Option("INFO", help="Logging level"),
    log_file: Optional[Path] = typer.Option(None, help="Also append log records to this file"),
) -> None:
    """Render content to a video, one segment per --duration."""
    setup_logging(log_level, log_file)
    from framecast.core.errors import FramecastError, RequestValidationError
    from framecast.core.workspace import WorkspaceRegistry
    from framecast.render import render_to_video

    content_type = "auto"
    candidate = Path(content)
    if content.lower().endswith((".html", ".htm")) and candidate.is_file():
        content = candidate.read_text(encoding="utf-8")
        content_type = "html"

    request = {
        "content": content,
        "content_type": content_type,
        "durations": duration,
        "fps": fps,
        "width": width,
        "height": height,
        "preset": preset,
        "audio_path": audio,
        "output_path": output,
    }

    signal.signal(signal.SIGTERM, _exit_on_sigterm)
    with WorkspaceRegistry() as registry:
        try:
            result = render_to_video(
                request,
                jobs_root=jobs_root,
                registry=registry,
                pipeline=_load_pipeline(config),
            )
        except RequestValidationError as exc:
            console.print(f"[red]Invalid request:[/red] {exc}")
            raise typer.Exit(2)
        except FramecastError as exc:
            console.print(f"[red]Render failed ({exc.code}):[/red] {exc}")
            raise typer.Exit(1)

    table = Table(title=f"Job {result.job_id}")
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Video", str(result.video_path))
    table.add_row("Frames", str(result.total_frames))
    table.add_row("FPS", f"{result.fps:g}")
    table.add_row("Size", f"{result.width}x{result.height}")
    table.add_row("Duration", f"{result.duration_seconds:.3f}s" if result.duration_seconds else "-")
    table.add_row("Audio", "Y" if result.has_audio else "N")
    console.print(table)


@app.command()
def plan(
    duration: List[float] = typer.Option(..., "--duration", "-d", help="Seconds per segment (repeat)"),
    fps: float = typer.Option(2.0, help="Frames per second"),
) -> None:
    """Show the frame ranges a set of durations maps to."""
    from framecast.steps.s01_plan_timeline._planner import plan_timeline, total_frames

    try:
        ranges = plan_timeline(duration, fps)
    except ValueError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(2)

    table = Table(title=f"Timeline @ {fps:g} fps")
    table.add_column("#", style="dim")
    table.add_column("Duration", style="cyan")
    table.add_column("Start", style="green")
    table.add_column("End", style="green")
    table.add_column("Frames", style="yellow")
    for r in ranges:
        table.add_row(
            str(r.segment_index),
            f"{r.duration:g}s",
            str(r.start_frame),
            str(r.end_frame) if not r.is_empty else "-",
            str(r.frame_count),
        )
    console.print(table)
    console.print(f"Total frames: {total_frames(ranges)}")


@app.command()
def status(
    job_id: str = typer.Argument(..., help="Job identity"),
    jobs_root: Path = typer.Option(DEFAULT_JOBS_ROOT, help="Directory holding job directories"),
) -> None:
    """Show the status of one job."""
    from framecast.core.job import JobStatus, JobStore

    store = JobStore(jobs_root)
    console.print(store.describe_status(job_id))
    if store.status(job_id) is JobStatus.NOT_FOUND:
        raise typer.Exit(1)


@app.command()
def jobs(
    jobs_root: Path = typer.Option(DEFAULT_JOBS_ROOT, help="Directory holding job directories"),
) -> None:
    """List jobs and their status."""
    from framecast.core.job import JobStore

    store = JobStore(jobs_root)
    table = Table(title=f"Jobs in {jobs_root}")
    table.add_column("Job", style="cyan")
    table.add_column("Status", style="yellow")
    for job_id, job_status in store.list_jobs():
        table.add_row(job_id, job_status.value)
    console.print(table)


@app.command()
def info(config: Path = typer.Option(DEFAULT_CONFIG, help="Pipeline config path")) -> None:
    """Show pipeline steps."""
    pipeline_cfg = _load_pipeline(config)
    table = Table(title=f"Pipeline: {pipeline_cfg.project_name}")
    table.add_column("#", style="dim")
    table.add_column("Step", style="cyan")
    table.add_column("Module", style="green")
    table.add_column("Enabled", style="yellow")
    table.add_column("Depends On", style="dim")

    for i, step in enumerate(pipeline_cfg.steps, 1):
        table.add_row(
            str(i),
            step.name,
            step.module,
            "Y" if step.enabled else "N",
            ", ".join(step.depends_on) if step.depends_on else "-",
        )
    console.print(table)


@app.command()
def schema(
    step_name: str = typer.Argument(..., help="Step name (e.g. capture_frames)"),
    config: Path = typer.Option(DEFAULT_CONFIG, help="Pipeline config path"),
) -> None:
    """Print a step's input, output and config JSON schemas."""
    from framecast.core.pipeline_runner import import_step_class

    pipeline_cfg = _load_pipeline(config)
    entry = next((s for s in pipeline_cfg.steps if s.name == step_name), None)
    if entry is None:
        console.print(f"[red]Step '{step_name}' not found in pipeline config[/red]")
        raise typer.Exit(1)

    step_cls = import_step_class(entry.module)
    console.print_json(json.dumps(step_cls.schemas()))


if __name__ == "__main__":
    app()
