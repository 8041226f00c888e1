"""Render content to video: validate, allocate a job, run plan -> capture -> encode."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from framecast.core.contracts import PipelineConfig, RenderRequest, RenderResult
from framecast.core.errors import FramecastError, RequestValidationError
from framecast.core.job import Job, JobStore
from framecast.core.pipeline_runner import default_pipeline, run_pipeline
from framecast.core.workspace import WorkspaceRegistry
from framecast.steps.s01_plan_timeline._planner import plan_timeline, total_frames
from framecast.steps.s02_capture_frames.step import SurfaceFactory
from framecast.steps.s03_encode_video._ffmpeg import EventCallback

logger = logging.getLogger(__name__)


def validate_request(request: RenderRequest | dict[str, Any]) -> RenderRequest:
    """Check a request completely before anything touches the disk."""
    if isinstance(request, RenderRequest):
        request = request.model_dump()
    try:
        validated = RenderRequest.model_validate(request)
    except ValidationError as exc:
        raise RequestValidationError(_describe_validation_error(exc)) from exc

    planned = total_frames(plan_timeline(validated.durations, validated.fps))
    if planned == 0:
        raise RequestValidationError(
            f"Durations {validated.durations} produce no frames at {validated.fps:g} fps"
        )
    return validated


def _describe_validation_error(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ())) or "request"
        parts.append(f"{loc}: {err.get('msg')}")
    return "; ".join(parts)


def render_to_video(
    request: RenderRequest | dict[str, Any],
    jobs_root: Path,
    registry: WorkspaceRegistry | None = None,
    pipeline: PipelineConfig | None = None,
    surface_factory: SurfaceFactory | None = None,
    on_encode_event: EventCallback | None = None,
) -> RenderResult:
    """Run one render job to completion or failure.

    Raises RequestValidationError before any directory is created when the
    request is invalid. Any later failure is recorded in the job directory
    (``error.txt``) and re-raised as a FramecastError; frames and partial
    output stay on disk for inspection.
    """
    request = validate_request(request)
    store = JobStore(jobs_root)
    job = store.create(request)
    if registry is not None:
        registry.track(job.work_dir)

    try:
        result = _run_job(job, request, pipeline, surface_factory, on_encode_event)
    except Exception as exc:
        store.mark_failed(job, exc)
        if registry is not None:
            registry.release(job.work_dir)
        logger.error(f"Job {job.job_id} failed: {exc}")
        if isinstance(exc, FramecastError):
            raise
        raise FramecastError(f"Job {job.job_id} failed: {exc}", code="job_failed") from exc

    store.mark_completed(job, result)
    if registry is not None:
        registry.release(job.work_dir)
    logger.info(f"Job {job.job_id} completed: {result.video_path}")
    return result


def _run_job(
    job: Job,
    request: RenderRequest,
    pipeline: PipelineConfig | None,
    surface_factory: SurfaceFactory | None,
    on_encode_event: EventCallback | None,
) -> RenderResult:
    inputs = request.model_dump(exclude={"output_path"})
    inputs["output_path"] = job.video_path

    step_kwargs: dict[str, dict[str, Any]] = {}
    if surface_factory is not None:
        step_kwargs["capture_frames"] = {"surface_factory": surface_factory}
    if on_encode_event is not None:
        step_kwargs["encode_video"] = {"on_event": on_encode_event}

    outputs = run_pipeline(
        pipeline or default_pipeline(),
        inputs=inputs,
        data_root=job.work_dir,
        step_kwargs=step_kwargs,
    )
    plan = outputs["plan_timeline"]
    capture = outputs["capture_frames"]
    encode = outputs["encode_video"]

    return RenderResult(
        job_id=job.job_id,
        video_path=encode.video_path,
        total_frames=plan.total_frames,
        frame_ranges=plan.frame_ranges,
        duration_seconds=encode.duration_seconds,
        fps=plan.fps,
        width=encode.width or capture.width,
        height=encode.height or capture.height,
        has_audio=encode.has_audio,
    )
