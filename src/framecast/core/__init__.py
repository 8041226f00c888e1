"""framecast core: pipeline runner, base step, shared contracts, jobs."""

from .step_base import BaseStep
from .contracts import FrameRange, PipelineConfig, RenderRequest, RenderResult, StepEntry
from .errors import CaptureError, EncodeError, FramecastError, RequestValidationError, SurfaceError
from .job import Job, JobStatus, JobStore
from .pipeline_runner import default_pipeline, load_pipeline_config, run_pipeline
from .logging import setup_logging
from .workspace import WorkspaceRegistry

__all__ = [
    "BaseStep",
    "FrameRange",
    "PipelineConfig",
    "RenderRequest",
    "RenderResult",
    "StepEntry",
    "FramecastError",
    "RequestValidationError",
    "SurfaceError",
    "CaptureError",
    "EncodeError",
    "Job",
    "JobStatus",
    "JobStore",
    "default_pipeline",
    "load_pipeline_config",
    "run_pipeline",
    "setup_logging",
    "WorkspaceRegistry",
]
