"""Job envelope: identity, working directory and filesystem-probed status.

Layout of one job directory::

    <jobs_root>/<job_id>/
        job.json       declared inputs and the expected video path
        frames/        numbered stills while capturing/encoding
        encode.log     ffmpeg stderr
        output.mp4     final artifact (unless an explicit output path was given)
        error.txt      failure cause, when the job failed
        result.json    what a successful job reported
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field

from .contracts import RenderRequest

logger = logging.getLogger(__name__)

JOB_FILE = "job.json"
ERROR_FILE = "error.txt"
RESULT_FILE = "result.json"
FRAMES_DIR = "frames"
ENCODE_LOG = "encode.log"
DEFAULT_VIDEO_NAME = "output.mp4"


class JobStatus(str, Enum):
    PENDING = "pending"
    CAPTURING = "capturing"
    ENCODING = "encoding"
    COMPLETED = "completed"
    FAILED = "failed"
    NOT_FOUND = "not_found"


class Job(BaseModel):
    job_id: str
    work_dir: Path
    video_path: Path
    created_at: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    request: dict = Field(default_factory=dict)

    @property
    def frames_dir(self) -> Path:
        return self.work_dir / FRAMES_DIR


class JobStore:
    """Jobs live as directories under one root."""

    def __init__(self, root: Path):
        self.root = Path(root)

    def create(self, request: RenderRequest, video_name: str = DEFAULT_VIDEO_NAME) -> Job:
        self.root.mkdir(parents=True, exist_ok=True)
        job_id = uuid.uuid4().hex[:12]
        work_dir = self.root / job_id
        work_dir.mkdir()
        job = Job(
            job_id=job_id,
            work_dir=work_dir,
            video_path=request.output_path or work_dir / video_name,
            # Only a preview of the content is stored
            request=request.model_dump(mode="json", exclude={"content"})
            | {"content_preview": request.content[:200]},
        )
        (work_dir / JOB_FILE).write_text(job.model_dump_json(indent=2), encoding="utf-8")
        logger.info(f"Created job {job_id} in {work_dir}")
        return job

    def get(self, job_id: str) -> Job | None:
        job_file = self.root / job_id / JOB_FILE
        if not job_file.is_file():
            return None
        return Job.model_validate_json(job_file.read_text(encoding="utf-8"))

    def mark_completed(self, job: Job, result: BaseModel) -> None:
        (job.work_dir / RESULT_FILE).write_text(result.model_dump_json(indent=2), encoding="utf-8")

    def mark_failed(self, job: Job, error: BaseException) -> None:
        (job.work_dir / ERROR_FILE).write_text(f"{type(error).__name__}: {error}\n", encoding="utf-8")

    def error(self, job_id: str) -> str | None:
        error_file = self.root / job_id / ERROR_FILE
        if not error_file.is_file():
            return None
        return error_file.read_text(encoding="utf-8").strip()

    def status(self, job_id: str) -> JobStatus:
        work_dir = self.root / job_id
        if not work_dir.is_dir():
            return JobStatus.NOT_FOUND
        if (work_dir / ERROR_FILE).is_file():
            return JobStatus.FAILED
        if (work_dir / RESULT_FILE).is_file():
            return JobStatus.COMPLETED
        job = self.get(job_id)
        video_path = job.video_path if job else work_dir / DEFAULT_VIDEO_NAME
        frames_dir = work_dir / FRAMES_DIR
        if frames_dir.is_dir():
            if (work_dir / ENCODE_LOG).is_file():
                return JobStatus.ENCODING
            return JobStatus.CAPTURING
        if video_path.is_file():
            return JobStatus.COMPLETED
        return JobStatus.PENDING

    def describe_status(self, job_id: str) -> str:
        """One-line textual status, as reported to callers."""
        status = self.status(job_id)
        if status is JobStatus.NOT_FOUND:
            return f"Job {job_id}: not found"
        if status is JobStatus.FAILED:
            return f"Job {job_id}: failed ({self.error(job_id)})"
        if status is JobStatus.COMPLETED:
            job = self.get(job_id)
            return f"Job {job_id}: completed -> {job.video_path if job else '?'}"
        if status in (JobStatus.CAPTURING, JobStatus.ENCODING):
            frames = len(list((self.root / job_id / FRAMES_DIR).iterdir()))
            return f"Job {job_id}: {status.value} ({frames} frames on disk)"
        return f"Job {job_id}: {status.value}"

    def list_jobs(self) -> list[tuple[str, JobStatus]]:
        if not self.root.is_dir():
            return []
        return [
            (path.name, self.status(path.name))
            for path in sorted(self.root.iterdir())
            if (path / JOB_FILE).is_file()
        ]
