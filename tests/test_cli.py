"""Tests for the typer CLI."""

from pathlib import Path

from typer.testing import CliRunner

from framecast.cli import app
from framecast.core.contracts import RenderRequest
from framecast.core.job import JobStore

runner = CliRunner()


def test_plan():
    result = runner.invoke(app, ["plan", "-d", "2", "-d", "3", "--fps", "10"])
    assert result.exit_code == 0
    assert "Total frames: 50" in result.output


def test_plan_rejects_negative():
    result = runner.invoke(app, ["plan", "-d", "-1", "--fps", "10"])
    assert result.exit_code == 2


def test_info_lists_steps(tmp_path: Path):
    result = runner.invoke(app, ["info", "--config", str(tmp_path / "absent.yaml")])
    assert result.exit_code == 0
    for name in ("plan_timeline", "capture_frames", "encode_video"):
        assert name in result.output


def test_schema(tmp_path: Path):
    result = runner.invoke(app, ["schema", "plan_timeline", "--config", str(tmp_path / "absent.yaml")])
    assert result.exit_code == 0
    for key in ("\"input\"", "\"output\"", "\"config\"", "\"durations\""):
        assert key in result.output


def test_schema_unknown_step(tmp_path: Path):
    result = runner.invoke(app, ["schema", "nope", "--config", str(tmp_path / "absent.yaml")])
    assert result.exit_code == 1


def test_status_and_jobs(tmp_path: Path):
    jobs_root = tmp_path / "jobs"
    job = JobStore(jobs_root).create(RenderRequest(content="<p>", durations=[1]))

    result = runner.invoke(app, ["status", job.job_id, "--jobs-root", str(jobs_root)])
    assert result.exit_code == 0
    assert "pending" in result.output

    result = runner.invoke(app, ["status", "missing", "--jobs-root", str(jobs_root)])
    assert result.exit_code == 1
    assert "not found" in result.output

    result = runner.invoke(app, ["jobs", "--jobs-root", str(jobs_root)])
    assert result.exit_code == 0
    assert job.job_id in result.output


def test_render_invalid_request(tmp_path: Path):
    jobs_root = tmp_path / "jobs"
    result = runner.invoke(app, ["render", "<p>hi</p>", "-d", "0", "--jobs-root", str(jobs_root)])
    assert result.exit_code == 2
    assert "Invalid request" in result.output
    assert not jobs_root.exists()
