"""Pipeline orchestrator: reads pipeline.yaml and executes steps in order."""

from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel

from .contracts import PipelineConfig, StepEntry

logger = logging.getLogger(__name__)

DEFAULT_STEPS: list[dict[str, Any]] = [
    {
        "name": "plan_timeline",
        "module": "framecast.steps.s01_plan_timeline",
        "config_file": "configs/steps/s01_plan_timeline.yaml",
    },
    {
        "name": "capture_frames",
        "module": "framecast.steps.s02_capture_frames",
        "config_file": "configs/steps/s02_capture_frames.yaml",
        "depends_on": ["plan_timeline"],
    },
    {
        "name": "encode_video",
        "module": "framecast.steps.s03_encode_video",
        "config_file": "configs/steps/s03_encode_video.yaml",
        "depends_on": ["plan_timeline", "capture_frames"],
    },
]


def default_pipeline(data_root: Path | None = None) -> PipelineConfig:
    """Built-in plan -> capture -> encode pipeline.

    Step config files are optional here: a missing file means defaults.
    """
    cfg = PipelineConfig(steps=[StepEntry(**s) for s in DEFAULT_STEPS])
    if data_root is not None:
        cfg.data_root = Path(data_root)
    return cfg


def load_pipeline_config(config_path: Path) -> PipelineConfig:
    """Load and validate pipeline.yaml."""
    with open(config_path, encoding="utf-8") as f:
        raw = yaml.safe_load(f)
    return PipelineConfig(**raw)


def load_step_config(
    config_path: Path | None,
    config_class: type[BaseModel],
    overrides: dict[str, Any] | None = None,
) -> BaseModel:
    """Load a step-specific YAML config into its Pydantic model.

    ``overrides`` win over values from the file.
    """
    raw: dict[str, Any] = {}
    if config_path is not None and Path(config_path).exists():
        with open(config_path, encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
    elif config_path is not None:
        logger.debug(f"Step config {config_path} not found, using defaults")
    raw.update(overrides or {})
    return config_class(**raw)


def import_step_class(module_path: str):
    """Dynamically import a step class from its module path.

    Expects module_path like 'framecast.steps.s01_plan_timeline'
    and looks for a class ending in 'Step' in that module's step.py.
    """
    step_module = importlib.import_module(f"{module_path}.step")
    for attr_name in dir(step_module):
        attr = getattr(step_module, attr_name)
        if (
            isinstance(attr, type)
            and hasattr(attr, "run")
            and attr_name.endswith("Step")
            and attr_name != "BaseStep"
        ):
            return attr
    raise ImportError(f"No Step class found in {module_path}.step")


def build_step(entry: StepEntry, data_root: Path, **step_kwargs: Any):
    """Instantiate the step class named by a pipeline entry."""
    step_cls = import_step_class(entry.module)
    config_path = Path(entry.config_file) if entry.config_file else None
    step_config = load_step_config(config_path, step_cls.config_type, entry.overrides)
    return step_cls(config=step_config, data_root=data_root, **step_kwargs)


def run_pipeline(
    pipeline_cfg: PipelineConfig | Path,
    inputs: dict[str, Any] | None = None,
    data_root: Path | None = None,
    step_kwargs: dict[str, dict[str, Any]] | None = None,
) -> dict[str, BaseModel]:
    """Execute the enabled steps of a pipeline in order.

    Each step's input is the caller's ``inputs`` overlaid with the outputs of
    the steps it depends on. ``step_kwargs`` maps a step name to extra
    constructor arguments (e.g. a surface factory or an event callback).
    Returns every step's output keyed by step name.
    """
    if not isinstance(pipeline_cfg, PipelineConfig):
        pipeline_cfg = load_pipeline_config(Path(pipeline_cfg))
    root = Path(data_root) if data_root is not None else pipeline_cfg.data_root
    results: dict[str, BaseModel] = {}

    enabled_steps = [s for s in pipeline_cfg.steps if s.enabled]
    logger.info(f"Pipeline '{pipeline_cfg.project_name}' with {len(enabled_steps)} steps")

    for entry in enabled_steps:
        logger.info(f"--- Step: {entry.name} ---")

        step_instance = build_step(entry, root, **(step_kwargs or {}).get(entry.name, {}))

        # Build input from caller inputs, then previous step outputs
        input_data = dict(inputs or {})
        for dep in entry.depends_on:
            if dep not in results:
                raise ValueError(f"Step '{entry.name}' depends on '{dep}', which has not run")
            input_data.update(results[dep].model_dump())

        results[entry.name] = step_instance.execute(input_data)

    logger.info("Pipeline complete.")
    return results
