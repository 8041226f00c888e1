"""Base class for the render pipeline steps.

A step is a typed stage of a render job: it reads a Pydantic input built
from the request and the outputs of earlier steps, writes its artifacts
under the job directory (``data_root``), and returns a Pydantic output.
"""

from __future__ import annotations

import time
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Generic, TypeVar, ClassVar

from pydantic import BaseModel

InputT = TypeVar("InputT", bound=BaseModel)
OutputT = TypeVar("OutputT", bound=BaseModel)
ConfigT = TypeVar("ConfigT", bound=BaseModel)

logger = logging.getLogger(__name__)


class BaseStep(ABC, Generic[InputT, OutputT, ConfigT]):
    """Abstract base for pipeline steps.

    Subclasses set ``name``, ``input_type``, ``output_type`` and
    ``config_type`` and implement ``validate_inputs()`` and ``run()``.

    Example:
        class PlanTimelineStep(BaseStep[PlanTimelineInput, PlanTimelineOutput, PlanTimelineConfig]):
            name = "plan_timeline"
            input_type = PlanTimelineInput
            output_type = PlanTimelineOutput
            config_type = PlanTimelineConfig
    """

    name: ClassVar[str] = ""
    input_type: ClassVar[type[BaseModel]]
    output_type: ClassVar[type[BaseModel]]
    config_type: ClassVar[type[BaseModel]]

    def __init__(self, config: ConfigT, data_root: Path):
        self.config = config
        self.data_root = Path(data_root)
        self.elapsed_seconds: float | None = None

    @property
    def label(self) -> str:
        return self.name or self.__class__.__name__

    @abstractmethod
    def run(self, inputs: InputT) -> OutputT:
        """Do the step's work. Returns output model."""
        ...

    @abstractmethod
    def validate_inputs(self, inputs: InputT) -> bool:
        """Cheap consistency checks before any work starts."""
        ...

    def execute(self, inputs: InputT | dict[str, Any]) -> OutputT:
        """Coerce, validate and run, logging the outcome and timing.

        A plain dict is parsed with ``input_type`` first; unknown keys are
        ignored so one merged dict can feed every step of a job.
        """
        if not isinstance(inputs, self.input_type):
            inputs = self.input_type.model_validate(inputs)

        logger.info(f"[{self.label}] Validating inputs...")
        if not self.validate_inputs(inputs):
            raise ValueError(f"[{self.label}] Input validation failed")

        logger.info(f"[{self.label}] Starting...")
        t0 = time.monotonic()
        try:
            result = self.run(inputs)
        except Exception as exc:
            self.elapsed_seconds = time.monotonic() - t0
            logger.error(f"[{self.label}] Failed after {self.elapsed_seconds:.1f}s: {exc}")
            raise
        self.elapsed_seconds = time.monotonic() - t0
        logger.info(f"[{self.label}] Done in {self.elapsed_seconds:.1f}s")
        return result

    @classmethod
    def schemas(cls) -> dict[str, dict]:
        """JSON schemas of the step's input, output and config models."""
        return {
            "input": cls.input_type.model_json_schema(),
            "output": cls.output_type.model_json_schema(),
            "config": cls.config_type.model_json_schema(),
        }
