"""Base class for the extract and combine steps.

A step declares typed Input, Output and Config Pydantic models, so the
orchestrator and the CLI can build its inputs and read its results
without knowing the step's internals.
"""

from __future__ import annotations

import time
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Generic, TypeVar, ClassVar

from pydantic import BaseModel

from .contracts import StepMeta
from .errors import OpenFailed

InputT = TypeVar("InputT", bound=BaseModel)
OutputT = TypeVar("OutputT", bound=BaseModel)
ConfigT = TypeVar("ConfigT", bound=BaseModel)

logger = logging.getLogger(__name__)


class BaseStep(ABC, Generic[InputT, OutputT, ConfigT]):
    """Abstract base for pipeline steps.

    Subclasses set ``name``, ``input_type``, ``output_type`` and
    ``config_type``, and implement ``validate_inputs()`` and ``run()``.
    ``execute()`` is the entry point callers use.
    """

    name: ClassVar[str] = ""
    input_type: ClassVar[type[BaseModel]]
    output_type: ClassVar[type[BaseModel]]
    config_type: ClassVar[type[BaseModel]]

    def __init__(self, config: ConfigT, data_root: Path):
        self.config = config
        self.data_root = Path(data_root)

    @abstractmethod
    def run(self, inputs: InputT) -> OutputT:
        """Do the work. Setup failures propagate as exceptions."""
        ...

    @abstractmethod
    def validate_inputs(self, inputs: InputT) -> bool:
        """Cheap existence checks before any codec session is opened."""
        ...

    def execute(self, inputs: InputT) -> OutputT:
        """Validate, run and time the step; stamps ``meta`` on the output."""
        step_name = self.name or self.__class__.__name__
        if not self.validate_inputs(inputs):
            raise OpenFailed(f"[{step_name}] Input validation failed")

        logger.info(f"[{step_name}] Starting...")
        t0 = time.perf_counter()
        result = self.run(inputs)
        elapsed = time.perf_counter() - t0
        logger.info(f"[{step_name}] Done in {elapsed:.2f}s")

        if "meta" in type(result).model_fields:
            result.meta = StepMeta(
                step_name=step_name,
                elapsed_seconds=elapsed,
                params=self.config.model_dump(mode="json"),
            )
        return result
