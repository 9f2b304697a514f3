from __future__ import annotations

from typing import Any

from dispbdt.observability.instrumentation import (
    Instrumentation,
    NoOpInstrumentation,
)


class PipelineStep:
    """
    Pipeline step base class.

    Responsibility:
      1. orchestration only (loops / dispatch / conditional execution)
      2. step-level wall-time boundary (parent scope)

    Rules:
      - a step never enters the timeline itself
      - leaf timers live inside the step
      - instrumentation is optional; behaviour never depends on it
    """

    stage: str = ''  # e.g. "dataset_build"

    def __init__(self, inst: Instrumentation | None = None):
        self.inst: Instrumentation | NoOpInstrumentation = (
            inst if inst is not None else NoOpInstrumentation()
        )

    # --------------------------------------------------
    # Step identity
    # --------------------------------------------------
    @property
    def step_name(self) -> str:
        return self.__class__.__name__

    # --------------------------------------------------
    # Step-level timer (parent scope, not recorded)
    # --------------------------------------------------
    def timed(self):
        return self.inst.timer(self.step_name, record=False)

    # --------------------------------------------------
    # Contract
    # --------------------------------------------------
    def run(self, ctx: Any) -> Any:
        raise NotImplementedError
