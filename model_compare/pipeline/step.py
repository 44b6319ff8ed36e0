from __future__ import annotations

from typing import Any

from model_compare.observability.instrumentation import (
    Instrumentation,
    NoOpInstrumentation,
)


class PipelineStep:
    """
    Pipeline Step base class

    Responsibilities:
      1. orchestration unit (one stage of the comparison)
      2. step-level wall-time boundary (parent scope)

    Rules:
      - the step itself is not recorded in the timeline
      - leaf timers live inside the step (per model)
      - behaviour never depends on whether `inst` is enabled
    """

    def __init__(self, inst: Instrumentation | None = None):
        self.inst: Instrumentation | NoOpInstrumentation = (
            inst if inst is not None else NoOpInstrumentation()
        )

    @property
    def step_name(self) -> str:
        return self.__class__.__name__

    def timed(self):
        """
        Step-level parent scope (record=False, not in the timeline).
        """
        return self.inst.timer(self.step_name, record=False)

    def run(self, ctx: Any) -> Any:
        raise NotImplementedError
