# model_compare/session/engine_session.py
from __future__ import annotations

from typing import Optional

from model_compare import logs
from model_compare.observability.instrumentation import (
    Instrumentation,
    NoOpInstrumentation,
)


class EngineSession:
    """
    EngineSession（FINAL）

    Explicit handle on the training engine for one comparison run.
    Passed to every registry / scorer call instead of ambient global state.

    Lifecycle:
        open()  -> harness start
        close() -> harness end (timeline report)

    Calls on a session that is not open raise RuntimeError.
    """

    def __init__(
        self,
        *,
        seed: int = 42,
        max_workers: Optional[int] = 1,
        inst: Instrumentation | None = None,
        label: str = "comparison",
    ):
        self.seed = seed
        self.max_workers = max_workers
        self.inst: Instrumentation | NoOpInstrumentation = (
            inst if inst is not None else NoOpInstrumentation()
        )
        self.label = label
        self._open = False

    # --------------------------------------------------
    # lifecycle
    # --------------------------------------------------
    @property
    def is_open(self) -> bool:
        return self._open

    def open(self) -> "EngineSession":
        if self._open:
            raise RuntimeError(f"[EngineSession] {self.label} already open")
        self._open = True
        logs.info(
            f"[EngineSession] OPEN label={self.label} "
            f"seed={self.seed} max_workers={self.max_workers}"
        )
        return self

    def close(self) -> None:
        if not self._open:
            return
        self._open = False
        self.inst.generate_timeline_report(self.label)
        logs.info(f"[EngineSession] CLOSE label={self.label}")

    def ensure_open(self) -> None:
        if not self._open:
            raise RuntimeError(
                f"[EngineSession] session {self.label} is not open"
            )

    def __enter__(self) -> "EngineSession":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
