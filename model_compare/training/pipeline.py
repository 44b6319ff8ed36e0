# model_compare/training/pipeline.py
from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import pandas as pd

from model_compare import logs
from model_compare.pipeline.step import PipelineStep
from model_compare.session.engine_session import EngineSession
from model_compare.training.context import ComparisonContext
from model_compare.training.engines.feature_importance_engine import FeatureImportanceResult
from model_compare.training.engines.metrics_engine import ComparisonMetrics
from model_compare.training.result import ComparisonResult


class ComparisonPipeline:
    """
    ComparisonPipeline（FINAL）

    Semantics:
    - Pipeline owns ordering and the run context
    - Steps execute semantics
    - Pipeline assembles the ComparisonResult, then runs final steps (reports)
    - The session is opened / closed by the caller
    """

    def __init__(
            self,
            *,
            steps: List[PipelineStep],
            final_steps: List[PipelineStep],
            session: EngineSession,
            cfg,
    ):
        self.steps = steps
        self.final_steps = final_steps
        self.session = session
        self.cfg = cfg

    def run(
            self,
            run_id: str,
            source: Optional[str | Path | pd.DataFrame] = None,
    ) -> ComparisonContext:
        logs.info(f"[ComparisonPipeline] START run_id={run_id}")
        self.session.ensure_open()

        ctx = ComparisonContext(
            run_id=run_id,
            cfg=self.cfg,
            session=self.session,
            source=source,
        )

        for step in self.steps:
            ctx = step.run(ctx)

        ctx.result = self._assemble(ctx)

        absent = ctx.result.absent_models()
        for name, reason in absent.items():
            logs.warning(f"[ComparisonPipeline] ABSENT {name}: {reason}")

        logs.info(
            f"[ComparisonPipeline] evaluated={ctx.result.models()} "
            f"absent={list(absent)}"
        )

        for step in self.final_steps:
            ctx = step.run(ctx)

        logs.info("[ComparisonPipeline] DONE")
        return ctx

    @staticmethod
    def _assemble(ctx: ComparisonContext) -> ComparisonResult:
        requested = [m.name for m in ctx.cfg.comparison.models]
        return ComparisonResult(
            run_id=ctx.run_id,
            requested=requested,
            metrics=ctx.metrics if ctx.metrics is not None else ComparisonMetrics(),
            importance=(
                ctx.importance if ctx.importance is not None else FeatureImportanceResult()
            ),
            failures=dict(ctx.failures),
        )
