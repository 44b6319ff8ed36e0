# model_compare/training/steps/model_report_step.py
from __future__ import annotations

from pathlib import Path

from model_compare import logs
from model_compare.pipeline.step import PipelineStep
from model_compare.training.context import ComparisonContext
from model_compare.training.engines.model_report_engine import ModelReportEngine


class ModelReportStep(PipelineStep):
    """
    Writes the flat result tables under <output_dir>/<run_id>/.
    """

    def __init__(self, output_dir: str | Path, engine: ModelReportEngine | None = None, inst=None):
        super().__init__(inst)
        self.output_dir = Path(output_dir)
        self.engine = engine if engine is not None else ModelReportEngine()

    def run(self, ctx: ComparisonContext) -> ComparisonContext:
        if ctx.result is None:
            logs.warning("[ModelReportStep] no result to report -> skip")
            return ctx

        with self.timed():
            ctx.report_paths = self.engine.write(ctx.result, self.output_dir / ctx.run_id)
        return ctx
