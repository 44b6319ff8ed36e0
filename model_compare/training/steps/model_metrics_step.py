# model_compare/training/steps/model_metrics_step.py
from __future__ import annotations

from model_compare.pipeline.step import PipelineStep
from model_compare.training.context import ComparisonContext
from model_compare.training.engines.metrics_engine import MetricsAggregator


class ModelMetricsStep(PipelineStep):
    """
    Fan-in: ctx.scored -> ctx.metrics (+ per-model metric failures)
    """

    def __init__(self, aggregator: MetricsAggregator, inst=None):
        super().__init__(inst)
        self.aggregator = aggregator

    def run(self, ctx: ComparisonContext) -> ComparisonContext:
        with self.timed():
            with self.inst.timer("metrics"):
                ctx.metrics = self.aggregator.aggregate(ctx.scored)

        ctx.failures.update(ctx.metrics.failures)
        return ctx
