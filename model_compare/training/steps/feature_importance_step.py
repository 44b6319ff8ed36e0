# model_compare/training/steps/feature_importance_step.py
from __future__ import annotations

from model_compare.pipeline.step import PipelineStep
from model_compare.training.context import ComparisonContext
from model_compare.training.engines.feature_importance_engine import (
    FeatureImportanceCollector,
)


class FeatureImportanceStep(PipelineStep):
    """
    Fan-in: importance of every model that survived scoring and metrics.
    """

    def __init__(self, collector: FeatureImportanceCollector | None = None, inst=None):
        super().__init__(inst)
        self.collector = collector if collector is not None else FeatureImportanceCollector()

    def run(self, ctx: ComparisonContext) -> ComparisonContext:
        handles = [
            ctx.registry.get(name) for name in ctx.scored if name not in ctx.failures
        ]
        with self.timed():
            ctx.importance = self.collector.collect(handles)
        return ctx
