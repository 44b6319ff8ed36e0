# model_compare/training/steps/model_train_step.py
from __future__ import annotations

from model_compare.pipeline.step import PipelineStep
from model_compare.training.context import ComparisonContext
from model_compare.training.model_registry import ModelRegistry


class ModelTrainStep(PipelineStep):
    """
    ModelTrainStep

    Contract:
    - consumes ctx.train
    - produces ctx.registry (partial: failed kinds land in ctx.failures)
    """

    def run(self, ctx: ComparisonContext) -> ComparisonContext:
        data_cfg = ctx.cfg.data
        registry = ModelRegistry()

        with self.timed():
            registry.train(
                ctx.session,
                ctx.cfg.comparison.models,
                features=data_cfg.features,
                outcome=data_cfg.outcome,
                data=ctx.train,
                exclude=data_cfg.exclude,
            )

        ctx.registry = registry
        ctx.failures.update(registry.failures)
        return ctx
