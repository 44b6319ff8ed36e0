# model_compare/training/steps/model_score_step.py
from __future__ import annotations

from model_compare.pipeline.step import PipelineStep
from model_compare.training.context import ComparisonContext
from model_compare.training.engines.score_engine import Scorer


class ModelScoreStep(PipelineStep):
    """
    ModelScoreStep

    Contract:
    - consumes ctx.registry / ctx.test
    - produces ctx.scored (one ScoredFrame per surviving model)
    """

    def __init__(self, scorer: Scorer | None = None, inst=None):
        super().__init__(inst)
        self.scorer = scorer if scorer is not None else Scorer()

    def run(self, ctx: ComparisonContext) -> ComparisonContext:
        with self.timed():
            out = self.scorer.score_all(ctx.session, ctx.registry, ctx.test)

        ctx.scored.update(out.scored)
        ctx.failures.update(out.failures)
        return ctx
