# model_compare/training/steps/partition_step.py
from __future__ import annotations

from model_compare.data.partition import PartitionProvider
from model_compare.pipeline.step import PipelineStep
from model_compare.training.context import ComparisonContext
from model_compare.utils.errors import UserInputError


class PartitionStep(PipelineStep):
    """
    PartitionStep

    Contract:
    - consumes ctx.source (falls back to cfg.data.source)
    - produces ctx.table / ctx.train / ctx.test
    """

    def run(self, ctx: ComparisonContext) -> ComparisonContext:
        data_cfg = ctx.cfg.data
        source = ctx.source if ctx.source is not None else data_cfg.source
        if source is None:
            raise UserInputError("no data source configured (data.source)")

        provider = PartitionProvider(
            categorical=data_cfg.categorical,
            identifiers=data_cfg.exclude,
        )

        with self.timed():
            with self.inst.timer("partition"):
                table = provider.load(source)
                train, test = provider.split(table, data_cfg.split_ratio, data_cfg.seed)

        ctx.table = table
        ctx.train = train
        ctx.test = test
        return ctx
