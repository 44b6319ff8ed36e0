#!filepath: model_compare/observability/timeline_reporter.py
from collections import OrderedDict
from typing import Dict, Tuple

from model_compare import logs


def split_leaf(name: str) -> Tuple[str, str | None]:
    """'train:GBM' -> ('train', 'GBM'); 'partition' -> ('partition', None)"""
    stage, sep, model = str(name).partition(":")
    return stage, (model if sep else None)


class TimelineReporter:
    """
    Comparison timeline report.

    Stage-only leaves (partition, metrics) are listed as they are.
    Per-model leaves are folded into one line per model with its
    train / score split. Branches may overlap in time, so `Total` is
    summed CPU-side work, not wall time.
    """

    def __init__(self, timeline: Dict[str, float], label: str):
        self.timeline = timeline
        self.label = label

    def group(self) -> Tuple[Dict[str, float], Dict[str, Dict[str, float]]]:
        stages: Dict[str, float] = OrderedDict()
        models: Dict[str, Dict[str, float]] = OrderedDict()
        for name, sec in self.timeline.items():
            stage, model = split_leaf(name)
            if model is None:
                stages[stage] = stages.get(stage, 0.0) + sec
            else:
                per_stage = models.setdefault(model, OrderedDict())
                per_stage[stage] = per_stage.get(stage, 0.0) + sec
        return stages, models

    def print(self):
        stages, models = self.group()

        logs.info(f"[Timeline] ===== Comparison timeline for {self.label} =====")

        for stage, sec in stages.items():
            logs.info(f"[Timeline] {stage:<20} {sec:>8.3f}s")

        for model, per_stage in models.items():
            parts = " ".join(f"{s}={sec:.3f}s" for s, sec in per_stage.items())
            logs.info(
                f"[Timeline] {model:<20} {sum(per_stage.values()):>8.3f}s  ({parts})"
            )

        total = sum(self.timeline.values())
        logs.info(f"[Timeline] {'Total':<20} {total:>8.3f}s")
        logs.info("[Timeline] ===========================================")
