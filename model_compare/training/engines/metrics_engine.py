# model_compare/training/engines/metrics_engine.py
from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Sequence, Tuple

import numpy as np
import pandas as pd
from sklearn.metrics import accuracy_score, log_loss, roc_auc_score

from model_compare import logs
from model_compare.training.engines.train_result import ModelFailure, ScoredFrame
from model_compare.utils.errors import ComparisonError, MetricsFailure

BASELINE = "random"


@dataclass(frozen=True)
class MetricRecord:
    model: str
    metric: str
    value: float


@dataclass(frozen=True)
class LiftPoint:
    model: str
    cumulative_data_fraction: float
    cumulative_capture_rate: float

    @property
    def cumulative_lift(self) -> float:
        if self.cumulative_data_fraction == 0.0:
            return float("nan")
        return self.cumulative_capture_rate / self.cumulative_data_fraction


@dataclass
class ComparisonMetrics:
    """
    Append-ordered metric records + per-model gains curves (baseline included).
    A model listed in `failures` has no records and no curve.
    """
    records: List[MetricRecord] = field(default_factory=list)
    lift: Dict[str, List[LiftPoint]] = field(default_factory=OrderedDict)
    failures: Dict[str, ModelFailure] = field(default_factory=OrderedDict)

    def models(self) -> List[str]:
        seen: List[str] = []
        for r in self.records:
            if r.model not in seen:
                seen.append(r.model)
        return seen

    def value(self, model: str, metric: str) -> float:
        for r in self.records:
            if r.model == model and r.metric == metric:
                return r.value
        raise KeyError((model, metric))

    def metrics_frame(self) -> pd.DataFrame:
        return pd.DataFrame(
            [(r.model, r.metric, r.value) for r in self.records],
            columns=["model", "metric", "value"],
        )

    def wide_frame(self) -> pd.DataFrame:
        """One row per model, one column per metric."""
        df = self.metrics_frame()
        if df.empty:
            return df
        wide = df.pivot(index="model", columns="metric", values="value")
        return wide.reindex(self.models())

    def lift_frame(self) -> pd.DataFrame:
        rows = [
            (
                p.model,
                i,
                p.cumulative_data_fraction,
                p.cumulative_capture_rate,
                p.cumulative_lift,
            )
            for points in self.lift.values()
            for i, p in enumerate(points)
        ]
        return pd.DataFrame(
            rows,
            columns=[
                "model",
                "bucket",
                "cumulative_data_fraction",
                "cumulative_capture_rate",
                "cumulative_lift",
            ],
        )


def resolve_positive_class(classes: Sequence[Any], configured: Any = None) -> Any:
    """
    Configured label (matched as-is, then by its string form),
    else the last sorted class label.
    """
    if configured is None:
        return classes[-1]
    if configured in classes:
        return configured
    for label in classes:
        if str(label) == str(configured):
            return label
    raise ValueError(
        f"positive class {configured!r} not among model classes {list(classes)}"
    )


class MetricsAggregator:
    """
    MetricsAggregator（FINAL / FROZEN）

    Metric families, per scored model:
    - accuracy : predicted_class == ground_truth
    - auc      : ROC AUC of the positive class (one-vs-rest); rank based
    - logloss  : over all classes
    - gains    : cumulative capture by descending positive probability

    Gains bucketing:
    - rows sorted by descending positive probability, stable on the
      original row order (ties straddling a boundary split by row order)
    - bucket k ends at row ceil(k * n / n_bins); collapsed boundaries
      (n < n_bins) are emitted once
    - every curve starts at (0, 0); a `random` baseline runs (0, 0) -> (1, 1)

    Rows with a missing ground truth are scored but not evaluated. A
    model whose metrics cannot be computed is recorded in `failures`
    (stage `metrics`); the other models are unaffected.
    """

    def __init__(self, *, n_bins: int = 16, positive_class: Any = None):
        if n_bins < 1:
            raise ValueError(f"n_bins must be >= 1, got {n_bins}")
        self.n_bins = n_bins
        self.positive_class = positive_class

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def aggregate(self, scored: Mapping[str, ScoredFrame]) -> ComparisonMetrics:
        if BASELINE in scored:
            raise ValueError(f"model name {BASELINE!r} is reserved for the baseline curve")

        out = ComparisonMetrics()
        out.lift[BASELINE] = self.baseline_curve()

        for name, sf in scored.items():
            try:
                records, curve = self.evaluate(name, sf)
            except ComparisonError as e:
                failure = ModelFailure.from_error(
                    name=name, kind=sf.kind, stage="metrics", err=e
                )
                out.failures[name] = failure
                logs.warning(
                    f"[MetricsAggregator] {name} excluded: {failure.error}: {failure.reason}"
                )
                continue

            out.records.extend(records)
            out.lift[name] = curve

            logs.info(
                f"[MetricsAggregator] {name} "
                f"accuracy={out.value(name, 'accuracy'):.4f} "
                f"auc={out.value(name, 'auc'):.4f}"
            )

        return out

    def evaluate(
        self, name: str, sf: ScoredFrame
    ) -> Tuple[List[MetricRecord], List[LiftPoint]]:
        """
        All metric families of one model. Any error is raised as
        MetricsFailure; nothing is recorded for a partial result.
        """
        labeled = sf.labeled()
        dropped = len(sf) - len(labeled)
        if dropped:
            logs.info(
                f"[MetricsAggregator] {name} skip {dropped}/{len(sf)} rows "
                f"with missing ground truth"
            )
        if len(labeled) == 0:
            raise MetricsFailure("no labeled rows to evaluate", model_name=name)

        try:
            positive = resolve_positive_class(labeled.classes, self.positive_class)
            records = [
                MetricRecord(name, "accuracy", self.accuracy(labeled)),
                MetricRecord(name, "auc", self.auc(labeled, positive)),
                MetricRecord(name, "logloss", self.logloss(labeled)),
            ]
            curve = self.gains_curve(labeled, positive)
        except Exception as e:
            raise MetricsFailure(
                f"metrics failed: {type(e).__name__}: {e}", model_name=name
            ) from e

        return records, curve

    @staticmethod
    def accuracy(sf: ScoredFrame) -> float:
        return float(accuracy_score(sf.ground_truth.to_numpy(), sf.predicted_class.to_numpy()))

    @staticmethod
    def auc(sf: ScoredFrame, positive: Any) -> float:
        y_true = (sf.ground_truth == positive).to_numpy()
        if y_true.all() or not y_true.any():
            logs.warning(
                f"[MetricsAggregator] {sf.model_name} ground truth has one class, AUC undefined"
            )
            return float("nan")
        return float(roc_auc_score(y_true, sf.probability(positive).to_numpy()))

    @staticmethod
    def logloss(sf: ScoredFrame) -> float:
        try:
            return float(
                log_loss(
                    sf.ground_truth.to_numpy(),
                    sf.probabilities().to_numpy(),
                    labels=list(sf.classes),
                )
            )
        except ValueError as e:
            logs.warning(f"[MetricsAggregator] {sf.model_name} logloss skipped: {e}")
            return float("nan")

    def gains_curve(self, sf: ScoredFrame, positive: Any) -> List[LiftPoint]:
        hits = (sf.ground_truth == positive).to_numpy()
        prob = sf.probability(positive).to_numpy(dtype=float)

        order = np.argsort(-prob, kind="stable")
        captured = np.cumsum(hits[order])

        n = len(prob)
        total = int(captured[-1])

        points = [LiftPoint(sf.model_name, 0.0, 0.0)]
        for end in self._boundaries(n):
            rate = float(captured[end - 1]) / total if total else 0.0
            points.append(LiftPoint(sf.model_name, end / n, rate))
        return points

    def baseline_curve(self) -> List[LiftPoint]:
        return [
            LiftPoint(BASELINE, k / self.n_bins, k / self.n_bins)
            for k in range(self.n_bins + 1)
        ]

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------
    def _boundaries(self, n: int) -> List[int]:
        ends = []
        for k in range(1, self.n_bins + 1):
            end = -(-k * n // self.n_bins)
            if not ends or end != ends[-1]:
                ends.append(end)
        return ends
