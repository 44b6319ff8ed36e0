# model_compare/training/engines/feature_importance_engine.py
from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Dict, Iterable, List

import pandas as pd

from model_compare import logs
from model_compare.training.engines.model_train_engine import Capability
from model_compare.training.engines.train_result import ModelHandle
from model_compare.utils.errors import UnsupportedImportance


@dataclass(frozen=True)
class FeatureImportanceRecord:
    model: str
    feature: str
    importance: float           # share of the model total, sums to 1
    scaled_importance: float    # relative to the model maximum, max == 1
    relative_importance: float  # native value


@dataclass
class FeatureImportanceResult:
    """
    Sparse by design: models without native importance only appear
    in `unsupported`, never as zero-filled rows.
    """
    records: List[FeatureImportanceRecord] = field(default_factory=list)
    unsupported: Dict[str, str] = field(default_factory=OrderedDict)

    def models(self) -> List[str]:
        seen: List[str] = []
        for r in self.records:
            if r.model not in seen:
                seen.append(r.model)
        return seen

    def for_model(self, model: str) -> List[FeatureImportanceRecord]:
        return [r for r in self.records if r.model == model]

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(
            [
                (r.model, r.feature, r.importance, r.scaled_importance, r.relative_importance)
                for r in self.records
            ],
            columns=[
                "model",
                "feature",
                "importance",
                "scaled_importance",
                "relative_importance",
            ],
        )


class FeatureImportanceCollector:
    """
    FeatureImportanceCollector（FINAL）

    - eligibility is a capability check (Capability.IMPORTANCE)
    - importances are per source feature (one-hot levels folded back)
    - records per model sorted by descending importance
    """

    def collect(self, handles: Iterable[ModelHandle]) -> FeatureImportanceResult:
        out = FeatureImportanceResult()

        for handle in handles:
            if not handle.supports(Capability.IMPORTANCE):
                out.unsupported[handle.name] = (
                    f"kind {handle.kind!r} exposes no native feature importance"
                )
                continue

            try:
                raw = handle.engine.feature_importance(
                    handle.model,
                    numeric=handle.numeric_features,
                    categorical=handle.categorical_features,
                )
            except UnsupportedImportance as e:
                out.unsupported[handle.name] = str(e)
                continue

            records = self.normalise(handle.name, raw)
            if not records:
                out.unsupported[handle.name] = "all native importances are zero"
                logs.warning(f"[FeatureImportance] {handle.name} has zero total importance")
                continue

            out.records.extend(records)
            top = records[0]
            logs.info(
                f"[FeatureImportance] {handle.name} top={top.feature} "
                f"share={top.importance:.4f}"
            )

        return out

    @staticmethod
    def normalise(model: str, raw: pd.Series) -> List[FeatureImportanceRecord]:
        raw = raw.astype(float).clip(lower=0.0)
        total = float(raw.sum())
        if total <= 0.0:
            return []

        peak = float(raw.max())
        ranked = raw.sort_values(ascending=False, kind="stable")
        return [
            FeatureImportanceRecord(
                model=model,
                feature=str(feature),
                importance=value / total,
                scaled_importance=value / peak,
                relative_importance=value,
            )
            for feature, value in ranked.items()
        ]
