# model_compare/training/result.py
from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Dict, List

import pandas as pd

from model_compare.training.engines.feature_importance_engine import FeatureImportanceResult
from model_compare.training.engines.metrics_engine import ComparisonMetrics
from model_compare.training.engines.train_result import ModelFailure


@dataclass
class ComparisonResult:
    """
    ComparisonResult（FINAL）

    Semantics:
    - `requested` lists every model asked for, in config order
    - every requested model is either in `metrics` or in `failures`
    """
    run_id: str
    requested: List[str]
    metrics: ComparisonMetrics
    importance: FeatureImportanceResult
    failures: Dict[str, ModelFailure] = field(default_factory=OrderedDict)

    def models(self) -> List[str]:
        return [m for m in self.requested if m in self.metrics.models()]

    def absent_models(self) -> Dict[str, str]:
        out: Dict[str, str] = OrderedDict()
        present = set(self.metrics.models())
        for name in self.requested:
            if name in present:
                continue
            failure = self.failures.get(name)
            out[name] = (
                f"{failure.stage}: {failure.error}: {failure.reason}"
                if failure is not None
                else "not evaluated"
            )
        return out

    def summary_frame(self) -> pd.DataFrame:
        """
        One row per requested model: status + headline metrics or failure.
        """
        present = set(self.metrics.models())
        rows = []
        for name in self.requested:
            if name in present:
                rows.append(
                    {
                        "model": name,
                        "status": "ok",
                        "stage": None,
                        "error": None,
                        "reason": None,
                        "accuracy": self.metrics.value(name, "accuracy"),
                        "auc": self.metrics.value(name, "auc"),
                        "logloss": self.metrics.value(name, "logloss"),
                    }
                )
                continue

            failure = self.failures.get(name)
            rows.append(
                {
                    "model": name,
                    "status": "failed",
                    "stage": failure.stage if failure else None,
                    "error": failure.error if failure else None,
                    "reason": failure.reason if failure else "not evaluated",
                    "accuracy": float("nan"),
                    "auc": float("nan"),
                    "logloss": float("nan"),
                }
            )
        return pd.DataFrame(
            rows,
            columns=["model", "status", "stage", "error", "reason", "accuracy", "auc", "logloss"],
        )
