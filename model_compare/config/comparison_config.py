# model_compare/config/comparison_config.py
from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

ModelKind = Literal[
    "logistic",
    "random_forest",
    "gbm",
    "naive_bayes",
    "neural_net",
]


class ModelSpecConfig(BaseModel):
    """
    One requested model: registry key + kind + hyperparameter overrides.
    """

    name: str
    kind: ModelKind
    params: Dict[str, Any] = Field(default_factory=dict)


def _default_models() -> List[ModelSpecConfig]:
    return [
        ModelSpecConfig(name="Logistic", kind="logistic"),
        ModelSpecConfig(name="RandomForest", kind="random_forest"),
        ModelSpecConfig(name="GBM", kind="gbm"),
        ModelSpecConfig(name="NaiveBayes", kind="naive_bayes", params={"laplace": 1.0}),
        ModelSpecConfig(name="DeepLearning", kind="neural_net", params={"hidden": [11, 15, 2]}),
    ]


class ComparisonConfig(BaseModel):
    """
    ComparisonConfig（FINAL）
    """

    models: List[ModelSpecConfig] = Field(default_factory=_default_models)

    # gains / lift
    n_bins: int = 16
    positive_class: Optional[Any] = None

    # fan-out
    max_workers: Optional[int] = 1

    # reports (None -> no files written)
    output_dir: Optional[str] = None

    @field_validator("models")
    @classmethod
    def _unique_names(cls, v: List[ModelSpecConfig]) -> List[ModelSpecConfig]:
        names = [m.name for m in v]
        dup = sorted({n for n in names if names.count(n) > 1})
        if dup:
            raise ValueError(f"duplicate model names: {dup}")
        return v

    @field_validator("n_bins")
    @classmethod
    def _positive_bins(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"n_bins must be >= 1, got {v}")
        return v
