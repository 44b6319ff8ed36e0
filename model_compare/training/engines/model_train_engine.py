from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict, FrozenSet, List

import numpy as np
import pandas as pd
from sklearn.compose import ColumnTransformer
from sklearn.impute import SimpleImputer
from sklearn.pipeline import Pipeline
from sklearn.preprocessing import OneHotEncoder, StandardScaler

from model_compare.utils.errors import UnsupportedImportance


class Capability(str, Enum):
    TRAINABLE = "trainable"
    SCORABLE = "scorable"
    IMPORTANCE = "importance"


class ModelTrainEngine(ABC):
    """
    Abstract ModelTrainEngine (FINAL)

    Subclasses declare:
    - kind          : registry key
    - capabilities  : capability set (checked, never inferred from type)
    - defaults      : native hyperparameters
    - scale_numeric : standardise numeric inputs
    """

    kind: str = ""
    capabilities: FrozenSet[Capability] = frozenset(
        {Capability.TRAINABLE, Capability.SCORABLE}
    )
    defaults: Dict[str, Any] = {}
    scale_numeric: bool = False

    def __init__(self, params: Dict[str, Any] | None = None, *, seed: int = 42):
        self.params = dict(params or {})
        self.seed = seed

    def supports(self, capability: Capability) -> bool:
        return capability in self.capabilities

    # --------------------------------------------------
    # Contract
    # --------------------------------------------------
    @abstractmethod
    def build_estimator(self) -> Any:
        """
        Returns an unfitted sklearn classifier
        """
        raise NotImplementedError

    def train(
        self,
        *,
        X: pd.DataFrame,
        y: pd.Series,
        numeric: List[str],
        categorical: List[str],
    ) -> Pipeline:
        """
        Batch fit on the whole training partition. Returns fitted pipeline.
        """
        pipeline = Pipeline(
            [
                ("prep", self.build_preprocessor(numeric, categorical)),
                ("model", self.build_estimator()),
            ]
        )
        pipeline.fit(X[numeric + categorical], y)
        return pipeline

    def feature_importance(
        self,
        model: Pipeline,
        *,
        numeric: List[str],
        categorical: List[str],
    ) -> pd.Series:
        """
        Raw native importance per SOURCE feature (one-hot columns summed).
        """
        raise UnsupportedImportance(
            f"kind {self.kind!r} exposes no native feature importance"
        )

    # --------------------------------------------------
    # Shared building blocks
    # --------------------------------------------------
    def resolved_params(self) -> Dict[str, Any]:
        return {**self.defaults, **self.params}

    def build_preprocessor(
        self, numeric: List[str], categorical: List[str]
    ) -> ColumnTransformer:
        transformers = []
        if numeric:
            transformers.append(("num", self.numeric_pipeline(), numeric))
        if categorical:
            transformers.append(("cat", self.categorical_pipeline(), categorical))
        return ColumnTransformer(transformers, remainder="drop")

    def numeric_pipeline(self) -> Pipeline:
        steps = [("impute", SimpleImputer(strategy="median", keep_empty_features=True))]
        if self.scale_numeric:
            steps.append(("scale", StandardScaler()))
        return Pipeline(steps)

    def categorical_pipeline(self) -> Pipeline:
        return Pipeline(
            [
                (
                    "impute",
                    SimpleImputer(
                        strategy="constant",
                        fill_value="missing",
                        keep_empty_features=True,
                    ),
                ),
                (
                    "onehot",
                    OneHotEncoder(handle_unknown="ignore", sparse_output=False),
                ),
            ]
        )

    @staticmethod
    def fold_onehot(
        model: Pipeline,
        raw: np.ndarray,
        *,
        numeric: List[str],
        categorical: List[str],
    ) -> pd.Series:
        """
        Map per-output-column values back onto the source features.

        Output layout of `prep`: one column per numeric feature, then
        len(categories_) columns per categorical feature.
        """
        widths = [1] * len(numeric)
        if categorical:
            encoder = (
                model.named_steps["prep"]
                .named_transformers_["cat"]
                .named_steps["onehot"]
            )
            widths += [len(c) for c in encoder.categories_]

        if sum(widths) != len(raw):
            raise ValueError(
                "[ModelTrainEngine] importance width mismatch: "
                f"expected {sum(widths)} got {len(raw)}"
            )

        bounds = np.cumsum([0] + widths)
        values = [
            float(np.sum(raw[bounds[i]:bounds[i + 1]]))
            for i in range(len(widths))
        ]
        return pd.Series(values, index=numeric + categorical, dtype=float)


class TreeEnsembleTrainEngine(ModelTrainEngine):
    """
    Shared importance extraction for tree ensembles (feature_importances_).
    """

    capabilities = frozenset(
        {Capability.TRAINABLE, Capability.SCORABLE, Capability.IMPORTANCE}
    )

    def feature_importance(
        self,
        model: Pipeline,
        *,
        numeric: List[str],
        categorical: List[str],
    ) -> pd.Series:
        raw = np.asarray(model.named_steps["model"].feature_importances_, dtype=float)
        return self.fold_onehot(model, raw, numeric=numeric, categorical=categorical)
