from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, FrozenSet, List, Tuple

import pandas as pd

from model_compare.training.engines.model_train_engine import (
    Capability,
    ModelTrainEngine,
)

GROUND_TRUTH = "ground_truth"
PREDICTED_CLASS = "predicted_class"


def probability_column(label: Any) -> str:
    return f"p_{label}"


@dataclass(frozen=True)
class ModelHandle:
    """
    ModelHandle（FINAL / FROZEN）

    Semantics:
    - one trained model, registered under `name`
    - immutable after training, owned by the ModelRegistry
    - carries the feature contract the Scorer checks against
    """
    name: str
    kind: str
    model: Any = field(repr=False)
    engine: ModelTrainEngine = field(repr=False, compare=False)
    feature_columns: Tuple[str, ...]
    feature_types: Dict[str, str]
    outcome: str
    classes: Tuple[Any, ...]
    capabilities: FrozenSet[Capability]

    @property
    def numeric_features(self) -> List[str]:
        return [c for c in self.feature_columns if self.feature_types[c] == "numeric"]

    @property
    def categorical_features(self) -> List[str]:
        return [c for c in self.feature_columns if self.feature_types[c] == "categorical"]

    def supports(self, capability: Capability) -> bool:
        return capability in self.capabilities


@dataclass(frozen=True)
class ModelFailure:
    """
    A requested model that is absent from the comparison, and why.
    """
    name: str
    kind: str
    stage: str
    error: str
    reason: str

    @classmethod
    def from_error(cls, *, name: str, kind: str, stage: str, err: BaseException) -> "ModelFailure":
        return cls(
            name=name,
            kind=kind,
            stage=stage,
            error=type(err).__name__,
            reason=str(err),
        )


@dataclass(frozen=True)
class ScoredFrame:
    """
    ScoredFrame（FINAL / FROZEN）

    Columns: ground_truth, predicted_class, p_<class> for every class.
    Row order and index are those of the scored partition.
    """
    model_name: str
    frame: pd.DataFrame = field(repr=False)
    classes: Tuple[Any, ...]
    kind: str = ""

    def __len__(self) -> int:
        return len(self.frame)

    @property
    def ground_truth(self) -> pd.Series:
        return self.frame[GROUND_TRUTH]

    @property
    def predicted_class(self) -> pd.Series:
        return self.frame[PREDICTED_CLASS]

    def probability(self, label: Any) -> pd.Series:
        return self.frame[probability_column(label)]

    def probabilities(self) -> pd.DataFrame:
        return self.frame[[probability_column(c) for c in self.classes]]

    def labeled(self) -> "ScoredFrame":
        """
        Rows with a known ground truth. Unlabeled rows are still scored,
        they are only left out of evaluation.
        """
        mask = self.ground_truth.notna()
        if mask.all():
            return self
        frame = self.frame.loc[mask].copy()
        # gaps force an object column; restore the label dtype
        frame[GROUND_TRUTH] = frame[GROUND_TRUTH].infer_objects()
        return replace(self, frame=frame)
