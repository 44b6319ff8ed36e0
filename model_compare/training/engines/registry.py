from typing import Any, Callable, Dict

from model_compare.training.engines.model_train_engine import ModelTrainEngine
from model_compare.training.engines.model.logistic_train_engine import LogisticTrainEngine
from model_compare.training.engines.model.random_forest_train_engine import (
    RandomForestTrainEngine,
)
from model_compare.training.engines.model.gbm_train_engine import GBMTrainEngine
from model_compare.training.engines.model.naive_bayes_train_engine import (
    NaiveBayesTrainEngine,
)
from model_compare.training.engines.model.neural_net_train_engine import (
    NeuralNetTrainEngine,
)

_ENGINE_REGISTRY: Dict[
    str,
    Callable[[Dict[str, Any], int], ModelTrainEngine],
] = {
    "logistic": lambda params, seed: LogisticTrainEngine(params, seed=seed),
    "random_forest": lambda params, seed: RandomForestTrainEngine(params, seed=seed),
    "gbm": lambda params, seed: GBMTrainEngine(params, seed=seed),
    "naive_bayes": lambda params, seed: NaiveBayesTrainEngine(params, seed=seed),
    "neural_net": lambda params, seed: NeuralNetTrainEngine(params, seed=seed),
}


def available_kinds() -> list[str]:
    return list(_ENGINE_REGISTRY)


def resolve_model_train_engine(
        *, kind: str, params: Dict[str, Any] | None = None, seed: int = 42
) -> ModelTrainEngine:
    if kind not in _ENGINE_REGISTRY:
        available = ", ".join(_ENGINE_REGISTRY)
        raise ValueError(
            f"No ModelTrainEngine for {kind!r}. Available: {available}"
        )

    return _ENGINE_REGISTRY[kind](dict(params or {}), seed)
