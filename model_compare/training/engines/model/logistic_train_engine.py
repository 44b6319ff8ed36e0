# model_compare/training/engines/model/logistic_train_engine.py
from __future__ import annotations

from sklearn.linear_model import LogisticRegressionCV

from model_compare.training.engines.model_train_engine import ModelTrainEngine


class LogisticTrainEngine(ModelTrainEngine):
    """
    Regularised logistic regression.

    Regularisation strength is searched automatically over `Cs`
    with internal cross-validation.
    """

    kind = "logistic"
    scale_numeric = True
    defaults = {
        "Cs": 10,
        "cv": 5,
        "max_iter": 1000,
    }

    def build_estimator(self):
        return LogisticRegressionCV(random_state=self.seed, **self.resolved_params())
