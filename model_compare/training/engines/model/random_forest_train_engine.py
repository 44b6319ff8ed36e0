# model_compare/training/engines/model/random_forest_train_engine.py
from __future__ import annotations

from sklearn.ensemble import RandomForestClassifier

from model_compare.training.engines.model_train_engine import TreeEnsembleTrainEngine


class RandomForestTrainEngine(TreeEnsembleTrainEngine):
    kind = "random_forest"
    defaults = {
        "n_estimators": 50,
    }

    def build_estimator(self):
        return RandomForestClassifier(random_state=self.seed, **self.resolved_params())
