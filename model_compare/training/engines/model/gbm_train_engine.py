# model_compare/training/engines/model/gbm_train_engine.py
from __future__ import annotations

from sklearn.ensemble import GradientBoostingClassifier

from model_compare.training.engines.model_train_engine import TreeEnsembleTrainEngine


class GBMTrainEngine(TreeEnsembleTrainEngine):
    """
    Boosted decision trees (50 trees, depth 5, learning rate 0.1 by default).
    """

    kind = "gbm"
    defaults = {
        "n_estimators": 50,
        "max_depth": 5,
        "learning_rate": 0.1,
    }

    def build_estimator(self):
        return GradientBoostingClassifier(random_state=self.seed, **self.resolved_params())
