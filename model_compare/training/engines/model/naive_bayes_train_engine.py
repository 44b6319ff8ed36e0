# model_compare/training/engines/model/naive_bayes_train_engine.py
from __future__ import annotations

from typing import Any, Dict

from sklearn.impute import SimpleImputer
from sklearn.naive_bayes import MultinomialNB
from sklearn.pipeline import Pipeline
from sklearn.preprocessing import KBinsDiscretizer

from model_compare.training.engines.model_train_engine import ModelTrainEngine

# MultinomialNB needs a strictly positive alpha
_MIN_ALPHA = 1e-10


class NaiveBayesTrainEngine(ModelTrainEngine):
    """
    Naive Bayes over discrete inputs.

    - categorical features: one-hot levels
    - numeric features: quantile bins (`bins`), one-hot
    - `laplace`: additive smoothing
    """

    kind = "naive_bayes"
    defaults = {
        "laplace": 0.0,
        "bins": 5,
    }

    def build_estimator(self):
        params = self.estimator_params()
        return MultinomialNB(**params)

    def estimator_params(self) -> Dict[str, Any]:
        params = self.resolved_params()
        params.pop("bins")
        laplace = float(params.pop("laplace"))
        params["alpha"] = max(laplace, _MIN_ALPHA)
        return params

    def numeric_pipeline(self) -> Pipeline:
        return Pipeline(
            [
                ("impute", SimpleImputer(strategy="median", keep_empty_features=True)),
                (
                    "bin",
                    KBinsDiscretizer(
                        n_bins=int(self.resolved_params()["bins"]),
                        encode="onehot-dense",
                        strategy="quantile",
                    ),
                ),
            ]
        )
