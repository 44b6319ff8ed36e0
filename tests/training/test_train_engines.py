from __future__ import annotations

import numpy as np
import pytest

from model_compare.training.engines.model_train_engine import Capability
from model_compare.training.engines.registry import (
    available_kinds,
    resolve_model_train_engine,
)
from model_compare.training.engines.model.naive_bayes_train_engine import NaiveBayesTrainEngine
from model_compare.training.engines.model.neural_net_train_engine import NeuralNetTrainEngine
from model_compare.utils.errors import UnsupportedImportance

NUMERIC = ["Age", "Fare"]
CATEGORICAL = ["Pclass", "Sex", "Embarked"]


@pytest.fixture
def xy(partitions):
    train, _ = partitions
    X = train.select(NUMERIC + CATEGORICAL)
    y = train.column("Survived")
    return X, y


def test_available_kinds():
    assert available_kinds() == [
        "logistic",
        "random_forest",
        "gbm",
        "naive_bayes",
        "neural_net",
    ]


def test_unknown_kind_raises():
    with pytest.raises(ValueError, match="Available"):
        resolve_model_train_engine(kind="svm")


@pytest.mark.parametrize("kind", ["logistic", "random_forest", "gbm", "naive_bayes", "neural_net"])
def test_every_kind_trains_and_predicts(kind, xy):
    X, y = xy
    params = {"hidden": [11, 15, 2]} if kind == "neural_net" else {}
    engine = resolve_model_train_engine(kind=kind, params=params, seed=0)

    model = engine.train(X=X, y=y, numeric=NUMERIC, categorical=CATEGORICAL)
    proba = model.predict_proba(X)

    assert proba.shape == (len(X), 2)
    assert np.allclose(proba.sum(axis=1), 1.0)
    assert list(model.classes_) == [0, 1]


def test_importance_capability_only_on_tree_ensembles():
    capable = {
        kind
        for kind in available_kinds()
        if resolve_model_train_engine(kind=kind).supports(Capability.IMPORTANCE)
    }
    assert capable == {"random_forest", "gbm"}


def test_non_tree_engine_raises_unsupported_importance(xy):
    X, y = xy
    engine = resolve_model_train_engine(kind="logistic")
    model = engine.train(X=X, y=y, numeric=NUMERIC, categorical=CATEGORICAL)

    with pytest.raises(UnsupportedImportance):
        engine.feature_importance(model, numeric=NUMERIC, categorical=CATEGORICAL)


def test_tree_importance_folds_onehot_onto_source_features(xy):
    X, y = xy
    engine = resolve_model_train_engine(kind="random_forest", seed=1)
    model = engine.train(X=X, y=y, numeric=NUMERIC, categorical=CATEGORICAL)

    imp = engine.feature_importance(model, numeric=NUMERIC, categorical=CATEGORICAL)

    assert list(imp.index) == NUMERIC + CATEGORICAL
    assert imp.sum() == pytest.approx(1.0)
    assert imp["Sex"] > 0


def test_params_override_defaults():
    engine = resolve_model_train_engine(kind="gbm", params={"n_estimators": 7})
    est = engine.build_estimator()
    assert est.n_estimators == 7
    assert est.max_depth == 5


def test_naive_bayes_laplace_is_additive_smoothing():
    est = NaiveBayesTrainEngine({"laplace": 2.5}).build_estimator()
    assert est.alpha == 2.5

    # zero smoothing is clipped to a tiny positive alpha
    est = NaiveBayesTrainEngine().build_estimator()
    assert 0.0 < est.alpha < 1e-6


def test_neural_net_hidden_layers():
    est = NeuralNetTrainEngine({"hidden": [11, 15, 2], "epochs": 50}).build_estimator()
    assert est.hidden_layer_sizes == (11, 15, 2)
    assert est.max_iter == 50
