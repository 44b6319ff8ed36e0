# tests/conftest.py
from __future__ import annotations

import numpy as np
import pandas as pd
import pytest
from loguru import logger

from model_compare.data.partition import DatasetPartition, PartitionProvider
from model_compare.observability.instrumentation import Instrumentation
from model_compare.session.engine_session import EngineSession

IDENTIFIERS = ["PassengerId", "Name", "Ticket", "Cabin"]
CATEGORICAL = ["Pclass", "Sex", "Embarked"]
OUTCOME = "Survived"


@pytest.fixture(autouse=True)
def disable_file_logger():
    logger.remove()
    logger.add(lambda msg: None)
    yield


def make_passengers(n: int = 400, seed: int = 0) -> pd.DataFrame:
    """
    Titanic-shaped labeled table; survival driven by Sex / Pclass / Age.
    """
    rng = np.random.default_rng(seed)

    sex = rng.choice(["male", "female"], n)
    pclass = rng.choice([1, 2, 3], n, p=[0.25, 0.25, 0.5])
    age = rng.normal(30, 12, n).clip(1, 80)
    fare = rng.gamma(2.0, 15.0, n) * (4 - pclass)
    embarked = rng.choice(["S", "C", "Q"], n).astype(object)
    embarked[rng.random(n) < 0.05] = np.nan

    logit = -0.8 + 2.5 * (sex == "female") - 0.9 * (pclass - 2) - 0.02 * (age - 30)
    survived = (rng.random(n) < 1.0 / (1.0 + np.exp(-logit))).astype(int)

    age = age.copy()
    age[rng.random(n) < 0.1] = np.nan

    cabin = np.array([f"C{i}" for i in range(n)], dtype=object)
    cabin[rng.random(n) < 0.7] = np.nan

    return pd.DataFrame(
        {
            "PassengerId": np.arange(1, n + 1),
            "Survived": survived,
            "Pclass": pclass,
            "Name": [f"Passenger {i}" for i in range(n)],
            "Sex": sex,
            "Age": age,
            "Fare": fare,
            "Ticket": [f"T-{rng.integers(10_000, 99_999)}" for _ in range(n)],
            "Cabin": cabin,
            "Embarked": embarked,
        }
    )


@pytest.fixture
def passengers() -> pd.DataFrame:
    return make_passengers()


@pytest.fixture
def provider() -> PartitionProvider:
    return PartitionProvider(categorical=CATEGORICAL, identifiers=IDENTIFIERS)


@pytest.fixture
def table(provider, passengers) -> DatasetPartition:
    return provider.load(passengers)


@pytest.fixture
def partitions(provider, table):
    return provider.split(table, 0.75, 42)


@pytest.fixture
def session():
    s = EngineSession(seed=42, max_workers=1, inst=Instrumentation())
    s.open()
    yield s
    s.close()


@pytest.fixture
def passenger_factory():
    return make_passengers
