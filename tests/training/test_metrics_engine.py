from __future__ import annotations

import math

import numpy as np
import pandas as pd
import pytest

from model_compare.training.engines.metrics_engine import (
    BASELINE,
    LiftPoint,
    MetricsAggregator,
    resolve_positive_class,
)
from model_compare.training.engines.train_result import ScoredFrame


def make_scored(name, truth, p1, classes=(0, 1)):
    truth = np.asarray(truth)
    p1 = np.asarray(p1, dtype=float)
    neg, pos = classes
    frame = pd.DataFrame(
        {
            "ground_truth": truth,
            "predicted_class": np.where(p1 >= 0.5, pos, neg),
            f"p_{neg}": 1.0 - p1,
            f"p_{pos}": p1,
        }
    )
    return ScoredFrame(model_name=name, frame=frame, classes=classes)


@pytest.fixture
def noisy():
    rng = np.random.default_rng(7)
    truth = rng.integers(0, 2, 200)
    p1 = np.clip(0.3 * truth + rng.random(200) * 0.7, 0.0, 1.0)
    return make_scored("m", truth, p1)


# ============================================================
# 1. accuracy / auc / logloss
# ============================================================
def test_accuracy_matches_direct_recomputation(noisy):
    out = MetricsAggregator().aggregate({"m": noisy})

    direct = float((noisy.predicted_class == noisy.ground_truth).mean())
    assert out.value("m", "accuracy") == pytest.approx(direct)


def test_metric_records_are_append_ordered(noisy):
    other = make_scored("n", noisy.ground_truth, noisy.probability(1))
    out = MetricsAggregator().aggregate({"m": noisy, "n": other})

    assert [(r.model, r.metric) for r in out.records] == [
        ("m", "accuracy"), ("m", "auc"), ("m", "logloss"),
        ("n", "accuracy"), ("n", "auc"), ("n", "logloss"),
    ]
    assert list(out.wide_frame().index) == ["m", "n"]


def test_auc_invariant_under_monotonic_rescaling(noisy):
    p = noisy.probability(1).to_numpy()
    rescaled = make_scored("r", noisy.ground_truth, p ** 3)

    out = MetricsAggregator().aggregate({"m": noisy, "r": rescaled})
    assert out.value("m", "auc") == pytest.approx(out.value("r", "auc"))


def test_auc_of_constant_probability_is_exactly_half():
    sf = make_scored("flat", [0, 1, 1, 0, 1, 0, 0, 1], [0.42] * 8)
    out = MetricsAggregator().aggregate({"flat": sf})
    assert out.value("flat", "auc") == 0.5


def test_auc_perfect_ranking():
    sf = make_scored("perfect", [0, 0, 1, 1], [0.1, 0.2, 0.8, 0.9])
    out = MetricsAggregator().aggregate({"perfect": sf})
    assert out.value("perfect", "auc") == 1.0
    assert out.value("perfect", "accuracy") == 1.0


def test_auc_single_class_is_nan():
    sf = make_scored("one", [1, 1, 1], [0.2, 0.6, 0.9])
    out = MetricsAggregator().aggregate({"one": sf})
    assert math.isnan(out.value("one", "auc"))


def test_logloss_is_finite(noisy):
    out = MetricsAggregator().aggregate({"m": noisy})
    assert np.isfinite(out.value("m", "logloss"))


# ============================================================
# 2. gains / lift
# ============================================================
def test_baseline_runs_from_origin_to_one():
    out = MetricsAggregator(n_bins=16).aggregate({})
    base = out.lift[BASELINE]

    assert len(base) == 17
    assert (base[0].cumulative_data_fraction, base[0].cumulative_capture_rate) == (0.0, 0.0)
    assert (base[-1].cumulative_data_fraction, base[-1].cumulative_capture_rate) == (1.0, 1.0)
    assert all(p.cumulative_data_fraction == p.cumulative_capture_rate for p in base)


def test_gains_curves_are_monotonic(noisy):
    out = MetricsAggregator(n_bins=16).aggregate({"m": noisy})

    for points in out.lift.values():
        xs = [p.cumulative_data_fraction for p in points]
        ys = [p.cumulative_capture_rate for p in points]
        assert (xs[0], ys[0]) == (0.0, 0.0)
        assert all(a <= b for a, b in zip(xs, xs[1:]))
        assert all(a <= b for a, b in zip(ys, ys[1:]))

    curve = out.lift["m"]
    assert len(curve) == 17
    assert curve[-1].cumulative_data_fraction == 1.0
    assert curve[-1].cumulative_capture_rate == 1.0


def test_gains_perfect_model_captures_positives_first():
    truth = [0, 1, 0, 1, 0, 0, 1, 0]
    p1 = [0.1, 0.9, 0.2, 0.8, 0.3, 0.15, 0.7, 0.05]
    out = MetricsAggregator(n_bins=4).aggregate({"m": make_scored("m", truth, p1)})

    rates = [p.cumulative_capture_rate for p in out.lift["m"]]
    assert rates == pytest.approx([0.0, 2 / 3, 1.0, 1.0, 1.0])


def test_gains_ties_split_by_original_row_order():
    # both rows tie; the earlier (negative) row is examined first
    out = MetricsAggregator(n_bins=2).aggregate({"m": make_scored("m", [0, 1], [0.5, 0.5])})
    points = [(p.cumulative_data_fraction, p.cumulative_capture_rate) for p in out.lift["m"]]
    assert points == [(0.0, 0.0), (0.5, 0.0), (1.0, 1.0)]


def test_gains_small_partition_collapses_buckets():
    truth = [1, 0, 1, 0, 0, 1, 0, 0, 1, 0]
    p1 = np.linspace(0.9, 0.1, 10)
    out = MetricsAggregator(n_bins=16).aggregate({"m": make_scored("m", truth, p1)})

    xs = [p.cumulative_data_fraction for p in out.lift["m"]]
    assert len(xs) == 11
    assert len(set(xs)) == len(xs)


def test_cumulative_lift():
    assert LiftPoint("m", 0.25, 0.5).cumulative_lift == 2.0
    assert math.isnan(LiftPoint("m", 0.0, 0.0).cumulative_lift)


def test_lift_frame_is_flat(noisy):
    out = MetricsAggregator(n_bins=4).aggregate({"m": noisy})
    df = out.lift_frame()
    assert list(df.columns) == [
        "model",
        "bucket",
        "cumulative_data_fraction",
        "cumulative_capture_rate",
        "cumulative_lift",
    ]
    assert set(df["model"]) == {BASELINE, "m"}
    assert len(df) == 10


def test_baseline_name_is_reserved(noisy):
    with pytest.raises(ValueError, match="reserved"):
        MetricsAggregator().aggregate({BASELINE: noisy})


# ============================================================
# 3. positive class
# ============================================================
def test_positive_class_defaults_to_last_label():
    assert resolve_positive_class((0, 1)) == 1
    assert resolve_positive_class(("no", "yes")) == "yes"


def test_positive_class_matches_string_form():
    assert resolve_positive_class(("0", "1"), 1) == "1"


def test_unknown_positive_class():
    with pytest.raises(ValueError):
        resolve_positive_class((0, 1), 2)


def test_string_labels_use_configured_positive():
    sf = make_scored("s", ["died", "lived", "died", "lived"], [0.2, 0.1, 0.3, 0.9], classes=("died", "lived"))
    out = MetricsAggregator(positive_class="died").aggregate({"s": sf})

    assert out.value("s", "accuracy") == 0.75
    assert out.value("s", "auc") == 0.5


# ============================================================
# 4. unlabeled rows / per-model failure isolation
# ============================================================
def test_rows_without_ground_truth_are_not_evaluated():
    truth = np.array([0, 1, None, 1, 0, None, 1, 0], dtype=object)
    p1 = [0.2, 0.8, 0.9, 0.4, 0.1, 0.3, 0.7, 0.6]
    sf = make_scored("m", truth, p1)

    out = MetricsAggregator(n_bins=4).aggregate({"m": sf})

    # labeled rows: truth 0 1 1 0 1 0, predicted 0 1 0 0 1 1
    assert out.value("m", "accuracy") == pytest.approx(4 / 6)
    assert not math.isnan(out.value("m", "auc"))
    assert not math.isnan(out.value("m", "logloss"))
    assert out.lift["m"][-1].cumulative_capture_rate == 1.0
    assert len(sf) == 8


def test_text_labels_with_gaps():
    truth = np.array(["no", "yes", np.nan, "yes", "no", np.nan], dtype=object)
    sf = make_scored("s", truth, [0.1, 0.9, 0.5, 0.8, 0.3, 0.2], classes=("no", "yes"))

    out = MetricsAggregator().aggregate({"s": sf})

    assert out.value("s", "accuracy") == 1.0
    assert out.value("s", "auc") == 1.0
    assert out.failures == {}


def test_model_without_labeled_rows_fails_alone(noisy):
    empty = make_scored("blank", np.array([None, None, None], dtype=object), [0.1, 0.5, 0.9])

    out = MetricsAggregator().aggregate({"blank": empty, "m": noisy})

    assert out.models() == ["m"]
    assert "blank" not in out.lift
    failure = out.failures["blank"]
    assert failure.stage == "metrics"
    assert failure.error == "MetricsFailure"
    assert "no labeled rows" in failure.reason


def test_unexpected_metric_error_is_recorded_not_raised(noisy, monkeypatch):
    original = MetricsAggregator.logloss

    def _logloss(sf):
        if sf.model_name == "bad":
            raise ZeroDivisionError("float division by zero")
        return original(sf)

    monkeypatch.setattr(MetricsAggregator, "logloss", staticmethod(_logloss))
    bad = make_scored("bad", noisy.ground_truth, noisy.probability(1))

    out = MetricsAggregator().aggregate({"bad": bad, "m": noisy})

    assert out.models() == ["m"]
    assert out.metrics_frame()["model"].unique().tolist() == ["m"]
    assert out.failures["bad"].error == "MetricsFailure"
    assert "ZeroDivisionError" in out.failures["bad"].reason


def test_unknown_positive_class_fails_each_model(noisy):
    out = MetricsAggregator(positive_class=2).aggregate({"m": noisy})

    assert out.models() == []
    assert list(out.lift) == [BASELINE]
    assert "not among model classes" in out.failures["m"].reason
