#!filepath: tests/observability/test_instrumentation.py

import time
from concurrent.futures import ThreadPoolExecutor

from loguru import logger

from model_compare.observability.instrumentation import Instrumentation, NoOpInstrumentation


def test_instrumentation_leaf_timer():
    inst = Instrumentation(enabled=True)

    with inst.timer("train:RF"):
        time.sleep(0.01)

    assert inst.timeline["train:RF"] > 0


def test_parent_scope_not_recorded():
    inst = Instrumentation(enabled=True)

    with inst.timer("ModelTrainStep", record=False):
        with inst.timer("train:GBM"):
            pass

    assert list(inst.timeline) == ["train:GBM"]


def test_repeated_leaf_accumulates():
    inst = Instrumentation(enabled=True)

    for _ in range(2):
        with inst.timer("metrics"):
            time.sleep(0.005)

    assert list(inst.timeline) == ["metrics"]
    assert inst.timeline["metrics"] >= 0.01


def test_concurrent_branches_each_recorded():
    inst = Instrumentation(enabled=True)
    names = [f"train:M{i}" for i in range(8)]

    def _work(name):
        with inst.timer(name):
            time.sleep(0.002)

    with ThreadPoolExecutor(max_workers=4) as pool:
        list(pool.map(_work, names))

    assert sorted(inst.timeline) == sorted(names)


def test_timer_reraises_and_still_records():
    inst = Instrumentation(enabled=True)

    try:
        with inst.timer("train:NN"):
            raise MemoryError("boom")
    except MemoryError:
        pass

    assert "train:NN" in inst.timeline


def test_disabled_instrumentation_records_nothing():
    inst = Instrumentation(enabled=False)
    with inst.timer("x"):
        pass
    assert inst.timeline == {}


def test_noop_instrumentation():
    inst = NoOpInstrumentation()
    with inst.timer("x"):
        pass
    inst.generate_timeline_report("noop")
    assert inst.timeline == {}


def test_generate_timeline_report():
    inst = Instrumentation(enabled=True)

    with inst.timer("score:GBM"):
        time.sleep(0.005)

    captured = []
    sink_id = logger.add(lambda msg: captured.append(str(msg)))
    inst.generate_timeline_report("run-1")
    logger.remove(sink_id)

    output = "\n".join(captured)

    assert "GBM" in output
    assert "score=" in output
    assert "Comparison timeline for run-1" in output
