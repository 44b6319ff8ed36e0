#!filepath: model_compare/observability/instrumentation.py
from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field
from contextlib import contextmanager
from collections import OrderedDict
from typing import Dict

from model_compare.observability.timeline_reporter import TimelineReporter


@dataclass
class Instrumentation:
    """
    Leaf-only timing for one comparison session.

    Rules:
    1. Timeline only records leaf scopes (record=True)
    2. Parent scopes (record=False) only bound wall-time
    3. Leaf names are `<stage>` or `<stage>:<model>`; train / score
       branches run on worker threads, each under its own name
    4. No logging on the hot path
    """

    enabled: bool = True
    timeline: Dict[str, float] = field(default_factory=OrderedDict)

    def __post_init__(self):
        self._lock = threading.Lock()

    def timer(self, name: str, *, record: bool = True):
        """
        Context-manager timer.

        A name recorded twice accumulates (e.g. a stage re-run on the
        same session).
        """
        inst = self

        @contextmanager
        def _ctx():
            if not inst.enabled or not record:
                yield
                return

            start = time.perf_counter()
            try:
                yield
            finally:
                elapsed = time.perf_counter() - start
                with inst._lock:
                    inst.timeline[name] = inst.timeline.get(name, 0.0) + elapsed

        return _ctx()

    def generate_timeline_report(self, label: str):
        with self._lock:
            snapshot = OrderedDict(self.timeline)
        TimelineReporter(snapshot, label).print()


class NoOpInstrumentation:
    """Used when observability is disabled."""

    timeline: Dict[str, float] = {}

    def timer(self, name: str, *, record: bool = True):
        return _NoOpTimer()

    def generate_timeline_report(self, label: str):
        pass


class _NoOpTimer:
    def __enter__(self):
        pass

    def __exit__(self, exc_type, exc, tb):
        pass
