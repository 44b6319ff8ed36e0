# model_compare/training/engines/score_engine.py
from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Dict

import numpy as np
import pandas as pd

from model_compare import logs
from model_compare.data.partition import DatasetPartition
from model_compare.pipeline.parallel.executor import ParallelExecutor
from model_compare.pipeline.parallel.types import ParallelKind
from model_compare.session.engine_session import EngineSession
from model_compare.training.engines.train_result import (
    GROUND_TRUTH,
    PREDICTED_CLASS,
    ModelFailure,
    ModelHandle,
    ScoredFrame,
    probability_column,
)
from model_compare.training.model_registry import ModelRegistry
from model_compare.utils.errors import ComparisonError, SchemaMismatch, ScoringFailure


@dataclass
class ScoreResult:
    scored: Dict[str, ScoredFrame] = field(default_factory=OrderedDict)
    failures: Dict[str, ModelFailure] = field(default_factory=OrderedDict)


class Scorer:
    """
    Scorer（FINAL / FROZEN）

    Contract:
    - one ScoredFrame per (model, partition), same rows in the same order
    - ground truth attached by position, never by value matching
    - schema normalised across kinds:
        ground_truth | predicted_class | p_<class> ...
    """

    def score(
        self,
        session: EngineSession,
        handle: ModelHandle,
        data: DatasetPartition,
    ) -> ScoredFrame:
        session.ensure_open()
        self._check_schema(handle, data)

        X = data.select(handle.feature_columns)

        try:
            proba = np.asarray(handle.model.predict_proba(X), dtype=float)
        except Exception as e:
            raise ScoringFailure(
                f"predict_proba failed: {type(e).__name__}: {e}",
                model_name=handle.name,
            ) from e

        classes = np.asarray(handle.classes)
        predicted = classes[np.argmax(proba, axis=1)]

        truth = data.column(handle.outcome).to_numpy()

        columns = {
            GROUND_TRUTH: truth,
            PREDICTED_CLASS: predicted,
        }
        for i, label in enumerate(handle.classes):
            columns[probability_column(label)] = proba[:, i]

        frame = pd.DataFrame(columns, index=data.index.copy())

        if len(frame) != len(data):
            raise ScoringFailure(
                f"row count mismatch: scored={len(frame)} partition={len(data)}",
                model_name=handle.name,
            )

        logs.debug(f"[Scorer] {handle.name} scored rows={len(frame)}")
        return ScoredFrame(
            model_name=handle.name, frame=frame, classes=handle.classes, kind=handle.kind
        )

    def score_all(
        self,
        session: EngineSession,
        registry: ModelRegistry,
        data: DatasetPartition,
    ) -> ScoreResult:
        """
        Score every registered model; failures exclude that model only.
        """
        session.ensure_open()

        def _handler(name: str) -> ScoredFrame:
            with session.inst.timer(f"score:{name}"):
                return self.score(session, registry.get(name), data)

        results = ParallelExecutor.run(
            kind=ParallelKind.SCORE,
            items=registry.names(),
            handler=_handler,
            max_workers=session.max_workers,
        )

        out = ScoreResult()
        for name, res in results.items():
            if res.ok:
                out.scored[name] = res.value
            else:
                failure = ModelFailure.from_error(
                    name=name, kind=registry.get(name).kind, stage="score", err=res.error
                )
                out.failures[name] = failure
                logs.warning(
                    f"[Scorer] {name} excluded: {failure.error}: {failure.reason}"
                )
        return out

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------
    @staticmethod
    def _check_schema(handle: ModelHandle, data: DatasetPartition) -> None:
        missing = [c for c in handle.feature_columns if not data.has_column(c)]
        if missing:
            raise SchemaMismatch(
                f"partition {data.name} lacks trained feature columns: {missing}",
                model_name=handle.name,
            )

        changed = {
            c: (handle.feature_types[c], data.column_type(c))
            for c in handle.feature_columns
            if data.column_type(c) != handle.feature_types[c]
        }
        if changed:
            raise SchemaMismatch(
                f"column types differ from training (trained, given): {changed}",
                model_name=handle.name,
            )

        if not data.has_column(handle.outcome):
            raise SchemaMismatch(
                f"partition {data.name} lacks outcome column {handle.outcome!r}",
                model_name=handle.name,
            )
