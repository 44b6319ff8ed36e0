# model_compare/training/model_registry.py
from __future__ import annotations

from collections import OrderedDict
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence

import pandas as pd

from model_compare import logs
from model_compare.data.partition import DatasetPartition
from model_compare.pipeline.parallel.executor import ParallelExecutor
from model_compare.pipeline.parallel.types import ParallelKind
from model_compare.session.engine_session import EngineSession
from model_compare.training.engines.registry import resolve_model_train_engine
from model_compare.training.engines.train_result import ModelFailure, ModelHandle
from model_compare.utils.errors import ComparisonError, InvalidSchema, TrainingFailure


def resolve_feature_columns(
    data: DatasetPartition,
    *,
    features: Optional[Sequence[str]],
    outcome: str,
    exclude: Iterable[str] = (),
    model_name: str | None = None,
) -> List[str]:
    """
    Validate the training schema and return the feature list.

    Raises InvalidSchema when:
    - the outcome is absent, not categorical, or has < 2 distinct values
    - a requested feature is absent or listed in `exclude`
    - a feature is an identifier column, or the outcome itself
    - no feature is left
    """
    exclude = list(exclude)

    if not data.has_column(outcome):
        raise InvalidSchema(f"outcome column {outcome!r} not in partition", model_name=model_name)

    y = data.column(outcome)
    outcome_type = data.column_type(outcome)
    if outcome_type == "identifier" or (
        outcome_type == "numeric"
        and not (pd.api.types.is_integer_dtype(y) or pd.api.types.is_bool_dtype(y))
    ):
        raise InvalidSchema(
            f"outcome column {outcome!r} must be categorical, got {y.dtype}",
            model_name=model_name,
        )

    n_levels = y.dropna().nunique()
    if n_levels < 2:
        raise InvalidSchema(
            f"outcome column {outcome!r} has {n_levels} distinct value(s), need >= 2",
            model_name=model_name,
        )

    if features is None:
        features = [
            c for c in data.columns
            if c != outcome and c not in exclude and data.column_type(c) != "identifier"
        ]
    else:
        features = list(features)
        missing = [c for c in features if not data.has_column(c)]
        if missing:
            raise InvalidSchema(f"feature columns not in partition: {missing}", model_name=model_name)

        excluded = [c for c in features if c in exclude]
        if excluded:
            raise InvalidSchema(f"feature columns are excluded identifiers: {excluded}", model_name=model_name)

        ids = [c for c in features if data.column_type(c) == "identifier"]
        if ids:
            raise InvalidSchema(f"identifier columns cannot be features: {ids}", model_name=model_name)

        if outcome in features:
            raise InvalidSchema(f"outcome {outcome!r} listed as a feature", model_name=model_name)

    if not features:
        raise InvalidSchema("no feature columns left", model_name=model_name)

    return features


class ModelRegistry:
    """
    ModelRegistry（FINAL）

    Semantics:
    - model name -> trained ModelHandle, trained once per session
    - one independent branch per requested spec
    - a failing branch is recorded in `failures` and never registered
    """

    def __init__(self):
        self._handles: "OrderedDict[str, ModelHandle]" = OrderedDict()
        self.failures: Dict[str, ModelFailure] = OrderedDict()
        self.requested: List[str] = []

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def train(
        self,
        session: EngineSession,
        specs: Sequence[Any],
        *,
        features: Optional[Sequence[str]],
        outcome: str,
        data: DatasetPartition,
        exclude: Iterable[str] = (),
    ) -> "ModelRegistry":
        """
        Train one model per spec (`name`, `kind`, `params`).
        """
        session.ensure_open()
        exclude = list(exclude)

        by_name = OrderedDict((spec.name, spec) for spec in specs)
        if len(by_name) != len(specs):
            raise ValueError("[ModelRegistry] duplicate model names in specs")

        for name in by_name:
            if name in self._handles or name in self.failures:
                raise ValueError(f"[ModelRegistry] {name!r} already trained in this registry")
            self.requested.append(name)

        def _handler(name: str) -> ModelHandle:
            spec = by_name[name]
            with session.inst.timer(f"train:{name}"):
                return self._train_one(
                    session,
                    name=name,
                    kind=spec.kind,
                    params=dict(spec.params or {}),
                    features=features,
                    outcome=outcome,
                    data=data,
                    exclude=exclude,
                )

        results = ParallelExecutor.run(
            kind=ParallelKind.TRAIN,
            items=list(by_name),
            handler=_handler,
            max_workers=session.max_workers,
        )

        for name, res in results.items():
            if res.ok:
                self.register(res.value)
            else:
                failure = ModelFailure.from_error(
                    name=name, kind=by_name[name].kind, stage="train", err=res.error
                )
                self.failures[name] = failure
                logs.warning(
                    f"[ModelRegistry] {name} excluded: {failure.error}: {failure.reason}"
                )

        logs.info(
            f"[ModelRegistry] trained={list(self._handles)} "
            f"failed={list(self.failures)}"
        )
        return self

    def register(self, handle: ModelHandle) -> None:
        if handle.name in self._handles:
            raise ValueError(f"[ModelRegistry] {handle.name!r} already registered")
        if handle.name not in self.requested:
            self.requested.append(handle.name)
        self._handles[handle.name] = handle

    def get(self, name: str) -> ModelHandle:
        return self._handles[name]

    def names(self) -> List[str]:
        return list(self._handles)

    def handles(self) -> List[ModelHandle]:
        return list(self._handles.values())

    def __contains__(self, name: str) -> bool:
        return name in self._handles

    def __iter__(self) -> Iterator[str]:
        return iter(self._handles)

    def __len__(self) -> int:
        return len(self._handles)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------
    @staticmethod
    def _train_one(
        session: EngineSession,
        *,
        name: str,
        kind: str,
        params: Dict[str, Any],
        features: Optional[Sequence[str]],
        outcome: str,
        data: DatasetPartition,
        exclude: List[str],
    ) -> ModelHandle:
        columns = resolve_feature_columns(
            data, features=features, outcome=outcome, exclude=exclude, model_name=name
        )
        feature_types = {c: data.column_type(c) for c in columns}
        numeric = [c for c in columns if feature_types[c] == "numeric"]
        categorical = [c for c in columns if feature_types[c] == "categorical"]

        frame = data.select(columns + [outcome])
        mask = frame[outcome].notna()
        if not mask.all():
            logs.info(f"[ModelRegistry] {name} drop {int((~mask).sum())} rows with missing outcome")
            frame = frame.loc[mask]

        try:
            engine = resolve_model_train_engine(kind=kind, params=params, seed=session.seed)
        except ValueError as e:
            raise TrainingFailure(str(e), model_name=name) from e

        logs.info(
            f"[ModelRegistry] train {name} kind={kind} rows={len(frame)} "
            f"numeric={numeric} categorical={categorical}"
        )
        try:
            model = engine.train(
                X=frame[columns],
                y=frame[outcome],
                numeric=numeric,
                categorical=categorical,
            )
        except ComparisonError:
            raise
        except Exception as e:
            raise TrainingFailure(
                f"{kind} training failed: {type(e).__name__}: {e}",
                model_name=name,
            ) from e

        return ModelHandle(
            name=name,
            kind=kind,
            model=model,
            engine=engine,
            feature_columns=tuple(numeric + categorical),
            feature_types=feature_types,
            outcome=outcome,
            classes=tuple(model.classes_),
            capabilities=engine.capabilities,
        )
