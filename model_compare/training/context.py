# model_compare/training/context.py
from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import pandas as pd

from model_compare.data.partition import DatasetPartition
from model_compare.session.engine_session import EngineSession
from model_compare.training.engines.feature_importance_engine import FeatureImportanceResult
from model_compare.training.engines.metrics_engine import ComparisonMetrics
from model_compare.training.engines.train_result import ModelFailure, ScoredFrame
from model_compare.training.model_registry import ModelRegistry
from model_compare.training.result import ComparisonResult


@dataclass
class ComparisonContext:
    """
    ComparisonContext（FINAL）

    Semantics:
    - One context == one comparison run
    - run_id is immutable and mandatory
    - Steps fill the layers in order; nothing is written back upstream
    """

    # -------------------------
    # Identity
    # -------------------------
    run_id: str

    # -------------------------
    # Static bindings
    # -------------------------
    cfg: Any
    session: EngineSession
    source: Optional[str | Path | pd.DataFrame] = None

    # -------------------------
    # Data layer
    # -------------------------
    table: Optional[DatasetPartition] = None
    train: Optional[DatasetPartition] = None
    test: Optional[DatasetPartition] = None

    # -------------------------
    # Model layer
    # -------------------------
    registry: Optional[ModelRegistry] = None
    scored: Dict[str, ScoredFrame] = field(default_factory=OrderedDict)
    failures: Dict[str, ModelFailure] = field(default_factory=OrderedDict)

    # -------------------------
    # Result layer
    # -------------------------
    metrics: Optional[ComparisonMetrics] = None
    importance: Optional[FeatureImportanceResult] = None
    result: Optional[ComparisonResult] = None
    report_paths: Dict[str, Path] = field(default_factory=dict)
