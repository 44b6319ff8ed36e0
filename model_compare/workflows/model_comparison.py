# model_compare/workflows/model_comparison.py
from __future__ import annotations

import uuid
from datetime import datetime
from pathlib import Path
from typing import Optional

import pandas as pd

from model_compare.config.app_config import AppConfig
from model_compare.observability.instrumentation import Instrumentation
from model_compare.session.engine_session import EngineSession
from model_compare.training.engines.metrics_engine import MetricsAggregator
from model_compare.training.pipeline import ComparisonPipeline
from model_compare.training.result import ComparisonResult
from model_compare.training.steps.feature_importance_step import FeatureImportanceStep
from model_compare.training.steps.model_metrics_step import ModelMetricsStep
from model_compare.training.steps.model_report_step import ModelReportStep
from model_compare.training.steps.model_score_step import ModelScoreStep
from model_compare.training.steps.model_train_step import ModelTrainStep
from model_compare.training.steps.partition_step import PartitionStep
from model_compare.utils.logger import init_logging


def build_model_comparison(
        cfg: AppConfig | None = None,
        session: EngineSession | None = None,
) -> ComparisonPipeline:
    """
    Model Comparison Workflow

    Partition -> Train -> Score -> Metrics -> Importance [-> Report]
    """

    if cfg is None:
        cfg = AppConfig.load()
    if session is None:
        session = new_session(cfg)
    inst = session.inst

    final_steps = []
    if cfg.comparison.output_dir:
        final_steps.append(ModelReportStep(cfg.comparison.output_dir, inst=inst))

    return ComparisonPipeline(
        steps=[
            PartitionStep(inst=inst),
            ModelTrainStep(inst=inst),
            ModelScoreStep(inst=inst),
            ModelMetricsStep(
                MetricsAggregator(
                    n_bins=cfg.comparison.n_bins,
                    positive_class=cfg.comparison.positive_class,
                ),
                inst=inst,
            ),
            FeatureImportanceStep(inst=inst),
        ],
        final_steps=final_steps,
        session=session,
        cfg=cfg,
    )


def new_session(cfg: AppConfig, label: str = "comparison") -> EngineSession:
    return EngineSession(
        seed=cfg.data.seed,
        max_workers=cfg.comparison.max_workers,
        inst=Instrumentation(),
        label=label,
    )


def new_run_id() -> str:
    return f"{datetime.now():%Y%m%d-%H%M%S}-{uuid.uuid4().hex[:6]}"


def run_model_comparison(
        cfg: AppConfig | None = None,
        *,
        run_id: str | None = None,
        source: Optional[str | Path | pd.DataFrame] = None,
) -> ComparisonResult:
    """
    Configure logging from cfg.log, open a session, run the comparison,
    close the session.
    """
    if cfg is None:
        cfg = AppConfig.load()
    init_logging(cfg.log)
    if run_id is None:
        run_id = new_run_id()

    with new_session(cfg, label=run_id) as session:
        pipeline = build_model_comparison(cfg, session=session)
        ctx = pipeline.run(run_id, source=source)

    return ctx.result
