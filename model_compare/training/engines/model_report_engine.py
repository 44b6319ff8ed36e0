# model_compare/training/engines/model_report_engine.py
from __future__ import annotations

from pathlib import Path
from typing import Dict

import pandas as pd

from model_compare import logs
from model_compare.training.result import ComparisonResult
from model_compare.utils.filesystem import FileSystem


class ModelReportEngine:
    """
    ModelReportEngine（FINAL / FROZEN）

    Responsibility:
    - Persist the flat comparison tables (CSV) for the plotting layer
    - No rendering, no re-computation
    """

    def write(self, result: ComparisonResult, out_dir: Path) -> Dict[str, Path]:
        out_dir = FileSystem.ensure_dir(out_dir)

        tables = {
            "summary": result.summary_frame(),
            "metrics": result.metrics.metrics_frame(),
            "lift": result.metrics.lift_frame(),
            "feature_importance": result.importance.to_frame(),
        }

        paths: Dict[str, Path] = {}
        for name, df in tables.items():
            paths[name] = self.write_csv(df, out_dir / f"{name}.csv")

        logs.info(f"[ModelReportEngine] wrote {sorted(paths)} -> {out_dir}")
        return paths

    @staticmethod
    def write_csv(df: pd.DataFrame, path: Path) -> Path:
        FileSystem.safe_write(path, df.to_csv(index=False).encode("utf-8"))
        return path
