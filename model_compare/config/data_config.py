#!filepath: model_compare/config/data_config.py
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


class DataConfig(BaseModel):
    """
    Labeled source table + deterministic train/test split.
    """

    source: Optional[str] = None
    outcome: str

    # identifier-like columns that never become features
    exclude: List[str] = Field(default_factory=list)
    # columns forced to categorical (e.g. integer-coded classes)
    categorical: List[str] = Field(default_factory=list)
    # None -> every column except outcome / exclude
    features: Optional[List[str]] = None

    split_ratio: float = 0.75
    seed: int = 42

    @field_validator("split_ratio")
    @classmethod
    def _ratio_open_interval(cls, v: float) -> float:
        if not 0.0 < v < 1.0:
            raise ValueError(f"split_ratio must be in (0, 1), got {v}")
        return v
