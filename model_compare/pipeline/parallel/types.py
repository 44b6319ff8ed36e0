# model_compare/pipeline/parallel/types.py
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class ParallelKind(str, Enum):
    TRAIN = "train"
    SCORE = "score"


@dataclass(frozen=True)
class TaskResult:
    """
    Outcome of one keyed task: either `value` or `error`, never both.
    """
    key: str
    value: Any = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None
