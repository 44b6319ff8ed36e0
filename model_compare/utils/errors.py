# model_compare/utils/errors.py
from __future__ import annotations


class UserInputError(RuntimeError):
    """
    Raised for invalid user-provided config (split ratio, source format, etc).
    Should NOT print traceback.
    """


class ComparisonError(RuntimeError):
    """
    Base error of one comparison branch (one model).

    Branch errors abort that model only. The harness records them as
    ModelFailure and keeps evaluating the other models.
    """

    def __init__(self, message: str, *, model_name: str | None = None):
        super().__init__(message)
        self.model_name = model_name

    def __str__(self) -> str:
        msg = super().__str__()
        if self.model_name:
            return f"[{self.model_name}] {msg}"
        return msg


class InvalidSchema(ComparisonError):
    """Requested column absent, or outcome of the wrong type / cardinality."""


class SchemaMismatch(ComparisonError):
    """Scoring data incompatible with the columns a model was trained on."""


class TrainingFailure(ComparisonError):
    """Training engine failed (non-convergence, resource exhaustion, ...)."""


class UnsupportedImportance(ComparisonError):
    """
    Model kind exposes no native feature importance.

    Not a failure: collectors treat it as an expected omission.
    """


class ScoringFailure(ComparisonError):
    """Training engine failed while predicting a partition."""


class MetricsFailure(ComparisonError):
    """Metric computation failed for one scored model."""
