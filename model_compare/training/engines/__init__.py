"""
Model Train Engines

Each ModelTrainEngine wraps ONE scikit-learn estimator family and
defines its complete training semantics:

- preprocessing of numeric / categorical features
- native defaults (overridable per spec params)
- capability set: trainable / scorable / importance

Training Guarantees
-------------------

On success every engine returns a fitted sklearn Pipeline:

pipeline.named_steps["prep"]
    ColumnTransformer; numeric block first, categorical block second.

pipeline.named_steps["model"]
    The fitted estimator.

Engines never guess label semantics: outcome validation happens in the
ModelRegistry before an engine is called.
"""
