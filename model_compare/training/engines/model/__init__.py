"""
Concrete ModelTrainEngine implementations, one file per kind.

This module is an organizational namespace only; resolve engines
through `model_compare.training.engines.registry`.
"""
