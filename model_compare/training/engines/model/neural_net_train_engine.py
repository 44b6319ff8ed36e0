# model_compare/training/engines/model/neural_net_train_engine.py
from __future__ import annotations

from sklearn.neural_network import MLPClassifier

from model_compare.training.engines.model_train_engine import ModelTrainEngine


class NeuralNetTrainEngine(ModelTrainEngine):
    """
    Feed-forward network.

    Params:
    - hidden : hidden-layer widths, e.g. [11, 15, 2]
    - epochs : max training iterations
    Any other key is passed to MLPClassifier unchanged.
    """

    kind = "neural_net"
    scale_numeric = True
    defaults = {
        "hidden": [200, 200],
        "epochs": 200,
    }

    def build_estimator(self):
        params = self.resolved_params()
        hidden = tuple(int(w) for w in params.pop("hidden"))
        epochs = int(params.pop("epochs"))
        return MLPClassifier(
            hidden_layer_sizes=hidden,
            max_iter=epochs,
            random_state=self.seed,
            **params,
        )
