"""
Model Training Module
---------------------
Trains and evaluates the feed-forward churn network.

Architecture:
- Input layer sized to the baked feature matrix
- 2 hidden layers x 16 units, ReLU, uniform weight init
- Dropout of 10% after each hidden layer (training only)
- 1 sigmoid output unit = churn probability

Training minimizes binary cross-entropy with Adam over mini-batches of 50
for 35 epochs. The last 30% of the training rows are held out for
validation loss/accuracy tracking; they never drive a weight update.
"""

import logging
from typing import Dict, List, Optional, Sequence

import numpy as np
import torch
from torch import nn

from .config import (
    HIDDEN_UNITS, DROPOUT_RATE, INIT_RANGE, LEARNING_RATE, BATCH_SIZE,
    EPOCHS, VALIDATION_SPLIT, THRESHOLD
)
from .evaluation import evaluate_predictions

logger = logging.getLogger(__name__)


class ChurnNet(nn.Module):
    """Fully-connected binary classifier returning a probability per row."""

    def __init__(
        self,
        n_features: int,
        hidden_units: Sequence[int] = HIDDEN_UNITS,
        dropout: float = DROPOUT_RATE,
        init_range: float = INIT_RANGE
    ):
        super().__init__()
        layers = []
        in_features = n_features
        for units in hidden_units:
            layers += [nn.Linear(in_features, units), nn.ReLU(), nn.Dropout(dropout)]
            in_features = units
        layers += [nn.Linear(in_features, 1), nn.Sigmoid()]
        self.layers = nn.Sequential(*layers)
        self.reset_parameters(init_range)

    def reset_parameters(self, init_range: float = INIT_RANGE) -> None:
        for module in self.modules():
            if isinstance(module, nn.Linear):
                nn.init.uniform_(module.weight, -init_range, init_range)
                nn.init.zeros_(module.bias)

    def forward(self, x: torch.Tensor) -> torch.Tensor:
        return self.layers(x).squeeze(-1)


def _as_tensor(X) -> torch.Tensor:
    return torch.as_tensor(np.asarray(X, dtype=np.float32))


class ChurnModelTrainer:
    """
    Builds, trains and runs the churn network.

    Training is unseeded unless `random_state` is given, in which case torch
    is seeded before weight initialization and batch shuffling so that
    repeated runs produce the same network.
    """

    def __init__(
        self,
        hidden_units: Sequence[int] = HIDDEN_UNITS,
        dropout: float = DROPOUT_RATE,
        learning_rate: float = LEARNING_RATE,
        batch_size: int = BATCH_SIZE,
        epochs: int = EPOCHS,
        validation_split: float = VALIDATION_SPLIT,
        random_state: Optional[int] = None
    ):
        self.hidden_units = tuple(hidden_units)
        self.dropout = dropout
        self.learning_rate = learning_rate
        self.batch_size = batch_size
        self.epochs = epochs
        self.validation_split = validation_split
        self.random_state = random_state
        self.model = None
        self.feature_names = None
        self.history: Dict[str, List[float]] = {}
        self.results = {}

    def build_network(self, n_features: int) -> ChurnNet:
        return ChurnNet(n_features, hidden_units=self.hidden_units, dropout=self.dropout)

    def train_network(self, X_train, y_train) -> ChurnNet:
        """
        Fit the network on the baked training matrix and 0/1 target.

        Parameters:
        -----------
        X_train : pd.DataFrame or np.ndarray
            Baked training features
        y_train : np.ndarray
            Binary target (1 = churn)
        """
        if hasattr(X_train, 'columns'):
            self.feature_names = list(X_train.columns)

        X = _as_tensor(X_train)
        y = _as_tensor(y_train).reshape(-1)
        if len(X) != len(y):
            raise ValueError(f"X has {len(X)} rows but y has {len(y)}")

        # Validation rows are the tail of the training data, fixed across epochs
        split_at = int(len(X) * (1 - self.validation_split))
        if split_at == 0:
            raise ValueError("No rows left for training after the validation split")
        X_fit, y_fit = X[:split_at], y[:split_at]
        X_val, y_val = X[split_at:], y[split_at:]

        if self.random_state is not None:
            torch.manual_seed(self.random_state)

        self.model = self.build_network(X.shape[1])
        optimizer = torch.optim.Adam(self.model.parameters(), lr=self.learning_rate)
        loss_fn = nn.BCELoss()
        self.history = {'loss': [], 'acc': [], 'val_loss': [], 'val_acc': []}

        logger.info(
            f"Training ChurnNet on {len(X_fit):,} rows, validating on {len(X_val):,} "
            f"({self.epochs} epochs, batch size {self.batch_size})"
        )

        for epoch in range(1, self.epochs + 1):
            self.model.train()
            order = torch.randperm(len(X_fit))
            total_loss, total_correct = 0.0, 0
            for start in range(0, len(X_fit), self.batch_size):
                idx = order[start:start + self.batch_size]
                xb, yb = X_fit[idx], y_fit[idx]

                optimizer.zero_grad()
                proba = self.model(xb)
                loss = loss_fn(proba, yb)
                loss.backward()
                optimizer.step()

                total_loss += loss.item() * len(idx)
                total_correct += int(((proba >= THRESHOLD).float() == yb).sum())

            self.history['loss'].append(total_loss / len(X_fit))
            self.history['acc'].append(total_correct / len(X_fit))

            message = (f"Epoch {epoch}/{self.epochs} - loss: {self.history['loss'][-1]:.4f}"
                       f" - acc: {self.history['acc'][-1]:.4f}")
            if len(X_val):
                self.model.eval()
                with torch.no_grad():
                    val_proba = self.model(X_val)
                    val_loss = loss_fn(val_proba, y_val).item()
                val_acc = float(((val_proba >= THRESHOLD).float() == y_val).float().mean())
                self.history['val_loss'].append(val_loss)
                self.history['val_acc'].append(val_acc)
                message += f" - val_loss: {val_loss:.4f} - val_acc: {val_acc:.4f}"
            logger.info(message)

        self.model.eval()
        logger.info("Training complete.")
        return self.model

    def predict_proba(self, X) -> np.ndarray:
        """Churn probability for every row."""
        if self.model is None:
            raise ValueError("Model not trained. Call train_network first.")
        self.model.eval()
        with torch.no_grad():
            return self.model(_as_tensor(X)).numpy().astype(float)

    def classify(self, X, threshold: float = THRESHOLD) -> np.ndarray:
        """Predicted class (1 = churn) for every row."""
        return (self.predict_proba(X) >= threshold).astype(int)

    def evaluate_model(self, X_test, y_test, threshold: float = THRESHOLD) -> Dict:
        """
        Score the network on a baked test matrix.

        Metrics computed:
        - Confusion Matrix (positive class = churn)
        - Accuracy, ROC-AUC
        - Precision, Recall, F1-Score
        """
        y_proba = self.predict_proba(X_test)
        y_pred = (y_proba >= threshold).astype(int)
        metrics = evaluate_predictions(y_test, y_pred, y_proba)
        metrics['threshold'] = threshold

        cm = metrics['confusion_matrix']
        logger.info("Confusion Matrix:")
        logger.info("                 Predicted No  Predicted Yes")
        logger.info(f"Actual No          {cm['true_negatives']:>8}        {cm['false_positives']:>8}")
        logger.info(f"Actual Yes         {cm['false_negatives']:>8}        {cm['true_positives']:>8}")
        logger.info(f"Accuracy:  {metrics['accuracy']:.3f}")
        logger.info(f"ROC-AUC:   {metrics['roc_auc']:.3f}")
        logger.info(f"Precision: {metrics['precision']:.3f}")
        logger.info(f"Recall:    {metrics['recall']:.3f}")
        logger.info(f"F1-Score:  {metrics['f1_score']:.3f}")

        self.results = metrics
        return metrics
