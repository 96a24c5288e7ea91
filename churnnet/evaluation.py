"""
Classification Metrics
----------------------
Pure functions scoring predicted churn against ground truth.

The positive class is always passed explicitly (`positive_label`), never
inferred from label order, so metrics cannot silently come out inverted
when labels sort differently (e.g. "No" < "Yes" but 0 < 1).
"""

from typing import Any, Dict

import numpy as np
import pandas as pd
from sklearn.metrics import confusion_matrix, roc_auc_score

from .config import ConfigurationError


def confusion_matrix_counts(y_true, y_pred, positive_label=1, negative_label=0) -> Dict[str, int]:
    """TP/FP/FN/TN counts with `positive_label` as the positive class."""
    cm = confusion_matrix(np.asarray(y_true), np.asarray(y_pred),
                          labels=[negative_label, positive_label])
    tn, fp, fn, tp = cm.ravel()
    return {
        'true_negatives': int(tn),
        'false_positives': int(fp),
        'false_negatives': int(fn),
        'true_positives': int(tp)
    }


def confusion_matrix_table(y_true, y_pred, positive_label=1, negative_label=0) -> pd.DataFrame:
    """2x2 count table, rows = truth, columns = prediction, positive class first."""
    counts = confusion_matrix_counts(y_true, y_pred, positive_label, negative_label)
    return pd.DataFrame(
        [[counts['true_positives'], counts['false_negatives']],
         [counts['false_positives'], counts['true_negatives']]],
        index=pd.Index([positive_label, negative_label], name='truth'),
        columns=pd.Index([positive_label, negative_label], name='prediction')
    )


def accuracy(counts: Dict[str, int]) -> float:
    total = sum(counts.values())
    return (counts['true_positives'] + counts['true_negatives']) / total if total else 0.0


def precision(counts: Dict[str, int]) -> float:
    """TP / (TP + FP); 0.0 when nothing was predicted positive."""
    tp, fp = counts['true_positives'], counts['false_positives']
    return tp / (tp + fp) if (tp + fp) > 0 else 0.0


def recall(counts: Dict[str, int]) -> float:
    """TP / (TP + FN); 0.0 when there are no actual positives."""
    tp, fn = counts['true_positives'], counts['false_negatives']
    return tp / (tp + fn) if (tp + fn) > 0 else 0.0


def f1_score(counts: Dict[str, int]) -> float:
    """Harmonic mean of precision and recall (beta = 1)."""
    p, r = precision(counts), recall(counts)
    return 2 * p * r / (p + r) if (p + r) > 0 else 0.0


def roc_auc(y_true, y_proba, positive_label=1) -> float:
    """Area under the ROC curve of positive-class probabilities."""
    y_binary = (np.asarray(y_true) == positive_label).astype(int)
    if len(np.unique(y_binary)) < 2:
        raise ConfigurationError(
            f"ROC-AUC needs both classes in the truth; got {len(y_binary)} row(s) "
            f"with {int(y_binary.sum())} positive (positive_label={positive_label!r})"
        )
    return float(roc_auc_score(y_binary, np.asarray(y_proba, dtype=float)))


def evaluate_predictions(
    y_true,
    y_pred,
    y_proba,
    positive_label=1,
    negative_label=0
) -> Dict[str, Any]:
    """
    Full metric set for one prediction run.

    Returns:
    --------
    dict with accuracy, roc_auc, precision, recall, f1_score, n_samples
    and the confusion matrix counts
    """
    counts = confusion_matrix_counts(y_true, y_pred, positive_label, negative_label)
    return {
        'n_samples': sum(counts.values()),
        'accuracy': accuracy(counts),
        'roc_auc': roc_auc(y_true, y_proba, positive_label),
        'precision': precision(counts),
        'recall': recall(counts),
        'f1_score': f1_score(counts),
        'confusion_matrix': counts
    }
