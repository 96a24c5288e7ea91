"""
LIME Model Explainer
--------------------
Uses LIME (Local Interpretable Model-agnostic Explanations) to interpret
individual churn predictions of the network.

For every explained customer LIME samples perturbations around the
customer's baked feature vector, weights them by proximity (exponential
kernel, width 0.5), and fits a small weighted linear model restricted to
the 4 most useful features. The signed weights say which features support
and which contradict the predicted class.

The network is not a model type LIME knows about, so two adapters are
passed in explicitly:
1. model_type() declares it a binary classifier
2. predict_probabilities() returns the two-column probability table
"""

import logging
from typing import Optional, Sequence

import numpy as np
import pandas as pd
from lime.lime_tabular import LimeTabularExplainer

from .config import (
    POSITIVE_CLASS, NEGATIVE_CLASS, KERNEL_WIDTH, N_EXPLAIN_FEATURES, N_PERMUTATIONS
)

logger = logging.getLogger(__name__)


def model_type(model) -> str:
    """The churn network is always a binary classifier."""
    return 'classification'


def predict_probabilities(
    model,
    records: pd.DataFrame,
    class_names: Sequence[str] = (POSITIVE_CLASS, NEGATIVE_CLASS)
) -> pd.DataFrame:
    """
    Class probability table for baked records.

    Columns are (positive class, negative class); the negative column is
    1 - positive, so every row sums to 1.
    """
    positive, negative = class_names
    proba = np.asarray(model.predict_proba(records), dtype=float)
    return pd.DataFrame({positive: proba, negative: 1.0 - proba}, index=records.index)


class ChurnExplainer:
    """
    LIME explainer for the churn network.

    Parameters:
    -----------
    model : ChurnModelTrainer
        Trained network (anything exposing predict_proba -> positive probability)
    training_features : pd.DataFrame
        Baked training matrix; LIME uses it for sampling statistics
    kernel_width : float
        Width of the proximity kernel
    n_features : int
        Maximum number of features reported per explanation
    """

    def __init__(
        self,
        model,
        training_features: pd.DataFrame,
        kernel_width: float = KERNEL_WIDTH,
        n_features: int = N_EXPLAIN_FEATURES,
        class_names: Sequence[str] = (POSITIVE_CLASS, NEGATIVE_CLASS),
        discretize_continuous: bool = True,
        random_state: Optional[int] = None
    ):
        self.model = model
        self.feature_names = list(training_features.columns)
        self.kernel_width = kernel_width
        self.n_features = n_features
        self.class_names = list(class_names)
        self.explainer = LimeTabularExplainer(
            np.asarray(training_features, dtype=float),
            mode=model_type(model),
            feature_names=self.feature_names,
            class_names=self.class_names,
            kernel_width=kernel_width,
            discretize_continuous=discretize_continuous,
            random_state=random_state
        )
        logger.info(
            f"Created LIME explainer over {len(self.feature_names)} features "
            f"(kernel_width={kernel_width}, n_features={n_features})"
        )

    def _predict_fn(self, data: np.ndarray) -> np.ndarray:
        records = pd.DataFrame(data, columns=self.feature_names)
        return predict_probabilities(self.model, records, self.class_names).values

    def explain_instance(self, row, n_labels: int = 1, n_permutations: int = N_PERMUTATIONS):
        """Raw LIME explanation of one baked record."""
        return self.explainer.explain_instance(
            np.asarray(row, dtype=float),
            self._predict_fn,
            top_labels=n_labels,
            num_features=self.n_features,
            num_samples=n_permutations
        )

    def explain(
        self,
        records: pd.DataFrame,
        n_labels: int = 1,
        n_permutations: int = N_PERMUTATIONS
    ) -> pd.DataFrame:
        """
        Explain each record for its top predicted label(s).

        Returns one row per (case, label, feature) with columns:
        case, label, label_prob, model_r2, model_intercept, feature,
        feature_value, feature_weight, feature_desc, direction
        """
        rows = []
        for case, (_, record) in enumerate(records[self.feature_names].iterrows(), start=1):
            exp = self.explain_instance(record.values, n_labels=n_labels,
                                        n_permutations=n_permutations)
            for label_idx in exp.top_labels:
                descriptions = exp.as_list(label=label_idx)
                for (feature_idx, weight), (desc, _) in zip(exp.local_exp[label_idx], descriptions):
                    rows.append({
                        'case': case,
                        'label': self.class_names[label_idx],
                        'label_prob': float(exp.predict_proba[label_idx]),
                        'model_r2': float(exp.score[label_idx]),
                        'model_intercept': float(exp.intercept[label_idx]),
                        'feature': self.feature_names[feature_idx],
                        'feature_value': float(record.iloc[feature_idx]),
                        'feature_weight': float(weight),
                        'feature_desc': desc,
                        'direction': 'supports' if weight >= 0 else 'contradicts'
                    })

        logger.info(f"Explained {len(records)} cases")
        return pd.DataFrame(rows, columns=[
            'case', 'label', 'label_prob', 'model_r2', 'model_intercept', 'feature',
            'feature_value', 'feature_weight', 'feature_desc', 'direction'
        ])


def feature_importance(explanations: pd.DataFrame, top_n: Optional[int] = None) -> pd.DataFrame:
    """
    Aggregate local explanations into a global ranking.

    Importance is the mean absolute LIME weight of a feature over the
    cases where it was selected; `n_cases` counts those cases.
    """
    weights = explanations.assign(abs_weight=explanations['feature_weight'].abs())
    grouped = weights.groupby('feature')
    df = pd.DataFrame({
        'importance': grouped['abs_weight'].mean(),
        'mean_weight': grouped['feature_weight'].mean(),
        'n_cases': grouped['case'].nunique()
    }).sort_values('importance', ascending=False).reset_index()

    df['importance_pct'] = df['importance'] / df['importance'].sum() * 100
    return df.head(top_n) if top_n else df


def summarize_explanation(explanations: pd.DataFrame, case: int) -> str:
    """Human-readable summary of one explained case."""
    case_df = explanations[explanations['case'] == case]
    if case_df.empty:
        raise ValueError(f"No explanation for case {case}")

    label = case_df['label'].iloc[0]
    prob = case_df['label_prob'].iloc[0]
    lines = [f"Case {case}: predicted {label} ({prob:.1%} probability)"]
    for direction, title in (('supports', 'Supports'), ('contradicts', 'Contradicts')):
        part = case_df[case_df['direction'] == direction]
        if len(part):
            lines.append(f"  {title}:")
            lines.extend(f"    - {r.feature_desc} ({r.feature_weight:+.3f})" for r in part.itertuples())
    return '\n'.join(lines)
