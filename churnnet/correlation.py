"""
Feature/Target Correlation Check
--------------------------------
Global cross-check for the local LIME explanations: Pearson correlation
of every baked training feature with the 0/1 churn target. Computed on
the same transformed feature space the network sees, so the two views
are directly comparable.
"""

import numpy as np
import pandas as pd

from .config import TARGET_COLUMN


def correlation_table(features: pd.DataFrame, target, target_name: str = TARGET_COLUMN) -> pd.DataFrame:
    """
    Rank features by |Pearson correlation| with the target.

    Parameters:
    -----------
    features : pd.DataFrame
        Baked training matrix
    target : array-like
        Binary target aligned with the rows of `features`

    Returns:
    --------
    pd.DataFrame with columns feature, correlation, abs_correlation,
    direction, sorted by abs_correlation descending. Zero-variance
    features have no defined correlation and sort last.
    """
    values = np.asarray(target, dtype=float)
    if len(values) != len(features):
        raise ValueError(f"features has {len(features)} rows but target has {len(values)}")
    y = pd.Series(values, index=features.index, name=target_name)

    corr = features.astype(float).corrwith(y, method='pearson')
    table = pd.DataFrame({
        'feature': corr.index,
        'correlation': corr.values,
        'abs_correlation': corr.abs().values
    })
    table['direction'] = np.where(table['correlation'] >= 0, 'positive', 'negative')
    table.loc[table['correlation'].isna(), 'direction'] = 'undefined'

    return table.sort_values('abs_correlation', ascending=False, na_position='last',
                             kind='mergesort').reset_index(drop=True)
