"""
Data Ingestion, Cleaning & Splitting
------------------------------------
First three stages of the churn pipeline:

- Ingestion: read the delimited customer file into a DataFrame
- Cleaning: drop the identifier, drop incomplete rows, target first
- Splitting: seed-deterministic 80/20 train/test partition
"""

import logging
import math
from typing import Tuple

import numpy as np
import pandas as pd
from sklearn.model_selection import train_test_split

from .config import (
    ID_COLUMN, TARGET_COLUMN, POSITIVE_CLASS, TRAIN_PROP, RANDOM_STATE,
    ConfigurationError
)

logger = logging.getLogger(__name__)


def load_data(filepath: str) -> pd.DataFrame:
    """Load customer records from a CSV file. Blank fields read as missing."""
    df = pd.read_csv(filepath, na_values=['', ' '], encoding='utf-8')
    logger.info(f"Loaded {len(df):,} records with {len(df.columns)} columns from {filepath}")
    return df


def clean_data(df: pd.DataFrame,
               target: str = TARGET_COLUMN,
               id_column: str = ID_COLUMN) -> pd.DataFrame:
    """
    Clean raw records:
    - Remove the row identifier (not predictive)
    - Drop rows with any missing field (blank strings count as missing)
    - Convert columns that are fully numeric to numeric dtype
    - Move the target column first
    """
    if target not in df.columns:
        raise ConfigurationError(f"Target column '{target}' not found in data")

    df = df.copy()

    if id_column in df.columns:
        df = df.drop(id_column, axis=1)

    # TotalCharges is blank for some new customers in the raw export
    df = df.replace(r'^\s*$', np.nan, regex=True)
    n_before = len(df)
    df = df.dropna().reset_index(drop=True)
    logger.info(f"Dropped {n_before - len(df)} rows with missing values")

    for col in df.columns:
        if col == target or pd.api.types.is_numeric_dtype(df[col]):
            continue
        converted = pd.to_numeric(df[col], errors='coerce')
        if converted.notna().all():
            df[col] = converted

    columns = [target] + [c for c in df.columns if c != target]
    return df[columns]


def split_data(
    df: pd.DataFrame,
    prop: float = TRAIN_PROP,
    random_state: int = RANDOM_STATE
) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """
    Randomly partition rows into training and test sets.

    The training set receives ceil(N * prop) rows and the test set the rest.
    The same seed always yields the same partition. Row labels of the input
    are preserved, so train and test together reconstruct the input.
    Tables too small to leave a test row (ceil(N * prop) == N) go entirely
    to training and the test set is empty.
    """
    if not 0 < prop < 1:
        raise ConfigurationError(f"Split proportion must be in (0, 1), got {prop}")
    if len(df) == 0:
        raise ConfigurationError("Cannot split an empty table; at least 1 row is required")

    n_train = math.ceil(round(len(df) * prop, 10))
    if n_train >= len(df):
        train_df, test_df = df.sample(frac=1, random_state=random_state), df.iloc[0:0]
    else:
        train_df, test_df = train_test_split(
            df,
            train_size=n_train,
            random_state=random_state,
            shuffle=True
        )

    logger.info(f"Training set: {len(train_df):,} samples")
    logger.info(f"Test set: {len(test_df):,} samples")
    return train_df, test_df


def encode_target(y: pd.Series, positive_class: str = POSITIVE_CLASS) -> np.ndarray:
    """Map target labels to 1 (positive class) and 0 (everything else)."""
    return (np.asarray(y) == positive_class).astype(int)
