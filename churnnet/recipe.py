"""
Feature Recipe
--------------
Declarative, ordered feature transformations for the churn network.

A recipe is a list of steps. `Recipe.prep` fits each step on the training
table in turn (every step sees the output of the steps before it) and
`Recipe.bake` applies the fitted steps to any table without refitting,
so no statistic of the test data leaks into a transformation.

Default churn recipe:
1. Discretize tenure into 6 equal-frequency bins
2. Log-transform TotalCharges
3. One-hot encode every categorical predictor (k-1 indicators)
4. Center every predictor on its training mean
5. Scale every predictor by its training standard deviation
"""

import logging
from typing import List, Optional

import numpy as np
import pandas as pd
from sklearn.preprocessing import OneHotEncoder, StandardScaler

from .config import (
    TARGET_COLUMN, DISCRETIZE_COLUMN, DISCRETIZE_BINS, LOG_COLUMN,
    ConfigurationError
)

logger = logging.getLogger(__name__)


def _check_columns(df: pd.DataFrame, columns: List[str], step: str) -> None:
    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise ConfigurationError(f"{step}: column(s) {missing} not found in data")


def _predictor_columns(df: pd.DataFrame, target: str) -> List[str]:
    return [c for c in df.columns if c != target]


class RecipeStep:
    """Base class: `fit` learns parameters from training data, `transform` applies them."""

    name = 'step'

    def fit(self, df: pd.DataFrame) -> 'RecipeStep':
        return self

    def transform(self, df: pd.DataFrame) -> pd.DataFrame:
        raise NotImplementedError

    def fit_transform(self, df: pd.DataFrame) -> pd.DataFrame:
        return self.fit(df).transform(df)

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class DiscretizeStep(RecipeStep):
    """
    Cut a continuous column into equal-frequency bins.

    Interior edges are the training quantiles; the outer edges are open,
    so values outside the training range fall into the first or last bin.
    Tied quantiles are merged, which can leave fewer than `n_bins` bins.
    """

    name = 'discretize'

    def __init__(self, column: str = DISCRETIZE_COLUMN, n_bins: int = DISCRETIZE_BINS):
        self.column = column
        self.n_bins = n_bins
        self.edges_ = None
        self.labels_ = None

    def fit(self, df: pd.DataFrame) -> 'DiscretizeStep':
        _check_columns(df, [self.column], self.name)
        _, edges = pd.qcut(df[self.column], q=self.n_bins, retbins=True, duplicates='drop')
        if len(edges) < 2:
            logger.warning(f"{self.name}: column '{self.column}' is constant; using a single bin")
            edges = np.array([-np.inf, np.inf])
        edges = edges.copy()
        edges[0], edges[-1] = -np.inf, np.inf
        self.edges_ = edges
        self.labels_ = [f'bin{i}' for i in range(1, len(edges))]
        return self

    def transform(self, df: pd.DataFrame) -> pd.DataFrame:
        _check_columns(df, [self.column], self.name)
        df = df.copy()
        binned = pd.cut(df[self.column], bins=self.edges_, labels=self.labels_)
        df[self.column] = binned.astype(str)
        return df

    def __repr__(self) -> str:
        return f"DiscretizeStep(column={self.column!r}, n_bins={self.n_bins})"


class LogStep(RecipeStep):
    """Natural log of a column. Values must be strictly positive."""

    name = 'log'

    def __init__(self, column: str = LOG_COLUMN):
        self.column = column

    def _check_domain(self, df: pd.DataFrame) -> None:
        _check_columns(df, [self.column], self.name)
        values = pd.to_numeric(df[self.column])
        n_bad = int((values <= 0).sum())
        if n_bad:
            raise ConfigurationError(
                f"{self.name}: column '{self.column}' has {n_bad} non-positive "
                f"value(s); log transform requires values > 0"
            )

    def fit(self, df: pd.DataFrame) -> 'LogStep':
        self._check_domain(df)
        return self

    def transform(self, df: pd.DataFrame) -> pd.DataFrame:
        self._check_domain(df)
        df = df.copy()
        df[self.column] = np.log(df[self.column].astype(float))
        return df

    def __repr__(self) -> str:
        return f"LogStep(column={self.column!r})"


class DummyStep(RecipeStep):
    """
    One-hot encode every categorical predictor.

    Encoding is k-1 indicators per column: the first level in sorted order
    is the reference and gets no column. Indicator columns are named
    `<column>_<level>` and are appended after the numeric columns. A level
    never seen in training encodes as all zeros, the same as the reference.
    """

    name = 'dummy'

    def __init__(self, target: str = TARGET_COLUMN):
        self.target = target
        self.columns_ = None
        self.encoder_ = None

    def fit(self, df: pd.DataFrame) -> 'DummyStep':
        self.columns_ = [
            c for c in _predictor_columns(df, self.target)
            if not pd.api.types.is_numeric_dtype(df[c])
        ]
        self.encoder_ = OneHotEncoder(
            drop='first',
            handle_unknown='ignore',
            sparse_output=False,
            dtype=float
        )
        if self.columns_:
            self.encoder_.fit(df[self.columns_].astype(str))
        return self

    @property
    def categories_(self) -> dict:
        if not self.columns_:
            return {}
        return {col: list(levels) for col, levels in zip(self.columns_, self.encoder_.categories_)}

    def transform(self, df: pd.DataFrame) -> pd.DataFrame:
        if not self.columns_:
            return df.copy()
        _check_columns(df, self.columns_, self.name)
        encoded = pd.DataFrame(
            self.encoder_.transform(df[self.columns_].astype(str)),
            columns=self.encoder_.get_feature_names_out(self.columns_),
            index=df.index
        )
        return pd.concat([df.drop(columns=self.columns_), encoded], axis=1)


class _ScalerStep(RecipeStep):
    """Apply a StandardScaler fitted on the training predictors."""

    with_mean = True
    with_std = True

    def __init__(self, target: str = TARGET_COLUMN):
        self.target = target
        self.columns_ = None
        self.scaler_ = None

    def fit(self, df: pd.DataFrame) -> '_ScalerStep':
        self.columns_ = _predictor_columns(df, self.target)
        self.scaler_ = StandardScaler(with_mean=self.with_mean, with_std=self.with_std)
        self.scaler_.fit(df[self.columns_].astype(float))
        return self

    def transform(self, df: pd.DataFrame) -> pd.DataFrame:
        _check_columns(df, self.columns_, self.name)
        df = df.copy()
        df[self.columns_] = self.scaler_.transform(df[self.columns_].astype(float))
        return df


class CenterStep(_ScalerStep):
    """Subtract the training mean from every predictor."""

    name = 'center'
    with_std = False

    @property
    def means_(self) -> pd.Series:
        return pd.Series(self.scaler_.mean_, index=self.columns_)


class ScaleStep(_ScalerStep):
    """Divide every predictor by its training standard deviation (ddof=0)."""

    name = 'scale'
    with_mean = False

    @property
    def stds_(self) -> pd.Series:
        return pd.Series(self.scaler_.scale_, index=self.columns_)


class Recipe:
    """
    Ordered feature recipe.

    Usage:
    ------
    recipe = build_churn_recipe().prep(train_df)
    X_train = recipe.bake(train_df)
    X_test = recipe.bake(test_df)
    """

    def __init__(self, steps: List[RecipeStep], target: str = TARGET_COLUMN):
        self.steps = list(steps)
        self.target = target
        self.feature_names_ = None
        self._prepped = False

    def prep(self, train_df: pd.DataFrame) -> 'Recipe':
        """Fit every step on the training table, in order."""
        _check_columns(train_df, [self.target], 'recipe')
        df = train_df
        for step in self.steps:
            df = step.fit_transform(df)
            logger.debug(f"Fitted {step!r}")

        self.feature_names_ = _predictor_columns(df, self.target)
        self._prepped = True
        logger.info(f"Recipe prepped on {len(train_df):,} rows -> {len(self.feature_names_)} features")
        return self

    def bake(self, df: pd.DataFrame) -> pd.DataFrame:
        """Apply the fitted steps and return the predictor matrix (target excluded)."""
        if not self._prepped:
            raise ValueError("Recipe not prepped. Call prep on the training data first.")

        for step in self.steps:
            df = step.transform(df)

        return df[self.feature_names_].astype(float)

    def get_step(self, name: str) -> Optional[RecipeStep]:
        for step in self.steps:
            if step.name == name:
                return step
        return None

    def __repr__(self) -> str:
        steps = ', '.join(repr(s) for s in self.steps)
        return f"Recipe([{steps}], prepped={self._prepped})"


def build_churn_recipe(
    discretize_column: str = DISCRETIZE_COLUMN,
    n_bins: int = DISCRETIZE_BINS,
    log_column: str = LOG_COLUMN,
    target: str = TARGET_COLUMN
) -> Recipe:
    """The recipe used by the churn network."""
    return Recipe([
        DiscretizeStep(discretize_column, n_bins=n_bins),
        LogStep(log_column),
        DummyStep(target=target),
        CenterStep(target=target),
        ScaleStep(target=target),
    ], target=target)
