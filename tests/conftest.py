"""Shared fixtures: a small synthetic Telco table pushed through the early pipeline stages."""

import pytest

from churnnet.config import TARGET_COLUMN
from churnnet.data_generator import generate_telco_dataset
from churnnet.model_training import ChurnModelTrainer
from churnnet.preprocessing import clean_data, encode_target, split_data
from churnnet.recipe import build_churn_recipe


@pytest.fixture(scope="session")
def raw_df():
    return generate_telco_dataset(n_samples=600, random_state=7)


@pytest.fixture(scope="session")
def cleaned_df(raw_df):
    return clean_data(raw_df)


@pytest.fixture(scope="session")
def split(cleaned_df):
    return split_data(cleaned_df, prop=0.8, random_state=7)


@pytest.fixture(scope="session")
def prepped_recipe(split):
    train_df, _ = split
    return build_churn_recipe().prep(train_df)


@pytest.fixture(scope="session")
def baked(split, prepped_recipe):
    train_df, test_df = split
    return (
        prepped_recipe.bake(train_df),
        prepped_recipe.bake(test_df),
        encode_target(train_df[TARGET_COLUMN]),
        encode_target(test_df[TARGET_COLUMN]),
    )


@pytest.fixture(scope="session")
def trained_trainer(baked):
    X_train, _, y_train, _ = baked
    trainer = ChurnModelTrainer(epochs=5, random_state=0)
    trainer.train_network(X_train, y_train)
    return trainer
