"""Tests for ingestion, cleaning, splitting and target encoding."""

import numpy as np
import pandas as pd
import pytest
from pytest_check import check

from churnnet.config import ConfigurationError, ID_COLUMN, TARGET_COLUMN
from churnnet.preprocessing import clean_data, encode_target, load_data, split_data


class TestCleanData:
    """Identifier removal, missing-row removal, dtype recovery and column order."""

    def test_identifier_column_is_dropped(self, cleaned_df) -> None:
        assert ID_COLUMN not in cleaned_df.columns

    def test_target_column_is_first(self, cleaned_df) -> None:
        assert cleaned_df.columns[0] == TARGET_COLUMN

    def test_rows_with_blank_fields_are_dropped(self, raw_df, cleaned_df) -> None:
        n_blank = int((raw_df['TotalCharges'].astype(str).str.strip() == '').sum())
        with check:
            assert n_blank > 0
        with check:
            assert len(cleaned_df) == len(raw_df) - n_blank
        with check:
            assert not cleaned_df.isna().any().any()

    def test_numeric_text_column_becomes_numeric(self, cleaned_df) -> None:
        assert pd.api.types.is_numeric_dtype(cleaned_df['TotalCharges'])

    def test_categorical_columns_stay_categorical(self, cleaned_df) -> None:
        assert not pd.api.types.is_numeric_dtype(cleaned_df['Contract'])

    def test_index_is_reset(self, cleaned_df) -> None:
        assert list(cleaned_df.index) == list(range(len(cleaned_df)))

    def test_input_is_not_mutated(self, raw_df) -> None:
        before = raw_df.copy()
        clean_data(raw_df)
        pd.testing.assert_frame_equal(raw_df, before)

    def test_missing_target_raises_configuration_error(self, raw_df) -> None:
        with pytest.raises(ConfigurationError, match="Churn"):
            clean_data(raw_df.drop(columns=[TARGET_COLUMN]))


class TestLoadData:
    """CSV ingestion treats blank fields as missing."""

    def test_blank_fields_read_as_missing(self, tmp_path) -> None:
        path = tmp_path / "customers.csv"
        path.write_text(
            "customerID,tenure,TotalCharges,Churn\n"
            "0001-AAAAA,1,29.85,No\n"
            "0002-BBBBB,0, ,Yes\n"
            "0003-CCCCC,5,150.5,No\n",
            encoding="utf-8",
        )
        df = load_data(str(path))

        with check:
            assert df['TotalCharges'].isna().sum() == 1
        cleaned = clean_data(df)
        with check:
            assert len(cleaned) == 2
        with check:
            assert list(cleaned.columns) == [TARGET_COLUMN, 'tenure', 'TotalCharges']

    def test_missing_file_propagates_reader_error(self, tmp_path) -> None:
        with pytest.raises(FileNotFoundError):
            load_data(str(tmp_path / "nope.csv"))


class TestSplitData:
    """Seed-deterministic, disjoint, exhaustive 80/20 partition."""

    def test_train_size_is_ceiling_of_proportion(self) -> None:
        df = pd.DataFrame({TARGET_COLUMN: ['Yes', 'No'] * 5 + ['No'], 'x': range(11)})
        train_df, test_df = split_data(df, prop=0.8, random_state=1)
        with check:
            assert len(train_df) == 9
        with check:
            assert len(test_df) == 2

    def test_same_seed_gives_same_partition(self, cleaned_df) -> None:
        train_a, test_a = split_data(cleaned_df, random_state=123)
        train_b, test_b = split_data(cleaned_df, random_state=123)
        with check:
            assert list(train_a.index) == list(train_b.index)
        with check:
            assert list(test_a.index) == list(test_b.index)

    def test_different_seed_gives_different_partition(self, cleaned_df) -> None:
        train_a, _ = split_data(cleaned_df, random_state=1)
        train_b, _ = split_data(cleaned_df, random_state=2)
        assert set(train_a.index) != set(train_b.index)

    def test_partition_is_disjoint_and_reconstructs_table(self, cleaned_df, split) -> None:
        train_df, test_df = split
        with check:
            assert set(train_df.index).isdisjoint(test_df.index)
        rebuilt = pd.concat([train_df, test_df]).sort_index()
        pd.testing.assert_frame_equal(rebuilt, cleaned_df)

    @pytest.mark.parametrize("n_rows, n_train", [(1, 1), (2, 2), (3, 3), (4, 4), (5, 4)])
    def test_tiny_tables_split_without_error(self, n_rows, n_train) -> None:
        df = pd.DataFrame({TARGET_COLUMN: ['Yes'] * n_rows, 'x': range(n_rows)})
        train_df, test_df = split_data(df, prop=0.8, random_state=0)
        with check:
            assert len(train_df) == n_train
        with check:
            assert len(test_df) == n_rows - n_train
        with check:
            assert sorted(pd.concat([train_df, test_df])['x']) == list(range(n_rows))

    def test_empty_table_raises(self) -> None:
        with pytest.raises(ConfigurationError, match="empty"):
            split_data(pd.DataFrame({TARGET_COLUMN: [], 'x': []}))

    @pytest.mark.parametrize("prop", [0.0, 1.0, 1.5, -0.2])
    def test_invalid_proportion_raises(self, cleaned_df, prop) -> None:
        with pytest.raises(ConfigurationError):
            split_data(cleaned_df, prop=prop)


class TestEncodeTarget:
    """Target labels map to 1 for the positive class only."""

    def test_yes_maps_to_one(self) -> None:
        y = encode_target(pd.Series(['Yes', 'No', 'No', 'Yes']))
        np.testing.assert_array_equal(y, [1, 0, 0, 1])

    def test_explicit_positive_class(self) -> None:
        y = encode_target(pd.Series(['Yes', 'No']), positive_class='No')
        np.testing.assert_array_equal(y, [0, 1])
