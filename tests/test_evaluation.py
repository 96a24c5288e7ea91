"""Tests for the classification metrics."""

import numpy as np
import pytest
from pytest_check import check

from churnnet.config import ConfigurationError
from churnnet.evaluation import (
    confusion_matrix_counts,
    confusion_matrix_table,
    evaluate_predictions,
    f1_score,
    precision,
    recall,
    roc_auc,
)


Y_TRUE = np.array([1, 1, 1, 0, 0, 0, 0, 1])
Y_PRED = np.array([1, 0, 1, 0, 1, 0, 0, 1])


class TestConfusionMatrix:
    """Counts with an explicit positive class."""

    def test_counts_for_known_predictions(self) -> None:
        counts = confusion_matrix_counts(Y_TRUE, Y_PRED)
        assert counts == {
            'true_negatives': 3,
            'false_positives': 1,
            'false_negatives': 1,
            'true_positives': 3,
        }

    def test_counts_sum_to_number_of_rows(self) -> None:
        rng = np.random.RandomState(0)
        y_true, y_pred = rng.randint(0, 2, 500), rng.randint(0, 2, 500)
        assert sum(confusion_matrix_counts(y_true, y_pred).values()) == 500

    def test_string_labels_use_declared_positive_class(self) -> None:
        y_true = np.array(['Yes', 'Yes', 'No', 'No', 'No'])
        y_pred = np.array(['Yes', 'No', 'No', 'No', 'Yes'])
        as_yes = confusion_matrix_counts(y_true, y_pred, positive_label='Yes', negative_label='No')
        as_no = confusion_matrix_counts(y_true, y_pred, positive_label='No', negative_label='Yes')

        with check:
            assert as_yes['true_positives'] == 1
        with check:
            assert as_yes['true_negatives'] == 2
        # Swapping polarity swaps the roles of the cells
        with check:
            assert as_no['true_positives'] == as_yes['true_negatives']
        with check:
            assert as_no['false_positives'] == as_yes['false_negatives']

    def test_table_layout_puts_positive_class_first(self) -> None:
        table = confusion_matrix_table(Y_TRUE, Y_PRED)
        with check:
            assert list(table.index) == [1, 0]
        with check:
            assert table.loc[1, 1] == 3
        with check:
            assert table.loc[0, 1] == 1
        with check:
            assert table.values.sum() == len(Y_TRUE)


class TestRatioMetrics:
    """Precision, recall and F1 from counts."""

    def test_known_values(self) -> None:
        counts = confusion_matrix_counts(Y_TRUE, Y_PRED)
        with check:
            assert precision(counts) == pytest.approx(0.75)
        with check:
            assert recall(counts) == pytest.approx(0.75)
        with check:
            assert f1_score(counts) == pytest.approx(0.75)

    @pytest.mark.parametrize("seed", range(5))
    def test_bounds_and_harmonic_mean(self, seed) -> None:
        rng = np.random.RandomState(seed)
        counts = confusion_matrix_counts(rng.randint(0, 2, 200), rng.randint(0, 2, 200))
        p, r, f = precision(counts), recall(counts), f1_score(counts)
        for value in (p, r, f):
            with check:
                assert 0.0 <= value <= 1.0
        if p + r > 0:
            assert f == pytest.approx(2 * p * r / (p + r))

    def test_no_predicted_positives_gives_zero_precision(self) -> None:
        counts = confusion_matrix_counts([1, 0, 1], [0, 0, 0])
        with check:
            assert precision(counts) == 0.0
        with check:
            assert f1_score(counts) == 0.0


class TestRocAuc:
    """AUC bounds and sanity values."""

    def test_perfect_ranking(self) -> None:
        assert roc_auc([0, 0, 1, 1], [0.1, 0.2, 0.8, 0.9]) == pytest.approx(1.0)

    def test_inverted_ranking(self) -> None:
        assert roc_auc([0, 0, 1, 1], [0.9, 0.8, 0.2, 0.1]) == pytest.approx(0.0)

    def test_pure_noise_is_near_one_half(self) -> None:
        rng = np.random.RandomState(42)
        y_true = rng.randint(0, 2, 20_000)
        y_proba = rng.uniform(size=20_000)
        assert roc_auc(y_true, y_proba) == pytest.approx(0.5, abs=0.02)

    def test_string_truth_with_explicit_positive(self) -> None:
        assert roc_auc(['No', 'Yes'], [0.3, 0.7], positive_label='Yes') == pytest.approx(1.0)

    @pytest.mark.parametrize("y_true", [[1, 1, 1], [0, 0], []])
    def test_single_class_truth_raises(self, y_true) -> None:
        with pytest.raises(ConfigurationError, match="both classes"):
            roc_auc(y_true, np.linspace(0, 1, len(y_true)))

    def test_single_class_truth_aborts_evaluation(self) -> None:
        with pytest.raises(ConfigurationError):
            evaluate_predictions([0, 0, 0], [0, 1, 0], [0.2, 0.6, 0.1])


class TestEvaluatePredictions:
    """The combined metric dictionary is internally consistent."""

    def test_metrics_agree_with_confusion_matrix(self) -> None:
        y_proba = np.array([0.9, 0.4, 0.7, 0.2, 0.6, 0.1, 0.3, 0.8])
        metrics = evaluate_predictions(Y_TRUE, Y_PRED, y_proba)
        cm = metrics['confusion_matrix']
        tp, fp, fn, tn = (cm['true_positives'], cm['false_positives'],
                          cm['false_negatives'], cm['true_negatives'])

        with check:
            assert metrics['n_samples'] == len(Y_TRUE)
        with check:
            assert metrics['accuracy'] == pytest.approx((tp + tn) / len(Y_TRUE))
        with check:
            assert metrics['precision'] == pytest.approx(tp / (tp + fp))
        with check:
            assert metrics['recall'] == pytest.approx(tp / (tp + fn))
        with check:
            assert 0.0 <= metrics['roc_auc'] <= 1.0
