"""Tests for the confusion matrix and classification metrics."""

from __future__ import annotations

import pytest

from toxic_nb.evaluation import ClassificationMetrics, compute_metrics, evaluate_batch
from toxic_nb.models import BatchResult, Document, DocumentFailure, Label, Prediction

T = Label.TOXIC
N = Label.NON_TOXIC


class TestComputeMetrics:
    """Tests for compute_metrics."""

    def test_perfect_predictions(self):
        y = [T, N, T, N]
        m = compute_metrics(y, y)
        assert m.accuracy == 1.0
        assert m.macro_f1 == 1.0
        assert m.per_class["toxic"]["precision"] == 1.0

    def test_confusion_matrix_cells(self):
        y_true = [T, T, T, N, N]
        y_pred = [T, N, T, N, T]
        m = compute_metrics(y_true, y_pred)
        assert m.confusion_matrix == {
            "toxic": {"toxic": 2, "non-toxic": 1},
            "non-toxic": {"toxic": 1, "non-toxic": 1},
        }
        assert m.total == 5
        assert m.correct == 3
        assert m.accuracy == pytest.approx(0.6)

    def test_cells_sum_to_document_count(self):
        y_true = [T, N, N, N, T, T, N]
        y_pred = [N, N, T, N, T, N, N]
        m = compute_metrics(y_true, y_pred)
        assert sum(sum(row.values()) for row in m.confusion_matrix.values()) == len(y_true)

    def test_matrix_always_has_both_labels(self):
        m = compute_metrics([N, N], [N, N])
        assert set(m.confusion_matrix) == {"toxic", "non-toxic"}
        assert m.confusion_matrix["toxic"] == {"toxic": 0, "non-toxic": 0}
        assert m.support == {"toxic": 0, "non-toxic": 2}

    def test_precision_recall_f1(self):
        y_true = [T, T, T, T, N, N, N, N]
        y_pred = [T, T, T, N, T, N, N, N]
        m = compute_metrics(y_true, y_pred)
        assert m.per_class["toxic"]["precision"] == pytest.approx(0.75)
        assert m.per_class["toxic"]["recall"] == pytest.approx(0.75)
        assert m.per_class["toxic"]["f1"] == pytest.approx(0.75)
        assert m.weighted_f1 == pytest.approx(0.75)

    def test_macro_and_weighted_f1_with_unequal_support(self):
        y_true = [T, T, T, N]
        y_pred = [T, T, N, N]
        m = compute_metrics(y_true, y_pred)
        toxic_f1 = 2 * 1.0 * (2 / 3) / (1.0 + 2 / 3)
        good_f1 = 2 * 0.5 * 1.0 / 1.5
        assert m.per_class["toxic"]["f1"] == pytest.approx(toxic_f1)
        assert m.per_class["non-toxic"]["f1"] == pytest.approx(good_f1)
        assert m.macro_f1 == pytest.approx((toxic_f1 + good_f1) / 2)
        assert m.weighted_f1 == pytest.approx((3 * toxic_f1 + good_f1) / 4)
        assert m.support == {"toxic": 3, "non-toxic": 1}

    def test_accepts_string_labels(self):
        m = compute_metrics(["toxic", "non-toxic"], [T, N])
        assert m.accuracy == 1.0

    def test_empty_input(self):
        m = compute_metrics([], [])
        assert m.accuracy == 0.0
        assert m.total == 0

    def test_length_mismatch(self):
        with pytest.raises(ValueError, match="same length"):
            compute_metrics([T], [T, N])

    def test_summary_and_to_dict(self):
        m = compute_metrics([T, N], [T, T])
        assert "Accuracy: 50.00%" in m.summary()
        data = m.to_dict()
        assert data["accuracy"] == 0.5
        assert data["confusion_matrix"]["non-toxic"]["toxic"] == 1

    def test_default_metrics(self):
        assert ClassificationMetrics().total == 0
        assert set(ClassificationMetrics().confusion_matrix) == {"toxic", "non-toxic"}


class TestEvaluateBatch:
    """Tests for joining predictions back to labeled documents."""

    def test_joins_by_document_id(self):
        docs = [Document("a", ("x",), T), Document("b", ("y",), N)]
        batch = BatchResult(predictions=[
            Prediction("b", N, -1.0),
            Prediction("a", N, -0.5),
        ])
        m = evaluate_batch(docs, batch)
        assert m.confusion_matrix["toxic"]["non-toxic"] == 1
        assert m.confusion_matrix["non-toxic"]["non-toxic"] == 1

    def test_failures_are_excluded(self):
        docs = [Document("a", ("x",), T), Document("b", (), N)]
        batch = BatchResult(
            predictions=[Prediction("a", T, 2.0)],
            failures=[DocumentFailure("b", "empty")],
        )
        m = evaluate_batch(docs, batch)
        assert m.total == 1
        assert m.accuracy == 1.0

    def test_unknown_document_rejected(self):
        with pytest.raises(ValueError, match="'zzz'"):
            evaluate_batch([], BatchResult(predictions=[Prediction("zzz", T, 1.0)]))
