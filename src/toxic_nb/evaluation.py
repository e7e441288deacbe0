"""Evaluation of predicted labels against ground truth."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from .models import BatchResult, Document, Label

_OPPOSITE = {Label.TOXIC: Label.NON_TOXIC, Label.NON_TOXIC: Label.TOXIC}


def _empty_matrix() -> dict[str, dict[str, int]]:
    return {actual.value: {pred.value: 0 for pred in Label} for actual in Label}


@dataclass
class ClassificationMetrics:
    """Confusion matrix of a toxic/non-toxic run and the scores derived from it.

    ``confusion_matrix`` maps ``actual -> predicted -> count`` and always
    holds both labels on both axes.
    """

    accuracy: float = 0.0
    per_class: dict[str, dict[str, float]] = field(default_factory=dict)
    macro_f1: float = 0.0
    weighted_f1: float = 0.0
    confusion_matrix: dict[str, dict[str, int]] = field(default_factory=_empty_matrix)

    @property
    def support(self) -> dict[str, int]:
        """Documents per actual label (row sums)."""
        return {actual: sum(row.values()) for actual, row in self.confusion_matrix.items()}

    @property
    def total(self) -> int:
        return sum(self.support.values())

    @property
    def correct(self) -> int:
        return sum(self.confusion_matrix[c][c] for c in self.confusion_matrix)

    def to_dict(self) -> dict:
        return {
            "accuracy": round(self.accuracy, 4),
            "macro_f1": round(self.macro_f1, 4),
            "weighted_f1": round(self.weighted_f1, 4),
            "per_class": {
                cls: {k: round(v, 4) for k, v in scores.items()}
                for cls, scores in self.per_class.items()
            },
            "confusion_matrix": self.confusion_matrix,
            "support": self.support,
        }

    def summary(self) -> str:
        support = self.support
        rows = [
            f"Accuracy: {self.accuracy:.2%} ({self.correct}/{self.total})",
            f"Macro F1: {self.macro_f1:.4f}   Weighted F1: {self.weighted_f1:.4f}",
            "",
            f"{'':<10} {'precision':>9} {'recall':>9} {'f1':>9} {'docs':>6}",
        ]
        for label in Label:
            scores = self.per_class.get(label.value, {})
            rows.append(
                f"{label.value:<10} {scores.get('precision', 0.0):>9.4f} "
                f"{scores.get('recall', 0.0):>9.4f} {scores.get('f1', 0.0):>9.4f} "
                f"{support.get(label.value, 0):>6}"
            )
        return "\n".join(rows)


def _ratio(num: int, den: int) -> float:
    return num / den if den else 0.0


def compute_metrics(
    y_true: Sequence[Label],
    y_pred: Sequence[Label],
) -> ClassificationMetrics:
    """Build the 2×2 confusion matrix and score each label against the other.

    Labels may be given as :class:`Label` members or their string values.

    Raises:
        ValueError: If the sequences differ in length.
    """
    if len(y_true) != len(y_pred):
        raise ValueError("y_true and y_pred must have the same length")

    cm = _empty_matrix()
    for true, pred in zip(y_true, y_pred):
        cm[Label(true).value][Label(pred).value] += 1

    per_class: dict[str, dict[str, float]] = {}
    for label in Label:
        cls, other = label.value, _OPPOSITE[label].value
        tp = cm[cls][cls]
        precision = _ratio(tp, tp + cm[other][cls])
        recall = _ratio(tp, tp + cm[cls][other])
        f1 = 2 * precision * recall / (precision + recall) if precision + recall else 0.0
        per_class[cls] = {"precision": precision, "recall": recall, "f1": f1}

    n = len(y_true)
    toxic_f1 = per_class[Label.TOXIC.value]["f1"]
    good_f1 = per_class[Label.NON_TOXIC.value]["f1"]
    n_toxic = sum(cm[Label.TOXIC.value].values())

    return ClassificationMetrics(
        accuracy=_ratio(sum(cm[c][c] for c in cm), n),
        per_class=per_class,
        macro_f1=(toxic_f1 + good_f1) / 2,
        weighted_f1=(toxic_f1 * n_toxic + good_f1 * (n - n_toxic)) / n if n else 0.0,
        confusion_matrix=cm,
    )


def evaluate_batch(documents: Sequence[Document], batch: BatchResult) -> ClassificationMetrics:
    """Join predictions back to their labeled documents by id and score them.

    Documents that failed to classify are left out of the metrics.

    Raises:
        ValueError: If a predicted document is unknown or unlabeled.
    """
    truth = {doc.document_id: doc.label for doc in documents}
    y_true: list[Label] = []
    y_pred: list[Label] = []
    for prediction in batch.predictions:
        label = truth.get(prediction.document_id)
        if label is None:
            raise ValueError(f"No ground-truth label for document {prediction.document_id!r}")
        y_true.append(label)
        y_pred.append(prediction.label)
    return compute_metrics(y_true, y_pred)
