"""Train/test partitioning and class priors.

Splits are applied independently within each class so both partitions keep
the class balance of the corpus. Randomness always comes from an explicit
``random.Random`` (or a seed used to build one).
"""

from __future__ import annotations

import logging
import random
from collections import defaultdict
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Optional

from .errors import DegenerateClassError
from .models import Document, Label

logger = logging.getLogger(__name__)


@dataclass
class Split:
    """Train and test partitions of a labeled corpus."""

    train: list[Document] = field(default_factory=list)
    test: list[Document] = field(default_factory=list)

    def train_by_class(self, label: Label) -> list[Document]:
        return [d for d in self.train if d.label == label]

    def test_by_class(self, label: Label) -> list[Document]:
        return [d for d in self.test if d.label == label]


def _make_rng(seed: Optional[int], rng: Optional[random.Random]) -> random.Random:
    if rng is not None and seed is not None:
        raise ValueError("Pass either seed or rng, not both")
    return rng if rng is not None else random.Random(seed)


def group_by_class(documents: Sequence[Document]) -> dict[Label, list[Document]]:
    """Partition labeled documents by class, preserving input order.

    Raises:
        ValueError: If a document has no label.
    """
    groups: dict[Label, list[Document]] = {label: [] for label in Label}
    for doc in documents:
        if doc.label is None:
            raise ValueError(f"Document {doc.document_id!r} has no label")
        groups[doc.label].append(doc)
    return groups


def train_test_split(
    documents: Sequence[Document],
    test_ratio: float = 0.2,
    seed: Optional[int] = None,
    rng: Optional[random.Random] = None,
) -> Split:
    """Split labeled documents into train and test sets within each class.

    Each class is sampled uniformly at random without replacement; the test
    share of a class of size ``n`` is ``round(n * test_ratio)`` documents.

    Args:
        documents: Labeled documents.
        test_ratio: Fraction of each class held out for testing, in [0, 1).
        seed: Seed for a fresh ``random.Random``.
        rng: Random source to draw from (mutually exclusive with ``seed``).

    Returns:
        Split with train and test documents in their original corpus order.
    """
    if not 0.0 <= test_ratio < 1.0:
        raise ValueError("test_ratio must be in [0, 1)")
    source = _make_rng(seed, rng)

    test_ids: set[int] = set()
    index_by_class: dict[Label, list[int]] = defaultdict(list)
    for idx, doc in enumerate(documents):
        if doc.label is None:
            raise ValueError(f"Document {doc.document_id!r} has no label")
        index_by_class[doc.label].append(idx)

    # Iterate classes in a fixed order so a seed always reproduces a split.
    for label in Label:
        indices = index_by_class.get(label, [])
        n_test = round(len(indices) * test_ratio)
        test_ids.update(source.sample(indices, n_test))

    split = Split(
        train=[d for i, d in enumerate(documents) if i not in test_ids],
        test=[d for i, d in enumerate(documents) if i in test_ids],
    )
    logger.info("Split %d documents into %d train / %d test",
                len(documents), len(split.train), len(split.test))
    return split


def compute_priors(documents: Sequence[Document]) -> tuple[float, float]:
    """Estimate (prior_toxic, prior_good) from training document counts.

    Raises:
        DegenerateClassError: If either class has no documents.
    """
    groups = group_by_class(documents)
    n_total = len(documents)
    for label in Label:
        if not groups[label]:
            raise DegenerateClassError(label, f"No training documents for class {label.value!r}")

    prior_toxic = len(groups[Label.TOXIC]) / n_total
    prior_good = len(groups[Label.NON_TOXIC]) / n_total
    return prior_toxic, prior_good


def stratified_k_fold(
    labels: Sequence[Label],
    k: int = 5,
    seed: Optional[int] = 42,
) -> list[tuple[list[int], list[int]]]:
    """Generate stratified k-fold train/test index splits.

    Each fold has approximately the same class distribution as the full
    dataset.

    Returns:
        List of (train_indices, test_indices) tuples.
    """
    if k < 2:
        raise ValueError("k must be at least 2")
    rng = random.Random(seed)

    class_indices: dict[Label, list[int]] = defaultdict(list)
    for idx, label in enumerate(labels):
        class_indices[label].append(idx)

    for label in Label:
        rng.shuffle(class_indices[label])

    # Round-robin within class
    fold_assignments: list[int] = [0] * len(labels)
    for label in Label:
        for i, idx in enumerate(class_indices[label]):
            fold_assignments[idx] = i % k

    folds: list[tuple[list[int], list[int]]] = []
    for fold_idx in range(k):
        test_indices = [i for i, f in enumerate(fold_assignments) if f == fold_idx]
        train_indices = [i for i, f in enumerate(fold_assignments) if f != fold_idx]
        folds.append((train_indices, test_indices))

    return folds
