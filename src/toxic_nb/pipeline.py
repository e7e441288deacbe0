"""End-to-end training and evaluation.

Wires the pieces together as explicit function calls: split the labeled
corpus per class, train on the train partition, classify the test
partition and build the confusion matrix.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Optional

from .classifier import NaiveBayesModel
from .config import Settings
from .evaluation import ClassificationMetrics, evaluate_batch
from .models import BatchResult, Document, MissingTokenPolicy
from .splitting import Split, stratified_k_fold, train_test_split

logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    """Everything produced by one training run."""

    split: Split
    model: NaiveBayesModel
    batch: BatchResult
    metrics: ClassificationMetrics

    def to_dict(self) -> dict:
        return {
            "train_size": len(self.split.train),
            "test_size": len(self.split.test),
            "prior_toxic": self.model.prior_toxic,
            "prior_good": self.model.prior_good,
            "policy": self.model.policy.value,
            "metrics": self.metrics.to_dict(),
            "failures": [f.to_dict() for f in self.batch.failures],
        }


def run_pipeline(
    documents: Sequence[Document],
    settings: Optional[Settings] = None,
    rng: Optional[random.Random] = None,
) -> PipelineResult:
    """Split, train, predict and evaluate.

    Args:
        documents: Labeled, already filtered documents.
        settings: Split ratio, seed and scoring policy.
        rng: Random source for the split; overrides ``settings.seed``.

    Raises:
        DegenerateClassError: If a class is empty in the training partition.
    """
    settings = settings or Settings()
    seed = None if rng is not None else settings.seed

    split = train_test_split(documents, test_ratio=settings.test_ratio, seed=seed, rng=rng)
    model = NaiveBayesModel.train(split.train, policy=settings.policy)
    batch = model.predict_batch(split.test)
    metrics = evaluate_batch(split.test, batch)

    if batch.failures:
        logger.warning("%d of %d test documents could not be scored",
                       len(batch.failures), len(split.test))
    logger.info("Test accuracy %.4f over %d documents", metrics.accuracy, metrics.total)
    return PipelineResult(split=split, model=model, batch=batch, metrics=metrics)


def cross_validate(
    documents: Sequence[Document],
    k: int = 5,
    seed: Optional[int] = 42,
    policy: MissingTokenPolicy = MissingTokenPolicy.SKIP_MISSING,
) -> list[ClassificationMetrics]:
    """Run stratified k-fold cross-validation.

    Returns:
        List of ClassificationMetrics (one per fold).
    """
    labels = []
    for doc in documents:
        if doc.label is None:
            raise ValueError(f"Document {doc.document_id!r} has no label")
        labels.append(doc.label)

    results: list[ClassificationMetrics] = []
    for fold, (train_idx, test_idx) in enumerate(stratified_k_fold(labels, k=k, seed=seed)):
        train_docs = [documents[i] for i in train_idx]
        test_docs = [documents[i] for i in test_idx]

        model = NaiveBayesModel.train(train_docs, policy=policy)
        metrics = evaluate_batch(test_docs, model.predict_batch(test_docs))
        logger.debug("Fold %d: accuracy %.4f", fold, metrics.accuracy)
        results.append(metrics)

    return results
