"""Naive Bayes log-likelihood-ratio classifier for toxic comments.

Scores a tokenized document against the toxic and non-toxic probability
tables of one training run::

    score = ln P(toxic) + sum(ln P(t | toxic)) - ln P(good) - sum(ln P(t | good))

A positive score labels the document toxic; zero and below label it
non-toxic. The tables are un-smoothed maximum-likelihood estimates, so the
handling of tokens missing from a table is an explicit
:class:`~toxic_nb.models.MissingTokenPolicy`.

Example::

    model = NaiveBayesModel.train(train_docs)
    prediction = model.predict(Document("c1", ("you", "idiot")))
    print(prediction.label, prediction.score)
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Optional

from .errors import EmptyDocumentError
from .models import (
    BatchResult,
    Document,
    DocumentFailure,
    Label,
    MissingTokenPolicy,
    Prediction,
)
from .splitting import compute_priors, group_by_class
from .tables import (
    ProbabilityTable,
    build_frequency_table,
    derive_probabilities,
    rank_words,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Scoring
# ---------------------------------------------------------------------------

def _check_prior(name: str, prior: float) -> None:
    if not 0.0 < prior < 1.0:
        raise ValueError(f"{name} must be in (0, 1), got {prior}")


def log_likelihood_ratio(
    tokens: Iterable[str],
    table_toxic: ProbabilityTable,
    table_good: ProbabilityTable,
    prior_toxic: float,
    prior_good: float,
    policy: MissingTokenPolicy = MissingTokenPolicy.SKIP_MISSING,
) -> float:
    """Compute the signed decision score for a token sequence."""
    _check_prior("prior_toxic", prior_toxic)
    _check_prior("prior_good", prior_good)

    toxic_sum = 0.0
    good_sum = 0.0
    for token in tokens:
        in_toxic = token in table_toxic
        in_good = token in table_good
        if policy is MissingTokenPolicy.SKIP_UNSHARED and not (in_toxic and in_good):
            continue
        if in_toxic:
            toxic_sum += table_toxic[token]
        if in_good:
            good_sum += table_good[token]

    return (math.log(prior_toxic) + toxic_sum) - (math.log(prior_good) + good_sum)


def classify(
    document: Document,
    table_toxic: ProbabilityTable,
    table_good: ProbabilityTable,
    prior_toxic: float,
    prior_good: float,
    policy: MissingTokenPolicy = MissingTokenPolicy.SKIP_MISSING,
) -> Prediction:
    """Label a single document as toxic or non-toxic.

    Args:
        document: Tokenized document (its label, if any, is ignored).
        table_toxic: Probability table of the toxic class.
        table_good: Probability table of the non-toxic class.
        prior_toxic: P(toxic), in (0, 1).
        prior_good: P(non-toxic), in (0, 1).
        policy: Treatment of tokens missing from a table.

    Returns:
        Prediction carrying the score; ``score > 0`` is toxic.

    Raises:
        EmptyDocumentError: If the document has no tokens.
        ValueError: If a prior is outside (0, 1).
    """
    if not document.tokens:
        raise EmptyDocumentError(document.document_id)

    score = log_likelihood_ratio(
        document.tokens, table_toxic, table_good, prior_toxic, prior_good, policy
    )
    label = Label.TOXIC if score > 0 else Label.NON_TOXIC
    return Prediction(document_id=document.document_id, label=label, score=score)


def classify_batch(
    documents: Iterable[Document],
    table_toxic: ProbabilityTable,
    table_good: ProbabilityTable,
    prior_toxic: float,
    prior_good: float,
    policy: MissingTokenPolicy = MissingTokenPolicy.SKIP_MISSING,
) -> BatchResult:
    """Classify documents one at a time.

    Empty documents are reported as failures; the rest of the batch is
    still scored.
    """
    _check_prior("prior_toxic", prior_toxic)
    _check_prior("prior_good", prior_good)

    result = BatchResult()
    for doc in documents:
        try:
            prediction = classify(doc, table_toxic, table_good, prior_toxic, prior_good, policy)
        except EmptyDocumentError as exc:
            logger.warning("Skipping document %r: %s", doc.document_id, exc)
            result.failures.append(DocumentFailure(doc.document_id, str(exc)))
            continue
        result.predictions.append(prediction)
    return result


# ---------------------------------------------------------------------------
# Trained model
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class NaiveBayesModel:
    """Probability tables and priors from one training run.

    Attributes:
        table_toxic: Log-probabilities of the toxic class.
        table_good: Log-probabilities of the non-toxic class.
        prior_toxic: Training share of toxic documents.
        prior_good: Training share of non-toxic documents.
        policy: Missing-token policy used when scoring.
    """

    table_toxic: ProbabilityTable
    table_good: ProbabilityTable
    prior_toxic: float
    prior_good: float
    policy: MissingTokenPolicy = MissingTokenPolicy.SKIP_MISSING

    @classmethod
    def train(
        cls,
        documents: Sequence[Document],
        policy: MissingTokenPolicy = MissingTokenPolicy.SKIP_MISSING,
    ) -> "NaiveBayesModel":
        """Build both probability tables and priors from labeled documents.

        Raises:
            DegenerateClassError: If either class has no documents or tokens.
            ValueError: If a document is unlabeled.
        """
        groups = group_by_class(documents)
        prior_toxic, prior_good = compute_priors(documents)

        tables: dict[Label, ProbabilityTable] = {}
        for label in Label:
            freq = build_frequency_table(groups[label], target_class=label)
            tables[label] = derive_probabilities(freq)

        logger.info(
            "Trained on %d documents (%d toxic, %d non-toxic); vocabulary %d / %d",
            len(documents),
            len(groups[Label.TOXIC]),
            len(groups[Label.NON_TOXIC]),
            len(tables[Label.TOXIC]),
            len(tables[Label.NON_TOXIC]),
        )
        return cls(
            table_toxic=tables[Label.TOXIC],
            table_good=tables[Label.NON_TOXIC],
            prior_toxic=prior_toxic,
            prior_good=prior_good,
            policy=policy,
        )

    @property
    def vocabulary(self) -> set[str]:
        return set(self.table_toxic) | set(self.table_good)

    def score(self, document: Document) -> float:
        return self.predict(document).score

    def predict(self, document: Document) -> Prediction:
        return classify(
            document,
            self.table_toxic,
            self.table_good,
            self.prior_toxic,
            self.prior_good,
            self.policy,
        )

    def predict_batch(self, documents: Iterable[Document]) -> BatchResult:
        return classify_batch(
            documents,
            self.table_toxic,
            self.table_good,
            self.prior_toxic,
            self.prior_good,
            self.policy,
        )

    def rank_words(
        self,
        top_n: Optional[int] = 20,
        min_count: int = 1,
        descending: bool = False,
    ) -> list[tuple[str, float]]:
        """Most toxic-indicative tokens first (or most benign if descending)."""
        return rank_words(
            self.table_toxic,
            self.table_good,
            min_count=min_count,
            top_n=top_n,
            descending=descending,
        )

    def to_dict(self) -> dict:
        return {
            "policy": self.policy.value,
            "prior_toxic": self.prior_toxic,
            "prior_good": self.prior_good,
            "table_toxic": self.table_toxic.to_dict(),
            "table_good": self.table_good.to_dict(),
        }

