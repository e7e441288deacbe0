"""Per-class word frequency and log-probability tables.

A :class:`FrequencyTable` is a pure fold of token counts over the training
documents of one class. A :class:`ProbabilityTable` turns those counts into
maximum-likelihood log-probabilities ``ln(n_i / N)`` with no smoothing, so a
token never seen in a class simply has no entry in that class's table.

Both tables are read-only mappings. Rebuild them rather than updating them.
"""

from __future__ import annotations

import logging
import math
from collections import Counter
from collections.abc import Iterable, Iterator, Mapping
from types import MappingProxyType
from typing import Optional

from .errors import DegenerateClassError
from .models import Document, Label

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Frequency Table
# ---------------------------------------------------------------------------

class FrequencyTable(Mapping):
    """Read-only mapping of token to occurrence count for one class."""

    __slots__ = ("_counts", "_total", "label")

    def __init__(self, counts: Mapping[str, int], label: Optional[Label] = None) -> None:
        for token, count in counts.items():
            if count < 0:
                raise ValueError(f"Negative count for token {token!r}: {count}")
        self._counts = MappingProxyType(dict(counts))
        self._total = sum(self._counts.values())
        self.label = label

    @property
    def total(self) -> int:
        """Total word count N_c of the class."""
        return self._total

    def __getitem__(self, token: str) -> int:
        return self._counts[token]

    def __iter__(self) -> Iterator[str]:
        return iter(self._counts)

    def __len__(self) -> int:
        return len(self._counts)

    def most_common(self, n: Optional[int] = None) -> list[tuple[str, int]]:
        return Counter(self._counts).most_common(n)

    def __repr__(self) -> str:
        name = self.label.value if self.label else None
        return f"FrequencyTable(label={name!r}, tokens={len(self)}, total={self.total})"


def build_frequency_table(
    documents: Iterable[Document],
    target_class: Optional[Label] = None,
) -> FrequencyTable:
    """Count every token across a set of same-class documents.

    Args:
        documents: Training documents, already filtered to ``target_class``.
        target_class: Class the documents belong to. When given, a document
            carrying a different label is rejected.

    Returns:
        FrequencyTable with the exact count of every token seen. An empty
        input produces an empty table.

    Raises:
        ValueError: If a document's label does not match ``target_class``.
    """
    counts: Counter[str] = Counter()
    n_docs = 0
    for doc in documents:
        if target_class is not None and doc.label is not None and doc.label != target_class:
            raise ValueError(
                f"Document {doc.document_id!r} is labeled {doc.label.value!r}, "
                f"expected {target_class.value!r}"
            )
        counts.update(doc.tokens)
        n_docs += 1

    table = FrequencyTable(counts, label=target_class)
    logger.debug("Built %r from %d documents", table, n_docs)
    return table


# ---------------------------------------------------------------------------
# Probability Table
# ---------------------------------------------------------------------------

class ProbabilityTable(Mapping):
    """Read-only mapping of token to ``ln(n_i / N)`` for one class."""

    __slots__ = ("_log_probs", "frequencies")

    def __init__(self, log_probs: Mapping[str, float], frequencies: FrequencyTable) -> None:
        self._log_probs = MappingProxyType(dict(log_probs))
        self.frequencies = frequencies

    @property
    def label(self) -> Optional[Label]:
        return self.frequencies.label

    @property
    def total(self) -> int:
        return self.frequencies.total

    def count(self, token: str) -> int:
        """Training count of ``token`` in this class (0 if unseen)."""
        return self.frequencies.get(token, 0)

    def __getitem__(self, token: str) -> float:
        return self._log_probs[token]

    def __iter__(self) -> Iterator[str]:
        return iter(self._log_probs)

    def __len__(self) -> int:
        return len(self._log_probs)

    def to_dict(self) -> dict:
        return {
            "label": self.label.value if self.label else None,
            "total": self.total,
            "log_probs": dict(self._log_probs),
        }

    def __repr__(self) -> str:
        name = self.label.value if self.label else None
        return f"ProbabilityTable(label={name!r}, tokens={len(self)})"


def derive_probabilities(freq_table: FrequencyTable) -> ProbabilityTable:
    """Estimate per-token log-probabilities from a frequency table.

    Raises:
        DegenerateClassError: If the table holds no tokens (N = 0).
    """
    total = freq_table.total
    if total == 0:
        raise DegenerateClassError(freq_table.label)

    log_probs = {token: math.log(n / total) for token, n in freq_table.items() if n > 0}
    return ProbabilityTable(log_probs, freq_table)


# ---------------------------------------------------------------------------
# Word ranking
# ---------------------------------------------------------------------------

def rank_words(
    table_toxic: ProbabilityTable,
    table_good: ProbabilityTable,
    min_count: int = 1,
    top_n: Optional[int] = None,
    descending: bool = False,
) -> list[tuple[str, float]]:
    """Rank tokens by ``logprob_toxic / logprob_good``.

    The ratio is taken between the two (negative) log-probabilities as-is.
    A token that is relatively more frequent in toxic comments has a toxic
    log-probability closer to zero, so ascending order lists the most
    toxic-indicative tokens first and descending order the most benign.

    Only tokens present in both tables with a count greater than
    ``min_count`` in each class are ranked. Tokens whose non-toxic
    log-probability is exactly zero have no defined ratio and are skipped.

    Args:
        table_toxic: Probability table of the toxic class.
        table_good: Probability table of the non-toxic class.
        min_count: Exclusive lower bound on per-class counts.
        top_n: Number of tokens to return (all when ``None``).
        descending: Sort from largest to smallest ratio.

    Returns:
        List of (token, ratio) tuples, ties broken alphabetically.

    Raises:
        ValueError: If ``top_n`` is negative.
    """
    if top_n is not None and top_n < 0:
        raise ValueError(f"top_n must be non-negative, got {top_n}")

    ratios: list[tuple[str, float]] = []
    for token, lp_toxic in table_toxic.items():
        if token not in table_good:
            continue
        if table_toxic.count(token) <= min_count or table_good.count(token) <= min_count:
            continue
        lp_good = table_good[token]
        if lp_good == 0.0:
            continue
        ratios.append((token, lp_toxic / lp_good))

    ratios.sort(key=lambda x: ((-x[1] if descending else x[1]), x[0]))
    return ratios[:top_n] if top_n is not None else ratios
