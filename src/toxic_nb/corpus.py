"""Long-format token corpus loading.

A corpus file holds one row per token occurrence::

    document_id,token,label
    c1,you,toxic
    c1,idiot,toxic
    c2,thanks,non-toxic

Rows are joined into :class:`~toxic_nb.models.Document` objects keyed by
document id, in first-seen order. Labels come either from the ``label``
column or from a separate ratings file whose per-document sum is
thresholded. Cleaning and tokenization happen before this point.
"""

from __future__ import annotations

import csv
import logging
from collections import Counter
from collections.abc import Iterable, Mapping, Sequence
from pathlib import Path
from typing import Optional

from .errors import CorpusFormatError
from .models import Document, Label, TokenRecord

logger = logging.getLogger(__name__)

DEFAULT_MIN_TOKEN_COUNT = 5
DEFAULT_TOXICITY_THRESHOLD = 0.0

_TAB_SUFFIXES = (".tsv", ".tab")


def _delimiter_for(path: Path) -> str:
    return "\t" if path.suffix.lower() in _TAB_SUFFIXES else ","


def _open_rows(path: str | Path, required: Sequence[str]) -> Iterable[tuple[int, dict]]:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    with open(path, "r", encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f, delimiter=_delimiter_for(path))
        try:
            columns = reader.fieldnames or []
            missing = [c for c in required if c not in columns]
            if missing:
                raise CorpusFormatError(
                    f"{path.name}: missing column(s) {', '.join(missing)}; found {columns}"
                )
            # Header is line 1
            for line_no, row in enumerate(reader, start=2):
                yield line_no, row
        except UnicodeDecodeError as exc:
            raise CorpusFormatError(f"{path.name}: not valid UTF-8 text ({exc.reason})") from exc
        except csv.Error as exc:
            raise CorpusFormatError(f"{path.name}: line {reader.line_num}: {exc}") from exc


# ---------------------------------------------------------------------------
# Labels
# ---------------------------------------------------------------------------

def label_from_ratings(
    ratings: Iterable[float],
    threshold: float = DEFAULT_TOXICITY_THRESHOLD,
) -> Label:
    """Label a message from the sum of its human toxicity ratings.

    The message is toxic only when the sum is strictly below ``threshold``;
    a sum equal to the threshold is non-toxic.
    """
    return Label.TOXIC if sum(ratings) < threshold else Label.NON_TOXIC


def read_ratings(path: str | Path) -> dict[str, float]:
    """Sum the ``rating`` column per ``document_id``.

    Raises:
        FileNotFoundError: If the file does not exist.
        CorpusFormatError: If a column is missing or a rating is not numeric.
    """
    totals: dict[str, float] = {}
    for line_no, row in _open_rows(path, ("document_id", "rating")):
        try:
            value = float(row["rating"])
        except (TypeError, ValueError) as exc:
            raise CorpusFormatError(
                f"line {line_no}: invalid rating {row['rating']!r}"
            ) from exc
        doc_id = row["document_id"]
        totals[doc_id] = totals.get(doc_id, 0.0) + value
    return totals


def labels_from_ratings(
    totals: Mapping[str, float],
    threshold: float = DEFAULT_TOXICITY_THRESHOLD,
) -> dict[str, Label]:
    """Threshold pre-summed ratings into a ``document_id -> Label`` index."""
    return {doc_id: label_from_ratings([total], threshold) for doc_id, total in totals.items()}


# ---------------------------------------------------------------------------
# Token records
# ---------------------------------------------------------------------------

def read_token_records(path: str | Path) -> list[TokenRecord]:
    """Read a long-format corpus file (CSV, or TSV by suffix).

    The ``label`` column is optional; blank labels are read as unlabeled.

    Raises:
        FileNotFoundError: If the file does not exist.
        CorpusFormatError: If a required column is missing or a label is unknown.
    """
    records: list[TokenRecord] = []
    for line_no, row in _open_rows(path, ("document_id", "token")):
        raw_label = (row.get("label") or "").strip()
        try:
            label = Label.parse(raw_label) if raw_label else None
        except ValueError as exc:
            raise CorpusFormatError(f"line {line_no}: unknown label {raw_label!r}") from exc

        token = (row["token"] or "").strip()
        if not token:
            continue
        records.append(TokenRecord(document_id=row["document_id"], token=token, label=label))

    logger.info("Read %d token records from %s", len(records), Path(path).name)
    return records


def documents_from_records(
    records: Iterable[TokenRecord],
    labels: Optional[Mapping[str, Label]] = None,
) -> list[Document]:
    """Join token records into documents keyed by document id.

    Args:
        records: Token occurrences, in document order.
        labels: Optional ``document_id -> Label`` index that takes precedence
            over the labels carried on the records.

    Raises:
        CorpusFormatError: If the records of one document disagree on its label.
    """
    tokens: dict[str, list[str]] = {}
    record_labels: dict[str, Optional[Label]] = {}

    for rec in records:
        if rec.document_id not in tokens:
            tokens[rec.document_id] = []
            record_labels[rec.document_id] = rec.label
        elif rec.label is not None:
            seen = record_labels[rec.document_id]
            if seen is None:
                record_labels[rec.document_id] = rec.label
            elif seen != rec.label:
                raise CorpusFormatError(
                    f"Document {rec.document_id!r} has conflicting labels "
                    f"{seen.value!r} and {rec.label.value!r}"
                )
        tokens[rec.document_id].append(rec.token)

    index = labels or {}
    return [
        Document(
            document_id=doc_id,
            tokens=tuple(doc_tokens),
            label=index.get(doc_id, record_labels[doc_id]),
        )
        for doc_id, doc_tokens in tokens.items()
    ]


def filter_rare_tokens(
    documents: Sequence[Document],
    min_count: int = DEFAULT_MIN_TOKEN_COUNT,
) -> list[Document]:
    """Drop tokens whose corpus-wide frequency is below ``min_count``.

    Documents left without tokens are kept (empty) so callers can report them.
    """
    if min_count <= 1:
        return list(documents)

    counts: Counter[str] = Counter()
    for doc in documents:
        counts.update(doc.tokens)
    keep = {token for token, n in counts.items() if n >= min_count}

    filtered = [
        Document(
            document_id=doc.document_id,
            tokens=tuple(t for t in doc.tokens if t in keep),
            label=doc.label,
        )
        for doc in documents
    ]
    logger.debug("Kept %d of %d distinct tokens (min_count=%d)",
                 len(keep), len(counts), min_count)
    return filtered


def load_corpus(
    path: str | Path,
    ratings_path: str | Path | None = None,
    min_count: int = DEFAULT_MIN_TOKEN_COUNT,
    threshold: float = DEFAULT_TOXICITY_THRESHOLD,
) -> list[Document]:
    """Read, join, label and frequency-filter a corpus in one step."""
    labels = None
    if ratings_path is not None:
        labels = labels_from_ratings(read_ratings(ratings_path), threshold)
    documents = documents_from_records(read_token_records(path), labels)
    return filter_rare_tokens(documents, min_count)
