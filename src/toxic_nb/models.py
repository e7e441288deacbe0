"""Data models for toxic comment classification."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class Label(str, Enum):
    """Binary comment labels."""

    TOXIC = "toxic"
    NON_TOXIC = "non-toxic"

    @classmethod
    def parse(cls, value: str) -> "Label":
        """Parse a label from its value or a common alias (``1``/``0``)."""
        text = str(value).strip().lower()
        aliases = {
            "1": cls.TOXIC,
            "true": cls.TOXIC,
            "0": cls.NON_TOXIC,
            "false": cls.NON_TOXIC,
            "good": cls.NON_TOXIC,
            "non_toxic": cls.NON_TOXIC,
            "nontoxic": cls.NON_TOXIC,
        }
        if text in aliases:
            return aliases[text]
        return cls(text)


class MissingTokenPolicy(str, Enum):
    """How a token absent from a probability table is scored.

    ``SKIP_MISSING`` drops the token only from the class whose table lacks it.
    ``SKIP_UNSHARED`` drops it from both sums unless both tables have it.
    """

    SKIP_MISSING = "skip_missing"
    SKIP_UNSHARED = "skip_unshared"


@dataclass(frozen=True)
class TokenRecord:
    """One token occurrence in the long corpus layout."""

    document_id: str
    token: str
    label: Optional[Label] = None


@dataclass(frozen=True)
class Document:
    """A cleaned, tokenized message."""

    document_id: str
    tokens: tuple[str, ...] = ()
    label: Optional[Label] = None

    def __post_init__(self) -> None:
        # Accept any sequence but store an immutable tuple.
        if not isinstance(self.tokens, tuple):
            object.__setattr__(self, "tokens", tuple(self.tokens))

    @property
    def is_labeled(self) -> bool:
        return self.label is not None

    def __len__(self) -> int:
        return len(self.tokens)


@dataclass(frozen=True)
class Prediction:
    """Classifier output for a single document.

    ``score`` is the signed log-likelihood ratio; positive means toxic.
    """

    document_id: str
    label: Label
    score: float

    @property
    def is_toxic(self) -> bool:
        return self.label is Label.TOXIC

    def to_dict(self) -> dict:
        return {
            "document_id": self.document_id,
            "label": self.label.value,
            "score": round(self.score, 6),
        }


@dataclass(frozen=True)
class DocumentFailure:
    """A document that could not be scored within a batch."""

    document_id: str
    error: str

    def to_dict(self) -> dict:
        return {"document_id": self.document_id, "error": self.error}


@dataclass
class BatchResult:
    """Predictions for a batch, with per-document failures kept separate."""

    predictions: list[Prediction] = field(default_factory=list)
    failures: list[DocumentFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures

    @property
    def labels(self) -> dict[str, Label]:
        return {p.document_id: p.label for p in self.predictions}

    def __len__(self) -> int:
        return len(self.predictions) + len(self.failures)

    def to_dict(self) -> dict:
        return {
            "predictions": [p.to_dict() for p in self.predictions],
            "failures": [f.to_dict() for f in self.failures],
        }
