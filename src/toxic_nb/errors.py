"""Exceptions raised by the toxic comment classifier."""

from __future__ import annotations


class ToxicNBError(Exception):
    """Base class for all classifier errors."""


class DegenerateClassError(ToxicNBError, ValueError):
    """A class has no training data, so its distribution cannot be estimated."""

    def __init__(self, label: object = None, message: str | None = None) -> None:
        self.label = label
        if message is None:
            name = getattr(label, "value", label)
            message = (
                f"Class {name!r} has no training tokens"
                if name is not None
                else "Frequency table is empty"
            )
        super().__init__(message)


class EmptyDocumentError(ToxicNBError, ValueError):
    """A document has no tokens left to score."""

    def __init__(self, document_id: str) -> None:
        self.document_id = document_id
        super().__init__(f"Document {document_id!r} has no tokens to score")


class CorpusFormatError(ToxicNBError, ValueError):
    """A corpus file is missing columns or contains malformed rows."""
