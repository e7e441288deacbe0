"""Shared test fixtures for toxic-nb tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from toxic_nb.models import Document, Label

TOXIC_COMMENTS = [
    "idiot stupid troll",
    "stupid idiot",
    "troll idiot idiot",
    "stupid troll",
    "idiot troll article",
    "stupid stupid edit",
    "troll idiot thanks",
    "idiot stupid",
    "troll stupid idiot",
    "idiot troll",
]

# Same vocabulary as the toxic comments so every token is in both classes.
GOOD_COMMENTS = [
    "thanks article edit",
    "article thanks",
    "edit edit thanks",
    "thanks article",
    "article edit idiot",
    "thanks thanks stupid",
    "edit article troll",
    "thanks edit",
    "article thanks edit",
    "edit article",
]


def _docs(comments: list[str], label: Label, prefix: str) -> list[Document]:
    return [
        Document(f"{prefix}{i}", tuple(text.split()), label)
        for i, text in enumerate(comments)
    ]


@pytest.fixture
def toxic_docs() -> list[Document]:
    return _docs(TOXIC_COMMENTS, Label.TOXIC, "t")


@pytest.fixture
def good_docs() -> list[Document]:
    return _docs(GOOD_COMMENTS, Label.NON_TOXIC, "g")


@pytest.fixture
def corpus(toxic_docs, good_docs) -> list[Document]:
    """Interleaved labeled corpus of toxic and non-toxic comments."""
    mixed: list[Document] = []
    for t, g in zip(toxic_docs, good_docs):
        mixed.extend([t, g])
    return mixed


@pytest.fixture
def tiny_training() -> tuple[list[Document], list[Document]]:
    """The hand-computed two-document example (good, toxic)."""
    good = [Document("g", ("a", "a", "b"), Label.NON_TOXIC)]
    toxic = [Document("t", ("a", "c", "c"), Label.TOXIC)]
    return good, toxic


@pytest.fixture
def corpus_file(tmp_path: Path, corpus: list[Document]) -> Path:
    """Long-format TSV holding the shared corpus."""
    lines = ["document_id\ttoken\tlabel"]
    for doc in corpus:
        for token in doc.tokens:
            lines.append(f"{doc.document_id}\t{token}\t{doc.label.value}")
    path = tmp_path / "tokens.tsv"
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path
