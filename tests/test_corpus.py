"""Tests for long-format corpus loading, labelling and frequency filtering."""

from __future__ import annotations

from pathlib import Path

import pytest

from toxic_nb.corpus import (
    documents_from_records,
    filter_rare_tokens,
    label_from_ratings,
    labels_from_ratings,
    load_corpus,
    read_ratings,
    read_token_records,
)
from toxic_nb.errors import CorpusFormatError
from toxic_nb.models import Document, Label, TokenRecord


def _write(tmp_path: Path, name: str, text: str) -> Path:
    path = tmp_path / name
    path.write_text(text, encoding="utf-8")
    return path


# ---------------------------------------------------------------------------
# Labels from ratings
# ---------------------------------------------------------------------------

class TestLabelFromRatings:
    """The rating-sum threshold is strict."""

    def test_negative_sum_is_toxic(self):
        assert label_from_ratings([-1, 0, -1]) is Label.TOXIC

    def test_zero_sum_is_non_toxic(self):
        assert label_from_ratings([1, -1]) is Label.NON_TOXIC
        assert label_from_ratings([]) is Label.NON_TOXIC

    def test_positive_sum_is_non_toxic(self):
        assert label_from_ratings([1, 0, 0]) is Label.NON_TOXIC

    def test_custom_threshold_is_exclusive(self):
        assert label_from_ratings([-1], threshold=-1) is Label.NON_TOXIC
        assert label_from_ratings([-2], threshold=-1) is Label.TOXIC

    def test_labels_from_totals(self):
        assert labels_from_ratings({"a": -0.5, "b": 0.0}) == {
            "a": Label.TOXIC,
            "b": Label.NON_TOXIC,
        }


class TestReadRatings:
    def test_sums_per_document(self, tmp_path):
        path = _write(tmp_path, "ratings.csv", "document_id,rating\na,-1\na,0\nb,1\na,-1\n")
        assert read_ratings(path) == {"a": -2.0, "b": 1.0}

    def test_invalid_rating(self, tmp_path):
        path = _write(tmp_path, "ratings.csv", "document_id,rating\na,bad\n")
        with pytest.raises(CorpusFormatError, match="line 2"):
            read_ratings(path)

    def test_missing_column(self, tmp_path):
        path = _write(tmp_path, "ratings.csv", "document_id,score\na,1\n")
        with pytest.raises(CorpusFormatError, match="rating"):
            read_ratings(path)


# ---------------------------------------------------------------------------
# Token records
# ---------------------------------------------------------------------------

class TestReadTokenRecords:
    def test_reads_tsv(self, tmp_path):
        path = _write(tmp_path, "t.tsv", "document_id\ttoken\tlabel\n1\tyou\ttoxic\n1\tidiot\t1\n")
        records = read_token_records(path)
        assert records == [
            TokenRecord("1", "you", Label.TOXIC),
            TokenRecord("1", "idiot", Label.TOXIC),
        ]

    def test_reads_csv_without_label_column(self, tmp_path):
        path = _write(tmp_path, "t.csv", "document_id,token\n7,hello\n")
        assert read_token_records(path) == [TokenRecord("7", "hello", None)]

    def test_blank_tokens_skipped(self, tmp_path):
        path = _write(tmp_path, "t.csv", "document_id,token,label\n1, ,toxic\n1,ok,toxic\n")
        assert [r.token for r in read_token_records(path)] == ["ok"]

    def test_unknown_label(self, tmp_path):
        path = _write(tmp_path, "t.csv", "document_id,token,label\n1,a,maybe\n")
        with pytest.raises(CorpusFormatError, match="unknown label"):
            read_token_records(path)

    def test_missing_token_column(self, tmp_path):
        path = _write(tmp_path, "t.csv", "document_id,word\n1,a\n")
        with pytest.raises(CorpusFormatError, match="token"):
            read_token_records(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            read_token_records(tmp_path / "nope.csv")

    def test_undecodable_bytes(self, tmp_path):
        path = tmp_path / "bad.tsv"
        path.write_bytes(b"document_id\ttoken\tlabel\n1\t\xff\xfe\ttoxic\n")
        with pytest.raises(CorpusFormatError, match="bad.tsv: not valid UTF-8"):
            read_token_records(path)

    def test_oversized_field(self, tmp_path):
        path = _write(tmp_path, "huge.csv", "document_id,token\n1," + "x" * 200_000 + "\n")
        with pytest.raises(CorpusFormatError, match="huge.csv"):
            read_token_records(path)


class TestDocumentsFromRecords:
    def test_joins_in_first_seen_order(self):
        records = [
            TokenRecord("b", "x", Label.TOXIC),
            TokenRecord("a", "y", Label.NON_TOXIC),
            TokenRecord("b", "z", Label.TOXIC),
        ]
        docs = documents_from_records(records)
        assert docs == [
            Document("b", ("x", "z"), Label.TOXIC),
            Document("a", ("y",), Label.NON_TOXIC),
        ]

    def test_label_index_takes_precedence(self):
        records = [TokenRecord("a", "x", Label.NON_TOXIC), TokenRecord("b", "y")]
        docs = documents_from_records(records, {"a": Label.TOXIC})
        assert docs[0].label is Label.TOXIC
        assert docs[1].label is None

    def test_late_label_fills_in(self):
        records = [TokenRecord("a", "x"), TokenRecord("a", "y", Label.TOXIC)]
        assert documents_from_records(records)[0].label is Label.TOXIC

    def test_conflicting_labels(self):
        records = [TokenRecord("a", "x", Label.TOXIC), TokenRecord("a", "y", Label.NON_TOXIC)]
        with pytest.raises(CorpusFormatError, match="conflicting"):
            documents_from_records(records)


class TestFilterRareTokens:
    def test_drops_tokens_below_min_count(self):
        docs = [
            Document("1", ("common", "rare"), Label.TOXIC),
            Document("2", ("common", "common"), Label.NON_TOXIC),
        ]
        filtered = filter_rare_tokens(docs, min_count=2)
        assert filtered[0].tokens == ("common",)
        assert filtered[1].tokens == ("common", "common")
        assert filtered[0].label is Label.TOXIC

    def test_default_minimum_is_five(self):
        docs = [Document(str(i), ("w",)) for i in range(4)]
        assert all(not d.tokens for d in filter_rare_tokens(docs))
        docs.append(Document("5", ("w",)))
        assert all(d.tokens == ("w",) for d in filter_rare_tokens(docs))

    def test_emptied_documents_are_kept(self):
        docs = [Document("1", ("rare",))]
        assert filter_rare_tokens(docs, min_count=2) == [Document("1", ())]

    def test_min_count_one_is_identity(self):
        docs = [Document("1", ("a",))]
        assert filter_rare_tokens(docs, min_count=1) == docs


class TestLoadCorpus:
    def test_labels_from_file(self, corpus_file, corpus):
        docs = load_corpus(corpus_file, min_count=1)
        assert docs == corpus

    def test_labels_from_ratings(self, tmp_path):
        tokens = _write(tmp_path, "t.csv", "document_id,token\na,x\na,y\nb,x\n")
        ratings = _write(tmp_path, "r.csv", "document_id,rating\na,-1\nb,0\n")
        docs = load_corpus(tokens, ratings_path=ratings, min_count=1)
        assert [d.label for d in docs] == [Label.TOXIC, Label.NON_TOXIC]

    def test_applies_frequency_filter(self, tmp_path):
        tokens = _write(tmp_path, "t.csv", "document_id,token,label\na,x,toxic\na,y,toxic\nb,x,0\n")
        docs = load_corpus(tokens, min_count=2)
        assert docs[0].tokens == ("x",)
