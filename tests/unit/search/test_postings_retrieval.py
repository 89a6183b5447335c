"""Unit tests for term and phrase retrieval."""

import logging
import math

import pytest

from offline_docs_search.search.models import SearchIndex
from offline_docs_search.search.retrieval import PostingsRetriever


@pytest.fixture
def retriever(sample_index):
    return PostingsRetriever(sample_index)


@pytest.mark.unit
def test_unknown_term_returns_empty(retriever):
    assert retriever.search_term("xyzzynotaterm") == {}


@pytest.mark.unit
def test_term_score_is_normalized_tf_times_idf_times_field_weight(retriever):
    scores = retriever.search_term("kernel")

    idf = math.log(4 / 2)
    assert scores["D3"] == pytest.approx(2 / 100 * idf * 1.0)
    assert scores["D4"] == pytest.approx(1 / 100 * idf * 10.0)


@pytest.mark.unit
def test_field_filter_only_scores_that_field(retriever):
    assert set(retriever.search_term("kernel", field="title")) == {"D4"}
    assert retriever.search_term("kernel", field="code") == {}


@pytest.mark.unit
def test_postings_of_one_document_are_summed():
    index = SearchIndex.from_dict(
        {
            "terms": {
                "heap": {
                    "df": 1,
                    "postings": [
                        {"docId": "A", "tf": 1, "positions": [0], "field": "title"},
                        {"docId": "A", "tf": 2, "positions": [5, 9], "field": "content"},
                    ],
                }
            },
            "articles": {
                "A": {"id": "A", "title": "Heap", "path": "/a", "wordCount": 10},
                "B": {"id": "B", "title": "Other", "path": "/b", "wordCount": 10},
            },
        }
    )

    scores = PostingsRetriever(index).search_term("heap")

    idf = math.log(2)
    assert scores == {"A": pytest.approx(0.1 * idf * 10.0 + 0.2 * idf * 1.0)}


@pytest.mark.unit
def test_term_in_every_document_contributes_nothing():
    index = SearchIndex.from_dict(
        {
            "terms": {"docs": {"df": 1, "postings": [{"docId": "A", "tf": 1, "positions": [0]}]}},
            "articles": {"A": {"id": "A", "title": "Docs", "path": "/a", "wordCount": 5}},
        }
    )

    assert PostingsRetriever(index).search_term("docs") == {}


@pytest.mark.unit
def test_malformed_postings_are_skipped_and_reported_once(caplog):
    index = SearchIndex.from_dict(
        {
            "terms": {
                "probe": {
                    "df": 2,
                    "postings": [
                        {"docId": "ghost", "tf": 1, "positions": [0]},
                        {"docId": "empty", "tf": 1, "positions": [0]},
                        {"docId": "real", "tf": 1, "positions": [0]},
                    ],
                },
                "void": {"df": 0, "postings": [{"docId": "real", "tf": 1, "positions": [1]}]},
            },
            "articles": {
                "empty": {"id": "empty", "title": "Empty", "path": "/empty", "wordCount": 0},
                "real": {"id": "real", "title": "Real", "path": "/real", "wordCount": 10},
                "other": {"id": "other", "title": "Other", "path": "/other", "wordCount": 10},
            },
        }
    )
    retriever = PostingsRetriever(index)

    with caplog.at_level(logging.WARNING, logger="offline_docs_search.search.retrieval"):
        first = retriever.search_term("probe")
        second = retriever.search_term("probe")
        assert retriever.search_term("void") == {}

    assert set(first) == {"real"}
    assert first == second
    warnings = [record for record in caplog.records if record.levelno == logging.WARNING]
    assert len(warnings) == 3


@pytest.mark.unit
def test_phrase_matches_adjacent_terms_only(retriever):
    assert retriever.search_phrase("buffer overflow") == {"D1": 1.0}


@pytest.mark.unit
def test_phrase_counts_each_occurrence():
    index = SearchIndex.from_dict(
        {
            "terms": {
                "use": {"df": 1, "postings": [{"docId": "A", "tf": 2, "positions": [3, 20]}]},
                "after": {"df": 1, "postings": [{"docId": "A", "tf": 2, "positions": [4, 21]}]},
            },
            "articles": {"A": {"id": "A", "title": "UAF", "path": "/a", "wordCount": 30}},
        }
    )

    assert PostingsRetriever(index).search_phrase("use after") == {"A": 2.0}


@pytest.mark.unit
def test_phrase_positions_are_merged_across_fields():
    index = SearchIndex.from_dict(
        {
            "terms": {
                "stack": {"df": 1, "postings": [{"docId": "A", "tf": 1, "positions": [0], "field": "title"}]},
                "smashing": {"df": 1, "postings": [{"docId": "A", "tf": 1, "positions": [1], "field": "content"}]},
            },
            "articles": {"A": {"id": "A", "title": "Stack", "path": "/a", "wordCount": 30}},
        }
    )

    assert PostingsRetriever(index).search_phrase("stack smashing") == {"A": 1.0}


@pytest.mark.unit
def test_phrase_with_unknown_term_matches_nothing(retriever):
    assert retriever.search_phrase("buffer underrun") == {}


@pytest.mark.unit
def test_phrase_of_only_short_words_matches_nothing(retriever):
    assert retriever.search_phrase("a b") == {}


@pytest.mark.unit
def test_documents_with_term(retriever):
    assert retriever.documents_with_term("overflow") == {"D1", "D2"}
    assert retriever.documents_with_term("absent") == set()
