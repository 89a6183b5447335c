"""Unit tests for the lightweight fuzzy/prefix engine."""

import pytest

from offline_docs_search.search.mini_engine import MiniSearchEngine


@pytest.fixture
def mini_engine(sample_documents):
    engine = MiniSearchEngine()
    engine.index_documents(sample_documents)
    return engine


@pytest.mark.unit
def test_unindexed_engine_returns_nothing():
    assert MiniSearchEngine().search("anything") == []


@pytest.mark.unit
def test_empty_query_returns_nothing(mini_engine):
    assert mini_engine.search("") == []


@pytest.mark.unit
def test_second_index_call_is_ignored(mini_engine, sample_documents):
    assert mini_engine.index_documents({"/new": {"title": "New", "content": "fresh"}}) == 0
    assert mini_engine.document_count == len(sample_documents)
    assert mini_engine.search("fresh") == []


@pytest.mark.unit
def test_exact_title_match_ranks_first(mini_engine):
    hits = mini_engine.search("configuration")

    assert hits[0].id == "/guides/config"
    assert hits[0].title == "Configuration"
    assert hits[0].match["configuration"] == ["title"]


@pytest.mark.unit
def test_sections_are_searchable(mini_engine):
    hits = mini_engine.search("operators")

    assert [hit.id for hit in hits] == ["/reference/search"]
    assert hits[0].match == {"operators": ["sections"]}


@pytest.mark.unit
def test_prefix_matches_complete_partial_terms(mini_engine):
    hits = mini_engine.search("instal")

    assert hits[0].id == "/guides/install"
    assert "installation" in hits[0].match


@pytest.mark.unit
def test_fuzzy_matches_tolerate_typos(mini_engine):
    hits = mini_engine.search("setings")

    assert {hit.id for hit in hits} == {"/guides/install", "/guides/config"}
    assert all("settings" in hit.match for hit in hits)


@pytest.mark.unit
def test_exact_match_outranks_fuzzy_match():
    engine = MiniSearchEngine()
    engine.index_documents(
        {
            "exact": {"title": "first", "content": "kernel"},
            "typo": {"title": "second", "content": "kernal"},
        }
    )

    assert [hit.id for hit in engine.search("kernel")] == ["exact", "typo"]


@pytest.mark.unit
def test_prefix_can_be_disabled(sample_documents):
    engine = MiniSearchEngine(prefix=False, fuzziness=0)
    engine.index_documents(sample_documents)

    assert engine.search("instal") == []


@pytest.mark.unit
def test_title_boost_outweighs_content():
    engine = MiniSearchEngine()
    engine.index_documents(
        {
            "title-hit": {"title": "Search", "content": "alpha beta gamma"},
            "content-hit": {"title": "Other", "content": "search alpha beta"},
        }
    )

    assert [hit.id for hit in engine.search("search")] == ["title-hit", "content-hit"]
