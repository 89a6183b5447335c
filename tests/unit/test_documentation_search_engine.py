"""Unit tests for DocumentationSearchEngine - lifecycle and error values."""

from unittest.mock import patch

import pytest

from offline_docs_search.config import Settings
from offline_docs_search.documentation_search_engine import (
    INDEX_NOT_AVAILABLE,
    DocumentationSearchEngine,
    create_documentation_search_engine,
)
from offline_docs_search.search.models import SearchIndex


@pytest.mark.unit
class TestDocumentationSearchEngine:
    """Test the engine facade around TF-IDF ranking."""

    @pytest.fixture
    def search_engine(self, sample_index):
        engine = DocumentationSearchEngine()
        engine.index_documents(sample_index)
        return engine

    def test_query_before_indexing_reports_index_not_available(self):
        response = DocumentationSearchEngine().search_documents("kernel", 10)

        assert response.error == INDEX_NOT_AVAILABLE
        assert response.results == []
        assert not response.ok

    def test_search_returns_ranked_results(self, search_engine):
        response = search_engine.search_documents("kernel", 10)

        assert response.ok
        assert response.query == "kernel"
        assert [result.id for result in response.results] == ["D4", "D3"]
        assert response.total_results == 2

    def test_empty_query_returns_no_results(self, search_engine):
        response = search_engine.search_documents("", 50)

        assert response.ok
        assert response.results == []

    def test_second_index_is_ignored(self, search_engine):
        replacement = SearchIndex.from_dict({"terms": {}, "articles": {}})

        assert search_engine.index_documents(replacement) is False
        assert search_engine.search_documents("kernel", 10).total_results == 2

    def test_ranking_failure_becomes_error_value(self, search_engine):
        with patch(
            "offline_docs_search.documentation_search_engine.TfIdfSearchEngine.search",
            side_effect=RuntimeError("boom"),
        ):
            response = search_engine.search_documents("kernel", 10)

        assert response.error == "Search failed: boom"
        assert response.results == []

    def test_performance_metrics(self, search_engine):
        search_engine.search_documents("kernel", 10)

        metrics = search_engine.get_performance_metrics()

        assert metrics["index_available"] is True
        assert metrics["searches"] == 1
        assert metrics["articles"] == 4
        assert metrics["terms"] == 5

    def test_performance_metrics_without_index(self):
        metrics = DocumentationSearchEngine().get_performance_metrics()

        assert metrics["index_available"] is False
        assert "articles" not in metrics


@pytest.mark.unit
class TestCreateDocumentationSearchEngine:
    def test_loads_configured_index(self, monkeypatch, sample_index_path):
        monkeypatch.setenv("SEARCH_INDEX_PATH", str(sample_index_path))

        engine = create_documentation_search_engine(Settings())

        assert engine.is_indexed

    def test_explicit_path_overrides_settings(self, sample_index_path):
        engine = create_documentation_search_engine(Settings(), index_path=sample_index_path)

        assert engine.is_indexed

    def test_no_configured_index_leaves_engine_unindexed(self):
        engine = create_documentation_search_engine(Settings())

        assert not engine.is_indexed
        assert engine.search_documents("kernel", 5).error == INDEX_NOT_AVAILABLE

    def test_missing_index_file_is_logged(self, tmp_path, caplog):
        engine = create_documentation_search_engine(Settings(), index_path=tmp_path / "missing.json")

        assert not engine.is_indexed
        assert "Search index not found" in caplog.text

    def test_malformed_index_file_is_logged(self, tmp_path, caplog):
        path = tmp_path / "index.json"
        path.write_text('{"terms": {}}', encoding="utf-8")

        engine = create_documentation_search_engine(Settings(), index_path=path)

        assert not engine.is_indexed
        assert "Invalid search index" in caplog.text

    def test_unreadable_index_path_is_logged(self, tmp_path, caplog):
        engine = create_documentation_search_engine(Settings(), index_path=tmp_path)

        assert not engine.is_indexed
        assert "Cannot read search index" in caplog.text

    def test_excerpt_length_comes_from_settings(self, monkeypatch, sample_index_path):
        monkeypatch.setenv("EXCERPT_MAX_CHARS", "10")

        engine = create_documentation_search_engine(Settings(), index_path=sample_index_path)
        result = engine.search_documents("buffer", 1).results[0]

        assert result.excerpt == "Buffer Ove..."
