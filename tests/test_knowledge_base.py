"""
Tests for knowledge base loading and validation.
"""

import json
from unittest.mock import MagicMock

import pytest
import requests

from firm_normalizer.services.knowledge_base import (
    KnowledgeBaseLoader,
    load_knowledge_base,
    parse_knowledge_base,
)
from firm_normalizer.utils.error_handler import ErrorCategory, LoadError

from .kb_data import ACME_KB, JPMORGAN_KB


def _session_returning(content=b"", error=None, status_error=None):
    session = MagicMock(spec=requests.Session)
    session.headers = {}
    response = MagicMock()
    response.content = content
    if status_error is not None:
        response.raise_for_status.side_effect = status_error
    if error is not None:
        session.get.side_effect = error
    else:
        session.get.return_value = response
    return session


class TestParseKnowledgeBase:
    def test_valid_document(self):
        kb = parse_knowledge_base(JPMORGAN_KB)
        assert kb.label_for("jpmorgan chase") == "JPMorgan Chase & Co."
        assert kb.all_known_variants == ("jpmorgan chase",)
        assert "jpmorgan chase" in kb
        assert len(kb) == 1

    def test_every_index_key_is_searchable(self):
        kb = parse_knowledge_base({
            "variants": {"a": "A", "b": "B"},
            "allKnownVariants": ["b", "a", "b"],
        })
        assert kb.all_known_variants == ("b", "a")
        assert set(kb.variants) <= set(kb.all_known_variants)

    def test_snapshot_is_read_only(self):
        kb = parse_knowledge_base(ACME_KB)
        with pytest.raises(TypeError):
            kb.variants["new"] = "New"
        with pytest.raises(AttributeError):
            kb.variants = {}

    def test_snapshot_is_detached_from_source_document(self):
        document = json.loads(json.dumps(ACME_KB))
        kb = parse_knowledge_base(document)
        document["variants"]["acme"] = "Changed"
        assert kb.label_for("acme") == "Acme Corporation"

    def test_unlabelled_corpus_entries_are_dropped(self):
        kb = parse_knowledge_base({
            "variants": {"acme": "Acme Corporation"},
            "allKnownVariants": ["acme", "orphan"],
        })
        assert kb.all_known_variants == ("acme",)

    @pytest.mark.parametrize(
        "document",
        [
            [],
            "text",
            {},
            {"variants": {"acme": "Acme"}},
            {"allKnownVariants": ["acme"]},
            {"variants": ["acme"], "allKnownVariants": ["acme"]},
            {"variants": {"acme": "Acme"}, "allKnownVariants": "acme"},
            {"variants": {"acme": ""}, "allKnownVariants": ["acme"]},
            {"variants": {"acme": 5}, "allKnownVariants": ["acme"]},
            {"variants": {"acme": "Acme"}, "allKnownVariants": [5]},
            {"variants": {"acme": "Acme"}, "allKnownVariants": []},
        ],
    )
    def test_malformed_documents(self, document):
        with pytest.raises(LoadError):
            parse_knowledge_base(document)


class TestKnowledgeBaseLoader:
    def test_load_from_file(self, kb_file):
        kb = load_knowledge_base(kb_file)
        assert kb.label_for("acme") == "Acme Corporation"
        assert kb.source == str(kb_file)

    def test_load_from_bytes(self):
        kb = KnowledgeBaseLoader().load(json.dumps(ACME_KB).encode("utf-8"))
        assert kb.source == "<bytes>"

    def test_missing_file(self, tmp_path):
        with pytest.raises(LoadError):
            load_knowledge_base(tmp_path / "missing.json")

    def test_malformed_json(self, tmp_path):
        path = tmp_path / "kb.json"
        path.write_text('{"variants": {', encoding="utf-8")
        with pytest.raises(LoadError) as excinfo:
            load_knowledge_base(path)
        assert excinfo.value.category == ErrorCategory.DATA_LOADING
        assert excinfo.value.recoverable

    def test_load_from_url(self):
        session = _session_returning(content=json.dumps(ACME_KB).encode("utf-8"))
        loader = KnowledgeBaseLoader(timeout=5, session=session)

        kb = loader.load("https://example.com/data/knowledge_base.json")

        session.get.assert_called_once_with("https://example.com/data/knowledge_base.json", timeout=5)
        assert kb.label_for("acme") == "Acme Corporation"

    def test_unreachable_url(self):
        session = _session_returning(error=requests.exceptions.ConnectionError("refused"))
        loader = KnowledgeBaseLoader(session=session)

        with pytest.raises(LoadError) as excinfo:
            loader.load("http://example.com/kb.json")
        assert excinfo.value.category == ErrorCategory.NETWORK

    def test_http_error_status(self):
        session = _session_returning(status_error=requests.exceptions.HTTPError("404 Not Found"))
        loader = KnowledgeBaseLoader(session=session)

        with pytest.raises(LoadError):
            loader.load("http://example.com/kb.json")

    def test_url_returning_malformed_json(self):
        session = _session_returning(content=b"<html>not json</html>")
        loader = KnowledgeBaseLoader(session=session)

        with pytest.raises(LoadError):
            loader.load("http://example.com/kb.json")
