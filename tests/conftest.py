"""
Shared fixtures for the Firm Normalizer tests.
"""

import json

import pytest

from firm_normalizer.services.knowledge_base import parse_knowledge_base
from firm_normalizer.services.standardizer import Standardizer

from .kb_data import ACME_KB, JPMORGAN_KB


@pytest.fixture
def jpmorgan_kb():
    return parse_knowledge_base(JPMORGAN_KB, source="test")


@pytest.fixture
def acme_kb():
    return parse_knowledge_base(ACME_KB, source="test")


@pytest.fixture
def jpmorgan_standardizer(jpmorgan_kb):
    return Standardizer(jpmorgan_kb)


@pytest.fixture
def acme_standardizer(acme_kb):
    return Standardizer(acme_kb)


@pytest.fixture
def kb_file(tmp_path):
    path = tmp_path / "knowledge_base.json"
    path.write_text(json.dumps(ACME_KB), encoding="utf-8")
    return path
