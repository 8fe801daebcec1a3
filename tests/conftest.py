"""
Shared fixtures: factories for topic records, candidates and topics.
"""

import copy

import pytest

from catalog_engine.models.topic import TopicCandidate
from catalog_engine.stages.validation import SchemaValidator


BASE_RECORD = {
    "id": "acid-properties",
    "title": "ACID Properties",
    "subtitle": "Transaction guarantees",
    "summary": "Guarantees that keep transactions correct under failures.",
    "explanation": "Atomicity, consistency, isolation and durability.",
    "keyPoints": ["Atomicity means all or nothing", "Durability survives crashes"],
    "codeExamples": [
        {
            "title": "Transfer",
            "description": "Two updates in one transaction.",
            "language": "sql",
            "code": "BEGIN;\nUPDATE accounts SET balance = balance - 1;\nCOMMIT;\n",
        }
    ],
    "resources": [
        {
            "title": "ACID on Wikipedia",
            "url": "https://en.wikipedia.org/wiki/ACID",
            "type": "article",
        }
    ],
    "questions": [
        {"question": "What is atomicity?", "answer": "All operations commit or none do."}
    ],
}


@pytest.fixture
def make_record():
    """Return a factory for raw topic records with field overrides."""
    def _make(**overrides):
        record = copy.deepcopy(BASE_RECORD)
        record.update(overrides)
        return record
    return _make


@pytest.fixture
def make_candidate(make_record):
    """Return a factory for TopicCandidate objects."""
    def _make(category="transactions", source="test.yaml", **overrides):
        return TopicCandidate(data=make_record(**overrides), category=category, source=source)
    return _make


@pytest.fixture
def make_topic(make_candidate):
    """Return a factory for validated Topic objects."""
    validator = SchemaValidator()

    def _make(category="transactions", **overrides):
        result = validator.validate(make_candidate(category=category, **overrides))
        assert result.is_valid, result.errors
        return result.topic
    return _make
