"""
Basic unit tests for Topic Registry.
Verifies ordering, uniqueness and the freeze lifecycle.
"""

import pytest

from catalog_engine.registry import DuplicateIdError, RegistryFrozenError, TopicRegistry


def test_registry_initialization():
    """Test creating new registry."""
    registry = TopicRegistry()

    assert len(registry) == 0
    assert registry.all() == []
    assert not registry.frozen


def test_register_topic(make_topic):
    """Test adding a topic to the registry."""
    registry = TopicRegistry()
    topic = make_topic()

    registry.register(topic)

    assert "acid-properties" in registry
    assert registry.by_id("acid-properties") is topic
    assert len(registry) == 1


def test_duplicate_id_prevention(make_topic):
    """Test that re-registering an id raises, even with an identical payload."""
    registry = TopicRegistry()
    registry.register(make_topic())

    with pytest.raises(DuplicateIdError, match="already exists") as exc_info:
        registry.register(make_topic())

    assert exc_info.value.topic_id == "acid-properties"
    assert [t.id for t in registry.all()].count("acid-properties") == 1


def test_duplicate_id_with_different_payload(make_topic):
    registry = TopicRegistry()
    registry.register(make_topic())

    with pytest.raises(DuplicateIdError):
        registry.register(make_topic(title="ACID Again", category="fundamentals"))

    assert registry.by_id("acid-properties").title == "ACID Properties"


def test_order_preservation(make_topic):
    """Test that all() returns topics in registration order, never sorted."""
    registry = TopicRegistry()
    ids = ["zeta", "alpha", "mid-topic", "beta"]
    for topic_id in ids:
        registry.register(make_topic(id=topic_id))

    assert [t.id for t in registry.all()] == ids
    assert [t.id for t in registry] == ids


def test_by_id_not_found():
    """Test that a missed lookup returns None instead of raising."""
    registry = TopicRegistry()
    assert registry.by_id("nonexistent-topic") is None


def test_freeze_blocks_registration(make_topic):
    """Test that no writes are accepted after freeze()."""
    registry = TopicRegistry()
    registry.register(make_topic(id="first"))
    registry.freeze()
    registry.freeze()  # Idempotent

    with pytest.raises(RegistryFrozenError):
        registry.register(make_topic(id="second"))

    assert [t.id for t in registry.all()] == ["first"]


def test_all_returns_copy(make_topic):
    registry = TopicRegistry()
    registry.register(make_topic())

    registry.all().clear()

    assert len(registry) == 1


# Run tests if executed directly
if __name__ == "__main__":
    pytest.main([__file__, "-v"])
