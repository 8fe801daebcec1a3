"""
Topic Registry - Single source of truth for validated topics.

Holds the ordered, deduplicated collection of topics for one catalog build.
Lifecycle: create empty -> register N topics -> freeze -> export.
"""

import logging
from typing import Dict, Iterator, List, Optional

from catalog_engine.models.topic import Topic

logger = logging.getLogger(__name__)


class DuplicateIdError(ValueError):
    """A topic with the same id is already registered."""

    def __init__(self, topic_id: str):
        super().__init__(f"Topic '{topic_id}' already exists in registry")
        self.topic_id = topic_id


class RegistryFrozenError(RuntimeError):
    """Registration attempted after the registry was frozen."""


class TopicRegistry:
    """
    Ordered collection of validated topics for one build.

    - Insertion order is the authoring order and is never re-sorted
    - Re-registering an id is always an error, even with an identical payload
    - No writes after freeze()
    """

    def __init__(self):
        self.topics: Dict[str, Topic] = {}  # topic_id -> Topic, insertion ordered
        self.frozen = False

    def register(self, topic: Topic) -> None:
        """
        Append a pre-validated topic.

        Args:
            topic: Topic produced by the schema validator

        Raises:
            DuplicateIdError: If topic.id is already registered
            RegistryFrozenError: If the registry has been frozen
        """
        if self.frozen:
            raise RegistryFrozenError(
                f"Cannot register '{topic.id}': registry is frozen"
            )

        if topic.id in self.topics:
            raise DuplicateIdError(topic.id)

        self.topics[topic.id] = topic
        logger.debug(f"Registered topic: {topic.id} - '{topic.title}' [{topic.category}]")

    def freeze(self) -> None:
        """Close the write phase. Idempotent."""
        if not self.frozen:
            self.frozen = True
            logger.info(f"Registry frozen with {len(self.topics)} topics")

    def all(self) -> List[Topic]:
        """Return all topics in registration order."""
        return list(self.topics.values())

    def by_id(self, topic_id: str) -> Optional[Topic]:
        """Retrieve topic by exact id. Returns None if not found."""
        return self.topics.get(topic_id)

    def __len__(self) -> int:
        return len(self.topics)

    def __iter__(self) -> Iterator[Topic]:
        return iter(self.topics.values())

    def __contains__(self, topic_id: object) -> bool:
        return topic_id in self.topics
