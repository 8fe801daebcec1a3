"""
Topic Registry Module.

Single source of truth for all validated topics in a catalog build.
"""

from catalog_engine.registry.topic_registry import (
    DuplicateIdError,
    RegistryFrozenError,
    TopicRegistry,
)

__all__ = ["DuplicateIdError", "RegistryFrozenError", "TopicRegistry"]
