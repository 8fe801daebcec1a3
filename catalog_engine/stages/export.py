"""
Catalog Exporter.

Serializes the frozen registry and its index into one versioned,
self-describing snapshot for presentation and search services.
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional

import pandas as pd

from catalog_engine.models.topic import CATEGORIES, Topic
from catalog_engine.registry.topic_registry import TopicRegistry
from catalog_engine.stages.auditing import AuditReport
from catalog_engine.stages.indexing import CatalogIndex
from catalog_engine.utils.storage import StorageManager
import config.settings as settings

logger = logging.getLogger(__name__)


SUMMARY_COLUMNS = [
    "id", "title", "category", "key_points", "code_examples", "resources", "questions",
]


class ExportError(IOError):
    """The snapshot or a report could not be written."""


class SnapshotFormatError(ValueError):
    """A snapshot is malformed or has an unsupported format version."""


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")


def _major(version: str) -> str:
    return str(version).split(".")[0]


@dataclass
class CatalogSnapshot:
    """
    Exported catalog: ordered topics plus category map and search table.
    Everything except built_at is a pure function of the registry.
    """
    format_version: str
    built_at: str
    topics: List[Topic] = field(default_factory=list)
    index: dict = field(default_factory=dict)
    categories: Dict[str, str] = field(default_factory=dict)  # tag -> display name

    def to_dict(self) -> dict:
        return {
            "formatVersion": self.format_version,
            "builtAt": self.built_at,
            "categories": self.categories,
            "topics": [topic.to_dict() for topic in self.topics],
            "index": self.index,
        }

    def to_json(self) -> str:
        """Deterministic JSON text (stable key order, trailing newline)."""
        return json.dumps(self.to_dict(), indent=2, ensure_ascii=False) + "\n"

    @classmethod
    def from_dict(cls, data: dict) -> "CatalogSnapshot":
        """
        Create CatalogSnapshot from its JSON dict.

        Raises:
            SnapshotFormatError: If required keys are missing or the format
                major version differs from the one this build writes
        """
        if not isinstance(data, dict):
            raise SnapshotFormatError("Snapshot must be a JSON object")

        version = data.get("formatVersion")
        if version is None:
            raise SnapshotFormatError("Snapshot has no formatVersion")
        if _major(version) != _major(settings.SNAPSHOT_FORMAT_VERSION):
            raise SnapshotFormatError(
                f"Unsupported snapshot format {version} "
                f"(expected {_major(settings.SNAPSHOT_FORMAT_VERSION)}.x)"
            )

        try:
            topics = [Topic.from_dict(t) for t in data.get("topics", [])]
        except (KeyError, TypeError, ValueError) as e:
            raise SnapshotFormatError(f"Invalid topic in snapshot: {e}") from e

        return cls(
            format_version=version,
            built_at=data.get("builtAt", ""),
            topics=topics,
            index=data.get("index", {}),
            categories=data.get("categories", {}),
        )


class CatalogExporter:
    """
    Publishes snapshots and tabular reports.

    Export freezes the registry: nothing may be registered afterwards.
    """

    def __init__(
        self,
        storage: Optional[StorageManager] = None,
        format_version: str = settings.SNAPSHOT_FORMAT_VERSION
    ):
        self.storage = storage or StorageManager()
        self.format_version = format_version

    def export(
        self,
        registry: TopicRegistry,
        index: CatalogIndex,
        built_at: Optional[str] = None
    ) -> CatalogSnapshot:
        """
        Build a snapshot of the registry and its index.

        Args:
            registry: Registry to publish (frozen by this call)
            index: Index built from the same registry
            built_at: Build timestamp (default: now, UTC)

        Returns:
            CatalogSnapshot

        Raises:
            ValueError: If the index was built from a different topic sequence
        """
        registry.freeze()
        topics = registry.all()

        if [t.id for t in index.topics] != [t.id for t in topics]:
            raise ValueError("Index does not match registry contents")

        present = {t.category for t in topics}
        snapshot = CatalogSnapshot(
            format_version=self.format_version,
            built_at=built_at or _utc_timestamp(),
            topics=topics,
            index=index.to_dict(),
            categories={tag: name for tag, name in CATEGORIES.items() if tag in present},
        )

        logger.info(
            f"Exported snapshot v{snapshot.format_version}: "
            f"{len(snapshot.topics)} topics, {len(snapshot.categories)} categories"
        )
        return snapshot

    def write(self, snapshot: CatalogSnapshot, path: str) -> str:
        """
        Write a snapshot to disk atomically.

        Raises:
            ExportError: On any I/O failure
        """
        try:
            self.storage.write_text_atomic(snapshot.to_json(), str(path))
        except OSError as e:
            raise ExportError(f"Cannot write snapshot to {path}: {e}") from e
        logger.info(f"Snapshot saved to {path}")
        return str(path)

    def write_summary_csv(self, registry: TopicRegistry, path: str) -> str:
        """
        Write one row per topic (content counts) as CSV.

        Raises:
            ExportError: On any I/O failure
        """
        rows = [
            {
                "id": topic.id,
                "title": topic.title,
                "category": topic.category,
                "key_points": len(topic.key_points),
                "code_examples": len(topic.code_examples),
                "resources": len(topic.resources),
                "questions": len(topic.questions),
            }
            for topic in registry.all()
        ]
        df = pd.DataFrame(rows, columns=SUMMARY_COLUMNS)
        return self._write_csv(df, path)

    def write_audit_csv(self, report: AuditReport, path: str) -> str:
        """Write audit findings as CSV. Raises ExportError on I/O failure."""
        return self._write_csv(report.to_dataframe(), path)

    def _write_csv(self, df: pd.DataFrame, path: str) -> str:
        try:
            self.storage.write_csv(df, str(path))
        except OSError as e:
            raise ExportError(f"Cannot write {path}: {e}") from e
        return str(path)


def load_snapshot(path: str, storage: Optional[StorageManager] = None) -> CatalogSnapshot:
    """
    Re-import a snapshot written by CatalogExporter.write().

    Raises:
        OSError: If the file cannot be read
        SnapshotFormatError: If the content is not a supported snapshot
    """
    storage = storage or StorageManager()
    try:
        data = storage.read_json(str(path))
    except json.JSONDecodeError as e:
        raise SnapshotFormatError(f"Snapshot {path} is not valid JSON: {e}") from e
    return CatalogSnapshot.from_dict(data)
