"""
Content Loader.

Reads independently authored topic files from a content root and turns
them into ordered topic candidates, each tagged with its category.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from catalog_engine.models.findings import ValidationError
from catalog_engine.models.topic import CATEGORIES, TopicCandidate
from catalog_engine.utils.storage import ContentParseError, StorageManager
import config.settings as settings

logger = logging.getLogger(__name__)


class ContentLoadError(IOError):
    """The content root or manifest cannot be read."""


@dataclass
class LoadResult:
    """Candidates in authoring order plus per-file problems."""
    candidates: List[TopicCandidate] = field(default_factory=list)
    source_errors: Dict[str, List[ValidationError]] = field(default_factory=dict)

    def add_source_error(self, source: str, reason: str) -> None:
        self.source_errors.setdefault(source, []).append(ValidationError("", reason))


class ContentLoader:
    """
    Loads topic candidates from a content root.

    Two layouts:
    - Manifest: <root>/catalog.yaml lists sections in order, each with a
      category tag and a list of topic files
    - Directories: each sub-directory is a section named after its category
      tag; topic files are read in filename order

    A topic file holds one topic mapping, a list of mappings, or a mapping
    with a "topics" list.
    """

    def __init__(self, content_root: str, storage: Optional[StorageManager] = None):
        """
        Initialize content loader.

        Args:
            content_root: Directory holding topic files
            storage: File I/O helper (default: new StorageManager)
        """
        self.content_root = str(content_root)
        self.storage = storage or StorageManager()

    def load(self) -> LoadResult:
        """
        Load every candidate under the content root.

        Returns:
            LoadResult with candidates in section order, then file order

        Raises:
            ContentLoadError: If the root, manifest or a listed file cannot be read
        """
        if not os.path.isdir(self.content_root):
            raise ContentLoadError(f"Content root not found: {self.content_root}")

        manifest_path = os.path.join(self.content_root, settings.MANIFEST_FILENAME)
        if os.path.exists(manifest_path):
            sections = self._sections_from_manifest(manifest_path)
            logger.info(f"Loaded manifest {manifest_path}: {len(sections)} sections")
        else:
            sections = self._sections_from_directories()
            logger.info(f"No manifest found, using {len(sections)} category directories")

        result = LoadResult()
        for category, files in sections:
            for relative in files:
                self._load_file(category, relative, result)

        logger.info(
            f"Loaded {len(result.candidates)} candidates "
            f"({len(result.source_errors)} files with errors)"
        )
        return result

    def _sections_from_manifest(self, manifest_path: str) -> List[Tuple[str, List[str]]]:
        try:
            manifest = self.storage.read_structured(manifest_path)
        except (OSError, ContentParseError) as e:
            raise ContentLoadError(f"Cannot read manifest {manifest_path}: {e}") from e

        if not isinstance(manifest, dict) or not isinstance(manifest.get("sections"), list):
            raise ContentLoadError(f"Manifest {manifest_path} must contain a 'sections' list")

        sections = []
        for i, section in enumerate(manifest["sections"]):
            if not isinstance(section, dict):
                raise ContentLoadError(f"Manifest section {i} must be a mapping")
            category = section.get("category")
            files = section.get("topics", [])
            if not isinstance(category, str) or not isinstance(files, list):
                raise ContentLoadError(
                    f"Manifest section {i} needs a 'category' string and a 'topics' list"
                )
            sections.append((category, [str(f) for f in files]))
        return sections

    def _sections_from_directories(self) -> List[Tuple[str, List[str]]]:
        names = [
            name for name in os.listdir(self.content_root)
            if not name.startswith(".") and os.path.isdir(os.path.join(self.content_root, name))
        ]
        # Known categories in taxonomy order, anything else after (validator rejects it)
        order = list(CATEGORIES)
        names.sort(key=lambda n: (order.index(n) if n in order else len(order), n))

        sections = []
        for name in names:
            directory = os.path.join(self.content_root, name)
            files = sorted(
                f"{name}/{filename}" for filename in os.listdir(directory)
                if filename.endswith(settings.TOPIC_FILE_SUFFIXES)
            )
            sections.append((name, files))
        return sections

    def _load_file(self, category: str, relative: str, result: LoadResult) -> None:
        path = os.path.join(self.content_root, relative)

        if not os.path.isfile(path):
            logger.error(f"Listed topic file not found: {relative}")
            result.add_source_error(relative, "topic file not found")
            return

        try:
            document = self.storage.read_structured(path)
        except ContentParseError as e:
            logger.error(str(e))
            result.add_source_error(relative, str(e))
            return
        except OSError as e:
            raise ContentLoadError(f"Cannot read topic file {path}: {e}") from e

        if isinstance(document, dict) and "topics" in document:
            document = document["topics"]

        if isinstance(document, dict):
            records = [document]
        elif isinstance(document, list):
            records = document
        else:
            result.add_source_error(relative, "file contains no topic records")
            return

        for position, record in enumerate(records):
            result.candidates.append(TopicCandidate(
                data=record, category=category, source=relative, position=position
            ))
        logger.debug(f"Loaded {len(records)} records from {relative} [{category}]")
