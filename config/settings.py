"""
Configuration settings for the catalog build.

Centralized configuration for all stages and the build-catalog CLI.
"""

import os
from pathlib import Path

# Project paths
PROJECT_ROOT = Path(__file__).parent.parent
CONTENT_ROOT = Path(os.getenv("CATALOG_CONTENT_ROOT", str(PROJECT_ROOT / "content")))
OUTPUT_ROOT = Path(os.getenv("CATALOG_OUTPUT_ROOT", str(PROJECT_ROOT / "output")))
SNAPSHOT_PATH = OUTPUT_ROOT / "catalog_snapshot.json"

# Content manifest (optional, falls back to category directories)
MANIFEST_FILENAME = "catalog.yaml"
TOPIC_FILE_SUFFIXES = (".yaml", ".yml", ".json")

# Snapshot format
SNAPSHOT_FORMAT_VERSION = "1.0.0"

# Code example language tags seen in authored content.
# Open-ended: anything else is reported as an audit warning, not rejected.
KNOWN_LANGUAGE_TAGS = frozenset({
    "bash", "c", "cpp", "cql", "csharp", "cypher", "go", "java",
    "javascript", "json", "plaintext", "python", "redis", "rust",
    "shell", "sql", "text", "typescript", "yaml",
})

# Resource types seen in authored content
KNOWN_RESOURCE_TYPES = frozenset({
    "article", "video", "documentation", "tool",
    "tutorial", "practice", "discussion", "book",
})

# Live link checking (only with --check-links)
LINK_CHECK_MAX_WORKERS = int(os.getenv("CATALOG_LINK_CHECK_WORKERS", "10"))
LINK_CHECK_TIMEOUT_SECONDS = float(os.getenv("CATALOG_LINK_CHECK_TIMEOUT", "10"))
LINK_CHECK_USER_AGENT = (
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0 Safari/537.36"
)

# Logging
LOG_LEVEL = os.getenv("CATALOG_LOG_LEVEL", "INFO")  # DEBUG, INFO, WARNING, ERROR
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_FILE = os.getenv("CATALOG_LOG_FILE", "catalog_build.log")
