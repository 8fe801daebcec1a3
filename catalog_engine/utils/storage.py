"""
Storage utility.

File I/O helpers for content files (YAML/JSON), snapshots and CSV tables.
"""

import json
import logging
import os
from typing import Any

import pandas as pd
import yaml

logger = logging.getLogger(__name__)


class ContentParseError(ValueError):
    """A content file exists but is not valid YAML/JSON."""


class StorageManager:
    """
    Manages file I/O for the catalog build.

    Handles:
    - Topic files and manifest (YAML or JSON, by suffix)
    - Snapshot JSON (atomic write)
    - CSV tables (pandas)
    """

    def read_structured(self, path: str) -> Any:
        """
        Load a YAML or JSON document.

        Args:
            path: File path; ".json" is parsed as JSON, anything else as YAML

        Returns:
            Parsed document

        Raises:
            OSError: If the file cannot be read
            ContentParseError: If the file cannot be parsed
        """
        try:
            with open(path, "r", encoding="utf-8") as f:
                text = f.read()
            if path.endswith(".json"):
                return json.loads(text)
            return yaml.safe_load(text)
        except (UnicodeDecodeError, json.JSONDecodeError, yaml.YAMLError) as e:
            raise ContentParseError(f"Failed to parse {path}: {e}") from e

    def write_text_atomic(self, text: str, path: str) -> None:
        """
        Write text with the atomic write pattern (temp file, then rename).

        Raises:
            OSError: If the directory cannot be created or the write fails
        """
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        temp_path = f"{path}.tmp"
        try:
            with open(temp_path, "w", encoding="utf-8") as f:
                f.write(text)
            os.replace(temp_path, path)
            logger.debug(f"Wrote {len(text)} bytes to {path}")
        except OSError as e:
            logger.error(f"Failed to write {path}: {e}")
            if os.path.exists(temp_path):
                os.remove(temp_path)
            raise

    def write_csv(self, df: pd.DataFrame, path: str) -> None:
        """Save a DataFrame as CSV without the index column."""
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        df.to_csv(path, index=False)
        logger.info(f"Saved {len(df)} rows to {path}")

    def read_json(self, path: str) -> Any:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
