# src/batchsplit/core/ignore.py
import logging
from pathlib import Path
from typing import Iterable, List, Optional

import pathspec

from batchsplit.config import HIDDEN_PREFIX, METADATA_SUBSTRINGS, UNWANTED_FILES

logger = logging.getLogger(__name__)


def load_ignore_spec(ignore_file: Optional[Path], extra_patterns: Optional[List[str]] = None) -> pathspec.PathSpec:
    """
    Loads gitignore-style rules from an ignore file (if it exists) plus any
    extra patterns, and creates a PathSpec object.
    """
    lines: List[str] = []

    if ignore_file is not None and ignore_file.exists():
        try:
            with open(ignore_file, "r", encoding="utf-8") as f:
                lines = f.read().splitlines()
        except OSError as e:
            logger.warning("Could not read %s: %s", ignore_file, e)

    if extra_patterns:
        lines.extend(extra_patterns)

    return pathspec.PathSpec.from_lines("gitwildmatch", lines)


class IgnoreFilter:
    """
    Decides which entries the scanner skips. Built once per run; the
    unwanted-name list is normalized into a set up front.
    """

    def __init__(self, unwanted: Iterable[str] = UNWANTED_FILES, spec: Optional[pathspec.PathSpec] = None):
        self.unwanted = {name.lower() for name in unwanted}
        self.spec = spec

    def reason(self, name: str, rel_path: Optional[str] = None, is_directory: bool = False) -> Optional[str]:
        """Returns why an entry is ignored, or None when it should be kept."""
        lowered = name.lower()
        if lowered in self.unwanted:
            return "system file"
        if name.startswith(HIDDEN_PREFIX):
            return "hidden"
        if any(marker in lowered for marker in METADATA_SUBSTRINGS):
            return "system file"
        if self.spec is not None and rel_path is not None:
            candidate = rel_path + "/" if is_directory else rel_path
            if self.spec.match_file(candidate):
                return "ignore pattern"
        return None

    def is_ignored(self, name: str, rel_path: Optional[str] = None, is_directory: bool = False) -> bool:
        return self.reason(name, rel_path, is_directory) is not None


def is_system_name(name: str) -> bool:
    """Hidden or OS metadata entries, as excluded when listing or measuring output."""
    return IgnoreFilter().is_ignored(name)
