# src/batchsplit/core/output.py
import logging
import os
from pathlib import Path
from typing import List, Tuple

from batchsplit.config import MANIFEST_NAME
from batchsplit.core.ignore import is_system_name
from batchsplit.errors import ConfigurationError, OutputNotEmptyError

logger = logging.getLogger(__name__)


def list_output_contents(batch_dir: Path) -> List[str]:
    """Non-hidden, non-system entries of batch_dir; directories end with '/'."""
    batch_dir = Path(batch_dir)
    if not batch_dir.exists():
        return []
    if not batch_dir.is_dir():
        raise ConfigurationError(
            f"Batches path '{batch_dir}' is a file, not a directory. Remove it or choose another output directory."
        )
    return [
        f"{entry.name}/" if entry.is_dir() else entry.name
        for entry in sorted(batch_dir.iterdir(), key=lambda p: p.name)
        if not is_system_name(entry.name)
    ]


def ensure_output_ready(batch_dir: Path) -> bool:
    """
    Raises OutputNotEmptyError if batch_dir already holds batches or other
    files; creates it when missing. Returns True if the directory was created.
    """
    batch_dir = Path(batch_dir)
    contents = list_output_contents(batch_dir)
    if contents:
        raise OutputNotEmptyError(batch_dir, contents)
    if batch_dir.exists():
        return False
    batch_dir.mkdir(parents=True)
    logger.info("Created batches directory %s", batch_dir)
    return True


def measure_tree(directory: Path) -> Tuple[int, int]:
    """Total bytes and file count under directory, skipping hidden, system and manifest files."""
    total_size = 0
    total_count = 0
    for dirpath, dirnames, filenames in os.walk(directory):
        dirnames[:] = [d for d in dirnames if not is_system_name(d)]
        for name in filenames:
            if is_system_name(name) or name == MANIFEST_NAME:
                continue
            total_size += os.path.getsize(os.path.join(dirpath, name))
            total_count += 1
    return total_size, total_count
