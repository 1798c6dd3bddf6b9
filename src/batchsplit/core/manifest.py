# src/batchsplit/core/manifest.py
import json
import logging
from pathlib import Path
from typing import Any, Dict, List

from batchsplit.config import MANIFEST_NAME
from batchsplit.models import Batch

logger = logging.getLogger(__name__)


def build_manifest(batch: Batch, batch_path: Path) -> Dict[str, Any]:
    """Manifest record for a batch; file paths are relative to the batch directory."""
    return {
        "batchPath": str(batch_path),
        "fileCount": batch.file_count,
        "totalSize": sum(p.descriptor.size for p in batch.placements),
        "files": [
            {"path": p.batch_relative_path, "size": p.descriptor.size}
            for p in batch.placements
        ],
    }


def write_manifest(batch: Batch, batch_path: Path) -> Path:
    """Writes batch_manifest.json into batch_path, replacing any existing one."""
    batch_path = Path(batch_path)
    batch_path.mkdir(parents=True, exist_ok=True)
    manifest_file = batch_path / MANIFEST_NAME
    with open(manifest_file, "w", encoding="utf-8") as f:
        json.dump(build_manifest(batch, batch_path), f, indent=2)
        f.write("\n")
    logger.debug("Wrote %s", manifest_file)
    return manifest_file


def write_manifests(batches: List[Batch], batch_dir: Path) -> List[Path]:
    return [write_manifest(batch, Path(batch_dir) / batch.name) for batch in batches]
