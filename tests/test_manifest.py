# tests/test_manifest.py
import json
from pathlib import Path

from batchsplit.core.manifest import build_manifest, write_manifest, write_manifests
from batchsplit.core.packer import plan_batches
from batchsplit.models import FileDescriptor


def make(rel, size, created):
    return FileDescriptor(Path("/in") / rel, size, Path(rel).name, rel, created)


def test_manifest_describes_batch(tmp_path):
    state = plan_batches([make("photos/a.jpg", 300, 1), make("b.txt", 200, 2)], batch_size=1000)
    batch = state.batches[0]

    manifest_file = write_manifest(batch, tmp_path / batch.name)
    data = json.loads(manifest_file.read_text(encoding="utf-8"))

    assert manifest_file.name == "batch_manifest.json"
    assert data == {
        "batchPath": str(tmp_path / "batch_01"),
        "fileCount": 2,
        "totalSize": 500,
        "files": [
            {"path": "photos_01/a.jpg", "size": 300},
            {"path": "root_01/b.txt", "size": 200},
        ],
    }


def test_manifest_overwrites_existing(tmp_path):
    state = plan_batches([make("a.txt", 10, 1)], batch_size=1000)
    batch_path = tmp_path / "batch_01"
    batch_path.mkdir()
    (batch_path / "batch_manifest.json").write_text("stale", encoding="utf-8")

    write_manifest(state.batches[0], batch_path)
    write_manifest(state.batches[0], batch_path)

    data = json.loads((batch_path / "batch_manifest.json").read_text(encoding="utf-8"))
    assert data["fileCount"] == 1


def test_one_manifest_per_batch(tmp_path):
    state = plan_batches([make("big.bin", 5000, 1), make("a.txt", 10, 2)], batch_size=1000)
    paths = write_manifests(state.batches, tmp_path)

    assert [p.parent.name for p in paths] == ["batch_01", "batch_02"]
    assert build_manifest(state.batches[0], paths[0].parent)["totalSize"] == 5000
