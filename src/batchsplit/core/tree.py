# src/batchsplit/core/tree.py
from typing import Dict, List

from batchsplit.models import Batch


def format_size(size: int) -> str:
    mb = size / 1048576
    return f"{mb:.2f} MB" if mb >= 0.01 else f"{size} B"


def render_batch_tree(batches: List[Batch], root_name: str, show_files: bool = True) -> str:
    """Text tree of the batch layout: batch_NN / <group>_NN / file."""
    lines = [f"{root_name}/"]

    for i, batch in enumerate(batches):
        last_batch = i == len(batches) - 1
        label = f"{batch.name}  ({batch.file_count} files, {format_size(batch.accumulated_size)})"
        if batch.oversized:
            label += "  [oversized]"
        lines.append(("└── " if last_batch else "├── ") + label)
        batch_prefix = "    " if last_batch else "│   "

        subfolders: Dict[str, List[str]] = {}
        for p in batch.placements:
            subfolders.setdefault(p.subfolder_dir, []).append(p.name)

        entries = sorted(subfolders.items())
        for j, (subfolder, names) in enumerate(entries):
            last_sub = j == len(entries) - 1
            lines.append(batch_prefix + ("└── " if last_sub else "├── ") + f"{subfolder}/")
            if not show_files:
                continue
            sub_prefix = batch_prefix + ("    " if last_sub else "│   ")
            for k, name in enumerate(names):
                connector = "└── " if k == len(names) - 1 else "├── "
                lines.append(f"{sub_prefix}{connector}{name}")

    return "\n".join(lines) + "\n"
