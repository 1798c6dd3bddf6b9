# src/batchsplit/core/packer.py
"""
Batch packing.

Packing happens in two phases. ``plan_batches`` walks the files once, in a
deterministic order, and decides for every file which batch and which
batch-local subfolder it lands in. ``copy_batches`` then materializes that
plan on disk. All decisions, including the names of clashing files, are
made before the first copy; the copy phase only moves files whose copy
failed out of their batch.
"""
import logging
import os
import shutil
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Set

from batchsplit.config import ROOT_GROUP
from batchsplit.errors import PerEntryIOError, RunCancelled
from batchsplit.models import Batch, FileDescriptor, PackerState, PackResult, Placement

logger = logging.getLogger(__name__)


def group_files(files: Iterable[FileDescriptor]) -> Dict[Optional[str], List[FileDescriptor]]:
    """
    Groups by top-level subfolder, keeping groups in order of first appearance.
    Files directly under the root are keyed by None.
    """
    groups: Dict[Optional[str], List[FileDescriptor]] = {}
    for f in files:
        groups.setdefault(f.group, []).append(f)
    return groups


def offering_order(files: Iterable[FileDescriptor]) -> List[FileDescriptor]:
    """
    Flattens the groups into the sequence offered to the packer: groups in
    order of first appearance, each sorted by creation time, then by
    relative path.
    """
    ordered: List[FileDescriptor] = []
    for members in group_files(files).values():
        ordered.extend(sorted(members, key=lambda f: (f.created, f.relative_path)))
    return ordered


def group_label(group: Optional[str]) -> str:
    return ROOT_GROUP if group is None else group


def subfolder_dir_name(group: Optional[str], occurrence: int) -> str:
    return f"{group_label(group)}_{occurrence:02d}"


def _next_occurrence(state: PackerState, group: Optional[str]) -> int:
    # Counted per directory label, so a real 'root' folder and the top-level
    # files never share a root_NN directory.
    label = group_label(group)
    state.occurrences[label] = state.occurrences.get(label, 0) + 1
    return state.occurrences[label]


def unique_name(name: str, used: Set[str]) -> str:
    """Returns 'name', or 'stem_N.ext' with the lowest free N; records the result in 'used'."""
    candidate = name
    stem, ext = os.path.splitext(name)
    n = 1
    while candidate.lower() in used:
        candidate = f"{stem}_{n}{ext}"
        n += 1
    used.add(candidate.lower())
    return candidate


def _new_batch(state: PackerState, oversized: bool = False) -> Batch:
    batch = Batch(index=len(state.batches) + 1, oversized=oversized)
    state.batches.append(batch)
    return batch


def _add(batch: Batch, descriptor: FileDescriptor, occurrence: int) -> Placement:
    subfolder_dir = subfolder_dir_name(descriptor.group, occurrence)
    # Same-named files from different nested folders share one subfolder directory
    name = unique_name(descriptor.display_name, batch.used_names.setdefault(subfolder_dir, set()))
    if name != descriptor.display_name:
        logger.info("Name clash in %s/%s: copying %s as %s", batch.name, subfolder_dir, descriptor.relative_path, name)
    placement = Placement(
        descriptor,
        batch.index,
        subfolder_dir,
        target_name=None if name == descriptor.display_name else name,
    )
    batch.placements.append(placement)
    batch.accumulated_size += descriptor.size
    return placement


def place_file(state: PackerState, descriptor: FileDescriptor) -> Placement:
    """Decides where one file goes and records it in ``state``."""
    group = descriptor.group

    if descriptor.size > state.batch_size:
        # Alone in a batch of its own; the open batch keeps filling afterwards.
        batch = _new_batch(state, oversized=True)
        occurrence = _next_occurrence(state, group)
        batch.subfolder_assignments[group] = occurrence
        return _add(batch, descriptor, occurrence)

    batch = state.open_batch
    if batch is None or batch.accumulated_size + descriptor.size > state.batch_size:
        batch = _new_batch(state)
        state.open_batch = batch

    occurrence = batch.subfolder_assignments.get(group)
    if occurrence is None:
        occurrence = _next_occurrence(state, group)
        batch.subfolder_assignments[group] = occurrence
    return _add(batch, descriptor, occurrence)


def plan_batches(files: Iterable[FileDescriptor], batch_size: int) -> PackerState:
    state = PackerState(batch_size=batch_size)
    for descriptor in offering_order(files):
        place_file(state, descriptor)
    return state


def batch_path(batch_dir: Path, batch: Batch) -> Path:
    return Path(batch_dir) / batch.name


def copy_batches(
    batches: List[Batch],
    batch_dir: Path,
    fail_fast: bool = False,
    should_cancel: Optional[Callable[[], bool]] = None,
) -> PackResult:
    """
    Copies every planned file into batch_dir/batch_NN/<group>_NN/<name>.

    With fail_fast=False a failed copy is recorded in PackResult.errors, its
    placement moves from batch.placements to batch.failed, and the remaining
    files are still copied. With fail_fast=True the first failure is raised
    as PerEntryIOError.
    """
    result = PackResult(batches=batches)
    for batch in batches:
        target_batch = batch_path(batch_dir, batch)
        for placement in list(batch.placements):
            if should_cancel is not None and should_cancel():
                raise RunCancelled(f"Packing cancelled before {placement.descriptor.absolute_path}")

            source = placement.descriptor.absolute_path
            target = target_batch / placement.subfolder_dir / placement.name
            try:
                target.parent.mkdir(parents=True, exist_ok=True)
                shutil.copy2(source, target)
            except OSError as e:
                failure = PerEntryIOError(source, "copy file", e)
                if fail_fast:
                    raise failure from e
                logger.warning("%s", failure)
                result.errors.append(failure)
                batch.placements.remove(placement)
                batch.failed.append(placement)
                batch.accumulated_size -= placement.descriptor.size
                continue
            result.copied += 1
        logger.info("Filled %s: %d files, %d bytes", batch.name, batch.file_count, batch.accumulated_size)
    return result


def pack_batches(
    files: Iterable[FileDescriptor],
    batch_dir: Path,
    batch_size: int,
    fail_fast: bool = False,
    dry_run: bool = False,
    should_cancel: Optional[Callable[[], bool]] = None,
) -> PackResult:
    state = plan_batches(files, batch_size)
    logger.info("Planned %d batches for %d files", len(state.batches), len(state.placements))
    if dry_run:
        return PackResult(batches=state.batches)
    return copy_batches(state.batches, batch_dir, fail_fast=fail_fast, should_cancel=should_cancel)
