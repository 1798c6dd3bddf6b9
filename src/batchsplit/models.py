# src/batchsplit/models.py
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Set

from batchsplit.errors import PerEntryIOError


@dataclass
class FileDescriptor:
    """One discovered input file. Only absolute_path changes, and only while scanning."""
    absolute_path: Path
    size: int
    display_name: str
    relative_path: str = ""
    created: float = 0.0

    @property
    def group(self) -> Optional[str]:
        """First path segment relative to the scan root, or None for top-level files."""
        parts = Path(self.relative_path).parts
        return parts[0] if len(parts) > 1 else None


@dataclass(frozen=True)
class SkippedEntry:
    path: Path
    reason: str


@dataclass
class ScanReport:
    """
    Result of a tree scan. 'ignored' holds entries dropped by a filter,
    'errors' holds entries lost to I/O failures.
    """
    files: List[FileDescriptor] = field(default_factory=list)
    ignored: List[SkippedEntry] = field(default_factory=list)
    errors: List[PerEntryIOError] = field(default_factory=list)
    renamed: int = 0

    @property
    def total_size(self) -> int:
        return sum(f.size for f in self.files)


@dataclass(frozen=True)
class Placement:
    """Final home of one file: batch index plus the batch-local subfolder directory."""
    descriptor: FileDescriptor
    batch_index: int
    subfolder_dir: str
    target_name: Optional[str] = None

    @property
    def name(self) -> str:
        """File name inside the subfolder; differs from display_name only after a clash."""
        return self.target_name or self.descriptor.display_name

    @property
    def batch_relative_path(self) -> str:
        return f"{self.subfolder_dir}/{self.name}"


@dataclass
class Batch:
    index: int
    oversized: bool = False
    accumulated_size: int = 0
    subfolder_assignments: Dict[Optional[str], int] = field(default_factory=dict)
    placements: List[Placement] = field(default_factory=list)
    # Lower-cased names already taken in each subfolder directory
    used_names: Dict[str, Set[str]] = field(default_factory=dict)
    # Placements whose copy failed; no longer part of the batch contents
    failed: List[Placement] = field(default_factory=list)

    @property
    def name(self) -> str:
        return f"batch_{self.index:02d}"

    @property
    def file_count(self) -> int:
        return len(self.placements)


@dataclass
class PackerState:
    """All mutable packing state. Placement decisions thread this value through."""
    batch_size: int
    open_batch: Optional[Batch] = None
    occurrences: Dict[str, int] = field(default_factory=dict)
    batches: List[Batch] = field(default_factory=list)

    @property
    def placements(self) -> List[Placement]:
        return [p for b in sorted(self.batches, key=lambda b: b.index) for p in b.placements]


@dataclass
class PackResult:
    batches: List[Batch] = field(default_factory=list)
    copied: int = 0
    errors: List[PerEntryIOError] = field(default_factory=list)
    manifests: List[Path] = field(default_factory=list)

    @property
    def total_size(self) -> int:
        return sum(b.accumulated_size for b in self.batches)


@dataclass
class RunResult:
    scan: ScanReport
    pack: PackResult
    created_output_dir: bool = False

    @property
    def totals_match(self) -> bool:
        """Whether every scanned file made it into a batch."""
        placed = sum(b.file_count for b in self.pack.batches)
        return (
            not self.pack.errors
            and placed == len(self.scan.files)
            and self.pack.total_size == self.scan.total_size
        )
