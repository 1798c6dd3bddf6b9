# src/batchsplit/core/scanner.py
import logging
import os
from pathlib import Path
from typing import Callable, List, Optional, Set, Tuple

from batchsplit.config import WILDCARD
from batchsplit.core.ignore import IgnoreFilter
from batchsplit.core.naming import generate_name
from batchsplit.errors import PerEntryIOError, RunCancelled
from batchsplit.models import FileDescriptor, ScanReport, SkippedEntry

logger = logging.getLogger(__name__)


def creation_time(stat_result: os.stat_result) -> float:
    """Birth time where the platform records it, otherwise st_ctime."""
    return getattr(stat_result, "st_birthtime", stat_result.st_ctime)


class TreeScanner:
    def __init__(
        self,
        root_dir: Path,
        extensions: Set[str],
        rename: bool = False,
        ignore_filter: Optional[IgnoreFilter] = None,
        should_cancel: Optional[Callable[[], bool]] = None,
    ):
        self.root_dir = Path(root_dir)
        self.extensions = extensions
        self.match_all = WILDCARD in extensions
        self.rename = rename
        self.ignore_filter = ignore_filter or IgnoreFilter()
        self.should_cancel = should_cancel
        self.report = ScanReport()

    def _rel(self, path: Path) -> str:
        return path.relative_to(self.root_dir).as_posix()

    def _has_allowed_extension(self, path: Path) -> bool:
        if self.match_all:
            return True
        return path.suffix.lower() in self.extensions

    def _skip(self, path: Path, reason: str):
        logger.debug("Skipping %s (%s)", path, reason)
        self.report.ignored.append(SkippedEntry(path, reason))

    def _fail(self, path: Path, operation: str, error: OSError):
        failure = PerEntryIOError(path, operation, error)
        logger.warning("%s", failure)
        self.report.errors.append(failure)

    def _rename_entry(self, path: Path, is_directory: bool) -> Path:
        """
        Renames 'path' to its generated name and returns the new path.
        Returns 'path' unchanged when the name is already normalized.
        Raises OSError when the rename fails or the target is taken.
        """
        new_name = generate_name(path, self.root_dir, is_directory=is_directory)
        if new_name == path.name:
            return path

        target = path.with_name(new_name)
        if target.exists() and not os.path.samefile(path, target):
            raise FileExistsError(f"target '{new_name}' already exists")
        path.rename(target)
        self.report.renamed += 1
        logger.debug("Renamed %s -> %s", path, new_name)
        return target

    def _scan_file(self, path: Path) -> Optional[FileDescriptor]:
        try:
            st = path.stat()
        except OSError as e:
            self._fail(path, "stat file", e)
            return None

        if self.rename:
            try:
                path = self._rename_entry(path, is_directory=False)
            except OSError as e:
                self._fail(path, "rename file", e)
                return None

        return FileDescriptor(
            absolute_path=path,
            size=st.st_size,
            display_name=path.name,
            created=creation_time(st),
        )

    def _scan_dir(self, directory: Path) -> Tuple[Path, List[FileDescriptor]]:
        """
        Scans one directory and returns (final_directory_path, descriptors).
        The directory itself is renamed after its subtree, and the returned
        descriptors are re-rooted under the new name.
        """
        files: List[FileDescriptor] = []
        try:
            with os.scandir(directory) as it:
                entries = sorted(it, key=lambda e: e.name)
        except OSError as e:
            self._fail(directory, "read directory", e)
            entries = []

        for entry in entries:
            if self.should_cancel is not None and self.should_cancel():
                raise RunCancelled(f"Scan cancelled at '{directory}'")

            entry_path = directory / entry.name
            rel_path = self._rel(entry_path)
            try:
                is_dir = entry.is_dir()
                is_file = not is_dir and entry.is_file()
            except OSError as e:
                self._fail(entry_path, "stat entry", e)
                continue

            reason = self.ignore_filter.reason(entry.name, rel_path, is_directory=is_dir)
            if reason:
                self._skip(entry_path, reason)
                continue

            if is_dir:
                _, sub_files = self._scan_dir(entry_path)
                files.extend(sub_files)
            elif is_file:
                if not self._has_allowed_extension(entry_path):
                    self._skip(entry_path, "extension not allowed")
                    continue
                descriptor = self._scan_file(entry_path)
                if descriptor is not None:
                    files.append(descriptor)
            else:
                self._skip(entry_path, "not a regular file")

        if not self.rename or directory == self.root_dir:
            return directory, files

        try:
            new_directory = self._rename_entry(directory, is_directory=True)
        except OSError as e:
            self._fail(directory, "rename directory", e)
            return directory, files

        if new_directory != directory:
            for f in files:
                f.absolute_path = new_directory / f.absolute_path.relative_to(directory)
        return new_directory, files

    def scan(self) -> ScanReport:
        """
        Walks the tree under root_dir and returns a ScanReport whose files
        carry their final (post-rename) paths.
        """
        self.report = ScanReport()
        _, files = self._scan_dir(self.root_dir)
        for f in files:
            f.relative_path = self._rel(f.absolute_path)
        self.report.files = files
        logger.info(
            "Scanned %s: %d files kept, %d ignored, %d errors",
            self.root_dir, len(files), len(self.report.ignored), len(self.report.errors),
        )
        return self.report


def scan_tree(root_dir: Path, extensions: Set[str], rename: bool = False, **kwargs) -> ScanReport:
    return TreeScanner(root_dir, extensions, rename=rename, **kwargs).scan()
