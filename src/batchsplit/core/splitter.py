# src/batchsplit/core/splitter.py
import logging
from pathlib import Path
from typing import Callable, Optional

from batchsplit.config import IGNORE_FILE_NAME, Settings
from batchsplit.core.ignore import IgnoreFilter, load_ignore_spec
from batchsplit.core.manifest import write_manifests
from batchsplit.core.output import ensure_output_ready, list_output_contents
from batchsplit.core.packer import pack_batches
from batchsplit.core.scanner import TreeScanner
from batchsplit.errors import EmptyInputError, InputNotFoundError, OutputNotEmptyError
from batchsplit.models import RunResult

logger = logging.getLogger(__name__)


def create_batches(settings: Settings, should_cancel: Optional[Callable[[], bool]] = None) -> RunResult:
    """
    One full run: check the input and output directories, scan (renaming if
    enabled), pack into batches and write a manifest per batch.

    Raises InputNotFoundError, OutputNotEmptyError or EmptyInputError before
    anything is written to the batches directory.
    """
    input_dir = Path(settings.input_dir)
    batch_dir = Path(settings.batch_dir)

    if not input_dir.is_dir():
        raise InputNotFoundError(input_dir)

    # Checked before scanning so a rejected run never renames input files.
    existing = list_output_contents(batch_dir)
    if existing:
        raise OutputNotEmptyError(batch_dir, existing)

    ignore_spec = load_ignore_spec(input_dir / IGNORE_FILE_NAME)
    scanner = TreeScanner(
        input_dir,
        settings.allowed_extensions,
        rename=settings.rename_files,
        ignore_filter=IgnoreFilter(spec=ignore_spec),
        should_cancel=should_cancel,
    )
    scan = scanner.scan()
    if not scan.files:
        raise EmptyInputError(input_dir)

    created = False
    if not settings.dry_run:
        created = ensure_output_ready(batch_dir)

    pack = pack_batches(
        scan.files,
        batch_dir,
        settings.batch_size,
        fail_fast=settings.fail_fast,
        dry_run=settings.dry_run,
        should_cancel=should_cancel,
    )
    if settings.write_manifests and not settings.dry_run:
        pack.manifests = write_manifests(pack.batches, batch_dir)

    logger.info("Created %d batches in %s", len(pack.batches), batch_dir)
    return RunResult(scan=scan, pack=pack, created_output_dir=created)
