# src/batchsplit/cli.py
import argparse
import logging
import sys
from pathlib import Path

from batchsplit.config import load_settings
from batchsplit.core.output import measure_tree
from batchsplit.core.splitter import create_batches
from batchsplit.core.tree import format_size, render_batch_tree
from batchsplit.errors import BatchSplitError


def create_arg_parser():
    parser = argparse.ArgumentParser(
        description="Split a directory tree into size-bounded batches, keeping each file's subfolder grouping."
    )
    parser.add_argument("input_dir", type=str, nargs="?", default=None, help="Input directory (default: $INPUT_DIR or ./input_files)")
    parser.add_argument("-o", "--output", type=str, default=None, help="Batches directory (default: $BATCH_DIR or ./batches)")
    parser.add_argument("-s", "--batch-size", type=str, default=None, help="Maximum batch size in bytes (default: $BATCH_SIZE)")
    parser.add_argument("-e", "--extensions", type=str, default=None, help="Comma-separated file extensions or '*' for all")
    parser.add_argument("--rename", action="store_true", default=None, help="Rename input files and folders to the normalized scheme")
    parser.add_argument("--fail-fast", action="store_true", default=None, help="Abort on the first file that cannot be copied")
    parser.add_argument("--no-manifest", action="store_true", help="Do not write batch_manifest.json files")
    parser.add_argument("--dry-run", action="store_true", help="Show the batch plan without copying anything")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log every skipped and renamed entry")
    return parser


def configure_logging(verbose: bool):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="  > [%(levelname)s] %(message)s",
        stream=sys.stderr,
    )


def main(argv=None):
    try:
        # 1. Setup
        parser = create_arg_parser()
        args = parser.parse_args(argv)
        configure_logging(args.verbose)

        settings = load_settings(
            batch_size=args.batch_size,
            allowed_extensions=args.extensions,
            input_dir=args.input_dir,
            batch_dir=args.output,
            rename_files=args.rename,
            fail_fast=args.fail_fast,
            write_manifests=False if args.no_manifest else None,
            dry_run=args.dry_run or None,
        )

        print("--- batchsplit ---")
        print(f"Input:    {settings.input_dir}")
        print(f"Output:   {settings.batch_dir}")
        print(f"Limit:    {settings.batch_size} bytes ({format_size(settings.batch_size)})")
        print(f"Mode:     {'All file types' if settings.match_all_extensions else 'Extensions ' + ', '.join(sorted(settings.allowed_extensions))}")
        if settings.rename_files:
            print("Renaming: input directories and files will be renamed in place")

        # 2. Scan, pack, write manifests
        result = create_batches(settings)

        # 3. Review & Stats
        scan, pack = result.scan, result.pack
        print(f"\nFound {len(scan.files)} files to process ({len(scan.ignored)} ignored, {len(scan.errors)} unreadable)")
        if scan.renamed:
            print(f"Renamed {scan.renamed} entries")
        print(f"\n--- {'Planned' if settings.dry_run else 'Created'} Batches ---")
        print(render_batch_tree(pack.batches, Path(settings.batch_dir).name or "batches", show_files=args.verbose))

        for failure in scan.errors + pack.errors:
            print(f"Error: {failure}", file=sys.stderr)

        if settings.dry_run:
            print(f"Dry run: {len(pack.batches)} batches planned, nothing copied.")
            return 0

        batched_size, batched_count = measure_tree(settings.batch_dir)
        print(f"Input files:   {len(scan.files)} files, {format_size(scan.total_size)} ({scan.total_size} bytes)")
        print(f"Batched files: {batched_count} files, {format_size(batched_size)} ({batched_size} bytes)")
        print(f"Number of batches: {len(pack.batches)}")

        if batched_count != len(scan.files) or batched_size != scan.total_size or not result.totals_match:
            print("Warning: Input and batched files do not match!", file=sys.stderr)
            return 1

        print("\nAll files batched correctly.")
        return 0

    except KeyboardInterrupt:
        print("\nCancelled.")
        return 1

    except BatchSplitError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
