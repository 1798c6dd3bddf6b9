# src/batchsplit/config.py
import os
from dataclasses import dataclass
from pathlib import Path
from typing import FrozenSet, Mapping, Optional

from batchsplit.errors import ConfigurationError

# OS metadata files, compared case-insensitively
UNWANTED_FILES = [
    ".ds_store",
    "thumbs.db",
    ".localized",
    ".spotlight-v100",
    ".trashes",
]

# Substrings that mark an entry as OS metadata wherever they appear in the name
METADATA_SUBSTRINGS = [".ds_store"]

HIDDEN_PREFIX = "."
WILDCARD = "*"
MAX_FILENAME_LENGTH = 100

DEFAULT_INPUT_DIR = "./input_files"
DEFAULT_BATCH_DIR = "./batches"
IGNORE_FILE_NAME = ".batchignore"
MANIFEST_NAME = "batch_manifest.json"
ROOT_GROUP = "root"


def parse_bool(raw: Optional[str]) -> bool:
    """Only the literal string 'true' (any case) enables a flag."""
    return raw is not None and raw.strip().lower() == "true"


def parse_batch_size(raw: Optional[str]) -> int:
    if raw is None or not raw.strip():
        raise ConfigurationError(
            "BATCH_SIZE is not set. Set it to the maximum batch size in bytes (e.g. BATCH_SIZE=1073741824)."
        )
    try:
        size = int(raw.strip())
    except ValueError:
        raise ConfigurationError(
            f"BATCH_SIZE must be a whole number of bytes, got '{raw}'."
        ) from None
    if size <= 0:
        raise ConfigurationError(f"BATCH_SIZE must be greater than zero, got {size}.")
    return size


def parse_extensions(raw: Optional[str]) -> FrozenSet[str]:
    """
    Turns 'jpg, .PNG,mp4' into {'.jpg', '.png', '.mp4'}.
    Absent, blank or '*' means every extension is accepted.
    """
    if raw is None or not raw.strip():
        return frozenset({WILDCARD})

    extensions = set()
    for ext in raw.split(","):
        trimmed = ext.strip().lower()
        if not trimmed:
            continue
        if trimmed == WILDCARD:
            return frozenset({WILDCARD})
        extensions.add(trimmed if trimmed.startswith(".") else "." + trimmed)

    if not extensions:
        raise ConfigurationError(
            f"ALLOWED_EXTENSIONS '{raw}' contains no extensions. Use a comma-separated list or '*'."
        )
    return frozenset(extensions)


@dataclass(frozen=True)
class Settings:
    """Run configuration, resolved once at startup."""
    batch_size: int
    input_dir: Path = Path(DEFAULT_INPUT_DIR)
    batch_dir: Path = Path(DEFAULT_BATCH_DIR)
    rename_files: bool = False
    allowed_extensions: FrozenSet[str] = frozenset({WILDCARD})
    fail_fast: bool = False
    write_manifests: bool = True
    dry_run: bool = False

    @property
    def match_all_extensions(self) -> bool:
        return WILDCARD in self.allowed_extensions


def load_settings(environ: Optional[Mapping[str, str]] = None, **overrides) -> Settings:
    """
    Builds Settings from environment-style keys. Keyword overrides (from the CLI)
    win over the environment; None values are ignored.
    """
    env = os.environ if environ is None else environ
    overrides = {k: v for k, v in overrides.items() if v is not None}

    if "batch_size" in overrides:
        batch_size = parse_batch_size(str(overrides.pop("batch_size")))
    else:
        batch_size = parse_batch_size(env.get("BATCH_SIZE"))

    if "allowed_extensions" in overrides:
        allowed = parse_extensions(overrides.pop("allowed_extensions"))
    else:
        allowed = parse_extensions(env.get("ALLOWED_EXTENSIONS"))

    values = {
        "batch_size": batch_size,
        "input_dir": Path(env.get("INPUT_DIR", DEFAULT_INPUT_DIR)),
        "batch_dir": Path(env.get("BATCH_DIR", DEFAULT_BATCH_DIR)),
        "rename_files": parse_bool(env.get("RENAME_INPUT_FILES")),
        "allowed_extensions": allowed,
        "fail_fast": parse_bool(env.get("FAIL_FAST")),
    }
    for key, value in overrides.items():
        values[key] = Path(value) if key in ("input_dir", "batch_dir") else value

    return Settings(**values)
