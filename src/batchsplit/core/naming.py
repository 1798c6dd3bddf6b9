# src/batchsplit/core/naming.py
import re
from pathlib import Path

from batchsplit.config import MAX_FILENAME_LENGTH, UNWANTED_FILES

_SYSTEM_NAMES = {name.lower() for name in UNWANTED_FILES}

_HYPHENATED = re.compile(r"\s*-\s*")
_NOT_ALNUM_OR_HYPHEN = re.compile(r"[^a-zA-Z0-9-]")
_NOT_ALNUM = re.compile(r"[^a-zA-Z0-9]")
_LETTERS_DIGITS = re.compile(r"^[A-Za-z]+\d+")
_LETTERS = re.compile(r"^[A-Za-z]+")


def normalize_category(name: str) -> str:
    """
    'Photos - Regular' -> 'photos-regular', 'My Trip' -> 'my-trip'.
    Names that already carry a hyphen keep only letters, digits and hyphens;
    others have every non-alphanumeric character turned into a hyphen.
    """
    if _HYPHENATED.search(name):
        cleaned = _NOT_ALNUM_OR_HYPHEN.sub("", name)
    else:
        cleaned = _NOT_ALNUM.sub("-", name)
    return cleaned.lower()


def extract_identifier(stem: str) -> str:
    """'IMG1234 copy' -> 'IMG1234', 'scan_final' -> 'scan', '2023-05' -> '2023-05'."""
    match = _LETTERS_DIGITS.match(stem) or _LETTERS.match(stem)
    return match.group(0) if match else stem


def _categories(directories):
    """Main and sub category for a list of directory segments under the root."""
    if not directories:
        return "", ""
    main = normalize_category(directories[0])
    if len(directories) < 2:
        return main, ""
    sub = directories[1]
    # Second-level directories are renamed to 'main_sub'; strip that prefix so
    # a renamed tree yields the same names again.
    if main and sub.startswith(main + "_"):
        sub = sub[len(main) + 1:]
    return main, normalize_category(sub)


def generate_name(path: Path, root: Path, is_directory: bool = False) -> str:
    """
    Builds the normalized name for a file or directory from its position under root.

    Directories become 'main' or 'main_sub'; files become
    'main_sub_identifier.ext'. Names never exceed MAX_FILENAME_LENGTH and a
    file keeps its (lower-cased) extension.
    """
    path = Path(path)
    if path.name.lower() in _SYSTEM_NAMES:
        return path.name

    try:
        parts = path.relative_to(root).parts
    except ValueError:
        return path.name
    if not parts:
        return path.name

    if is_directory:
        main, sub = _categories(parts)
        dir_name = f"{main}_{sub}" if sub else main
        return dir_name[:MAX_FILENAME_LENGTH] or path.name

    main, sub = _categories(parts[:-1])
    stem, ext = path.stem, path.suffix.lower()
    prefix = "_".join(p for p in (main, sub) if p)
    if prefix and stem.startswith(prefix + "_"):
        stem = stem[len(prefix) + 1:]

    identifier = extract_identifier(stem).lower()
    if prefix and not identifier:
        # A stem of exactly prefix_ is what truncation leaves behind; keep it.
        full_stem = prefix + "_"
    else:
        full_stem = "_".join(p for p in (prefix, identifier) if p)
    if not full_stem:
        return path.name

    full_name = full_stem + ext
    if len(full_name) > MAX_FILENAME_LENGTH:
        if len(ext) >= MAX_FILENAME_LENGTH:
            return full_name[:MAX_FILENAME_LENGTH]
        return full_stem[:MAX_FILENAME_LENGTH - len(ext)] + ext
    return full_name
