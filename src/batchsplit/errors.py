# src/batchsplit/errors.py
from pathlib import Path
from typing import List, Optional


class BatchSplitError(Exception):
    """Base class for every error raised by batchsplit."""


class ConfigurationError(BatchSplitError):
    pass


class InputNotFoundError(BatchSplitError):
    def __init__(self, input_dir: Path):
        self.input_dir = input_dir
        super().__init__(
            f"Input directory '{input_dir}' does not exist. Create it and add the files to batch."
        )


class EmptyInputError(BatchSplitError):
    def __init__(self, input_dir: Path):
        self.input_dir = input_dir
        super().__init__(
            f"No valid files found in input directory '{input_dir}'. Please add some files to process."
        )


class OutputNotEmptyError(BatchSplitError):
    def __init__(self, batch_dir: Path, contents: List[str]):
        self.batch_dir = batch_dir
        self.contents = contents
        listing = "\n".join(f"- {item}" for item in contents)
        super().__init__(
            f"Found existing files in batches directory '{batch_dir}':\n{listing}\n"
            "Please manually delete all files and folders in the batches directory before proceeding."
        )


class PerEntryIOError(BatchSplitError):
    """A single file or directory could not be read, stat'd, renamed or copied."""

    def __init__(self, path: Path, operation: str, cause: Optional[BaseException] = None):
        self.path = path
        self.operation = operation
        self.cause = cause
        reason = cause.strerror if isinstance(cause, OSError) and cause.strerror else cause
        super().__init__(f"Could not {operation} '{path}': {reason}")


class RunCancelled(BatchSplitError):
    pass
