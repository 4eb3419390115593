"""Validation of file path arguments passed to packaging operations."""

from __future__ import annotations

import os
from pathlib import Path

from aumai_packageseal.errors import InvalidArgumentError


def require_readable_file(path: str | Path | None, description: str) -> Path:
    """Return *path* as a :class:`Path` if it names an existing, readable file.

    Raises:
        InvalidArgumentError: if *path* is empty, missing, a directory, or
            not readable by the current process.
    """
    if path is None or str(path) == "":
        raise InvalidArgumentError(f"The {description} must be specified.")
    file_path = Path(path)
    if not file_path.exists():
        raise InvalidArgumentError(f"The {description} '{file_path}' does not exist.")
    if not file_path.is_file():
        raise InvalidArgumentError(f"The {description} '{file_path}' is not a file.")
    if not os.access(file_path, os.R_OK):
        raise InvalidArgumentError(f"The {description} '{file_path}' is not readable.")
    return file_path


__all__ = ["require_readable_file"]
