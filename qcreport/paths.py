"""
Path Resolution Utilities

Purpose:
- Validate every input path named on the command line before analysis starts
- Enforce strict separation between required inputs and creatable outputs

Design Constraints:
- Input paths MUST exist (fail-fast)
- Output paths are created ONLY when explicitly requested (create=True)
- Candidate work programs are the files directly inside a folder (no recursion)

Intent:
- Prevent silent misconfiguration
- A missing curriculum or folder stops the whole invocation, never one run
"""

from pathlib import Path
from typing import List, Union

PathLike = Union[str, Path]


class ConfigurationError(Exception):
    pass


def require_file(path: PathLike, what: str) -> Path:
    """
    Resolve an input file. Fails fast if it does not exist or is a directory.
    """
    p = Path(path)

    if not p.exists():
        raise ConfigurationError(f"{what} '{p}' not found")

    if not p.is_file():
        raise ConfigurationError(f"{what} '{p}' is not a file")

    return p


def require_dir(path: PathLike, what: str) -> Path:
    """
    Resolve an input directory. Fails fast if it does not exist or is a file.
    """
    p = Path(path)

    if not p.exists():
        raise ConfigurationError(f"{what} '{p}' not found")

    if not p.is_dir():
        raise ConfigurationError(f"Expected directory for {what}, found file: {p}")

    return p


def get_output_dir(path: PathLike, *, create: bool = False) -> Path:
    p = Path(path)

    if create:
        p.mkdir(parents=True, exist_ok=True)

    if not p.exists():
        raise ConfigurationError(f"Required path not found: {p}")

    if not p.is_dir():
        raise ConfigurationError(f"Expected directory, found file: {p}")

    return p


def list_candidates(folder: PathLike) -> List[Path]:
    """
    Files directly inside `folder`, sorted by name for deterministic runs.
    """
    root = require_dir(folder, "Work program folder")
    return sorted(p for p in root.iterdir() if p.is_file())
