"""Input classification by file extension."""

from __future__ import annotations

import enum
from pathlib import Path
from typing import Optional

from ..utils.config import LocalizeConfig
from ..utils.logger import UnsupportedContainerShapeError


class FileType(enum.Enum):
    LEAF = "leaf"
    FLAT = "flat"
    COMPOSITE = "composite"
    CSV = "csv"
    TXT = "txt"


def _suffix(path: str | Path) -> str:
    return Path(path).suffix.lower()


def classify(path: str | Path, config: Optional[LocalizeConfig] = None) -> FileType:
    """Classify a top-level input.

    Raises:
        UnsupportedContainerShapeError: the extension is not recognized
    """
    config = config or LocalizeConfig()
    suffix = _suffix(path)
    if suffix in config.leaf_extensions:
        return FileType.LEAF
    if suffix in config.flat_extensions:
        return FileType.FLAT
    if suffix in config.composite_extensions:
        return FileType.COMPOSITE
    if suffix == ".csv":
        return FileType.CSV
    if suffix == ".txt":
        return FileType.TXT
    raise UnsupportedContainerShapeError(f"Unsupported input type {suffix or '(none)'!r}", file_path=Path(path))


def is_executable(path: str | Path, config: Optional[LocalizeConfig] = None) -> bool:
    config = config or LocalizeConfig()
    return _suffix(path) in config.executable_extensions


def is_leaf_name(name: str, config: Optional[LocalizeConfig] = None) -> bool:
    """True for an inner entry name carrying a leaf extension."""
    config = config or LocalizeConfig()
    return _suffix(name) in config.leaf_extensions


def is_flat_name(name: str, config: Optional[LocalizeConfig] = None) -> bool:
    config = config or LocalizeConfig()
    return _suffix(name) in config.flat_extensions
