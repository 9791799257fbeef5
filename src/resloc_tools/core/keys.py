"""
Resource key cells.

A localizable unit is addressed in the table by two cells: the stream name
(``App.g.resources:main.baml`` for a leaf inside a flat container, or the bare
file name for a standalone leaf) and the key cell
``{unit_id}:{type_name}.{property_name}``.
"""

from __future__ import annotations

import ntpath
from typing import Optional

from .models import LocalizableKey
from ..utils.logger import MalformedKeyError

STREAM_SEPARATOR = ":"


def _basename(name: str) -> str:
    # manifest and entry names may carry either separator
    return ntpath.basename(name)


def combine_stream_name(container: str, entry: str) -> str:
    """Name a leaf inside a flat container: ``{container}:{entry}`` (base names only)."""
    return f"{_basename(container)}{STREAM_SEPARATOR}{_basename(entry)}"


def encode_key(key: LocalizableKey) -> str:
    return f"{key.unit_id}:{key.type_name}.{key.property_name}"


def decode_key(cell: str, row_number: Optional[int] = None) -> LocalizableKey:
    """Split a key cell on its last ``:`` and then on the last ``.`` after it.

    Unit ids may contain dots and colons of their own, type names may be
    namespace qualified; the property name never contains a dot.
    """
    name_end = cell.rfind(":")
    if name_end < 0:
        raise MalformedKeyError("Resource key has no ':' separator", key=cell, row_number=row_number)

    class_end = cell.rfind(".")
    if class_end < name_end or class_end == len(cell) - 1:
        raise MalformedKeyError("Resource key has no '.TypeName.Property' part", key=cell, row_number=row_number)

    return LocalizableKey(
        unit_id=cell[:name_end],
        type_name=cell[name_end + 1:class_end],
        property_name=cell[class_end + 1:],
    )
