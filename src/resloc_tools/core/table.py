"""
Translation table

Built once per generation run from the edited delimited file and read-only
afterwards. Rows are shaped::

    stream, key, category, readable, modifiable, comment, content

A row with an empty first cell is a comment line. A row that stops after the
key (or whose category cell is empty) marks the unit as deleted.
"""

from __future__ import annotations

import logging
from pathlib import Path
from types import MappingProxyType
from typing import Iterable, Iterator, Mapping, Optional, Sequence

from .delimited import DelimitedReader, TableFormat, format_for_path
from .keys import decode_key
from .models import LocalizableKey, LocalizableUnit, LocalizationCategory, parse_bool
from ..utils.io import open_table_for_read
from ..utils.logger import MalformedRowError

logger = logging.getLogger(__name__)

# 每个流的翻译集合：键 -> 单元（None 表示删除）
StreamTranslations = Mapping[LocalizableKey, Optional[LocalizableUnit]]

_EMPTY: StreamTranslations = MappingProxyType({})

COLUMN_STREAM = 0
COLUMN_KEY = 1
COLUMN_CATEGORY = 2
COLUMN_READABLE = 3
COLUMN_MODIFIABLE = 4
COLUMN_COMMENT = 5
COLUMN_CONTENT = 6


def _cell(row: Sequence[str], index: int) -> Optional[str]:
    return row[index] if index < len(row) else None


def _parse_unit(row: Sequence[str], row_number: int, stream: str) -> Optional[LocalizableUnit]:
    category_cell = _cell(row, COLUMN_CATEGORY)
    if not category_cell:
        return None

    # readable, modifiable and comment travel with the category; content may be cut off
    for index in (COLUMN_READABLE, COLUMN_MODIFIABLE, COLUMN_COMMENT):
        if _cell(row, index) is None:
            raise MalformedRowError(
                "Row has a category but is missing trailing columns",
                row_number=row_number,
                stream_name=stream,
                column=index + 1,
            )

    try:
        category = LocalizationCategory.parse(category_cell)
    except ValueError:
        raise MalformedRowError(
            f"Unknown localization category {category_cell!r}",
            row_number=row_number,
            stream_name=stream,
            column=COLUMN_CATEGORY + 1,
        ) from None

    flags = []
    for index in (COLUMN_READABLE, COLUMN_MODIFIABLE):
        try:
            flags.append(parse_bool(row[index]))
        except ValueError:
            raise MalformedRowError(
                f"Expected True or False, got {row[index]!r}",
                row_number=row_number,
                stream_name=stream,
                column=index + 1,
            ) from None

    return LocalizableUnit(
        category=category,
        readable=flags[0],
        modifiable=flags[1],
        comment=row[COLUMN_COMMENT],
        content=_cell(row, COLUMN_CONTENT) or "",
    )


class TranslationTable:
    """Stream name (case-insensitive) -> ordered ``{LocalizableKey: unit or None}``."""

    def __init__(self) -> None:
        # lower-cased name -> (name as first seen, translations)
        self._streams: dict[str, tuple[str, dict[LocalizableKey, Optional[LocalizableUnit]]]] = {}

    def _add(self, stream: str, key: LocalizableKey, unit: Optional[LocalizableUnit]) -> None:
        entry = self._streams.get(stream.lower())
        if entry is None:
            entry = (stream, {})
            self._streams[stream.lower()] = entry
        # 重复行：后出现的覆盖先出现的
        entry[1][key] = unit

    @classmethod
    def from_rows(cls, rows: Iterable[Sequence[str]]) -> "TranslationTable":
        """Build a table from already split rows.

        Raises:
            MalformedRowError: a row is too short or has bad trailing cells
            MalformedKeyError: a key cell cannot be decoded
        """
        table = cls()
        for row_number, row in enumerate(rows, start=1):
            stream = _cell(row, COLUMN_STREAM)
            if not stream:
                continue

            key_cell = _cell(row, COLUMN_KEY)
            if not key_cell:
                raise MalformedRowError("Row has no resource key", row_number=row_number, stream_name=stream)

            key = decode_key(key_cell, row_number=row_number)
            table._add(stream, key, _parse_unit(row, row_number, stream))

        logger.debug(f"Translation table: {len(table)} streams")
        return table

    @classmethod
    def read(cls, reader: DelimitedReader) -> "TranslationTable":
        return cls.from_rows(iter(reader))

    def __getitem__(self, stream: str) -> StreamTranslations:
        entry = self._streams.get(stream.lower())
        return entry[1] if entry is not None else _EMPTY

    def get(self, stream: str) -> Optional[StreamTranslations]:
        entry = self._streams.get(stream.lower())
        return entry[1] if entry is not None else None

    def __contains__(self, stream: object) -> bool:
        return isinstance(stream, str) and stream.lower() in self._streams

    def __len__(self) -> int:
        return len(self._streams)

    def __iter__(self) -> Iterator[str]:
        return iter(self.stream_names())

    def stream_names(self) -> list[str]:
        return [name for name, _ in self._streams.values()]


def load_translation_table(path: str | Path, fmt: Optional[TableFormat] = None) -> TranslationTable:
    """Read a ``.csv`` / ``.txt`` translation file into a table."""
    fmt = fmt or format_for_path(path)
    with open_table_for_read(path) as f:
        return TranslationTable.read(DelimitedReader(f, fmt))
