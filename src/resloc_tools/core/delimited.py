"""
Delimited text codec for the translation table.

Two variants share one grammar: comma separated (``.csv``) and tab separated
(``.txt``). A field that contains the delimiter, a double quote, CR or LF is
written inside double quotes with every inner quote doubled. The reader is a
pull reader driven by a four state machine; see ``DelimitedReader.read_row``.
"""

from __future__ import annotations

import enum
import io
import os
from pathlib import Path
from typing import IO, Iterable, Iterator, Optional


class TableFormat(enum.Enum):
    """Translation table flavour, valued by its delimiter."""

    CSV = ","
    TXT = "\t"

    @property
    def delimiter(self) -> str:
        return self.value

    @property
    def extension(self) -> str:
        return ".csv" if self is TableFormat.CSV else ".txt"

    @classmethod
    def from_name(cls, name: str) -> "TableFormat":
        return cls.CSV if name.lower().lstrip(".") == "csv" else cls.TXT


def delimiter_for(fmt: TableFormat) -> str:
    return fmt.delimiter


def format_for_path(path: str | Path) -> TableFormat:
    """``.csv`` (any case) is comma separated, everything else is tab separated."""
    return TableFormat.CSV if Path(path).suffix.lower() == ".csv" else TableFormat.TXT


class ReadState(enum.Enum):
    TOKEN_START = 0
    QUOTED_CONTENT = 1
    UNQUOTED_CONTENT = 2
    LINE_END = 3


class DelimitedWriter:
    """Writes rows one column at a time."""

    def __init__(self, stream: IO[str], fmt: TableFormat = TableFormat.CSV, line_terminator: str = os.linesep):
        self._stream = stream
        self._delimiter = delimiter_for(fmt)
        self._specials = ('"', "\r", "\n", self._delimiter)
        self._line_terminator = line_terminator
        self._first_column = True
        self.rows_written = 0

    def write_column(self, value: Optional[str]) -> None:
        # None is written as an empty cell
        value = value or ""
        if any(ch in value for ch in self._specials):
            value = '"' + value.replace('"', '""') + '"'

        if self._first_column:
            self._first_column = False
        else:
            self._stream.write(self._delimiter)
        self._stream.write(value)

    def end_line(self) -> None:
        self._stream.write(self._line_terminator)
        self._first_column = True
        self.rows_written += 1

    def write_row(self, values: Iterable[Optional[str]]) -> None:
        for value in values:
            self.write_column(value)
        self.end_line()

    def close(self) -> None:
        self._stream.close()

    def __enter__(self) -> "DelimitedWriter":
        return self

    def __exit__(self, *exc) -> None:
        self.close()


class DelimitedReader:
    """Pull reader over a delimited text stream.

    ``read_row()`` returns False at end of input, otherwise True with the
    row's cells available through ``columns`` / ``get_column()``. The whole
    stream is buffered on construction; translation tables are small compared
    to the containers they describe.
    """

    def __init__(self, stream: IO[str], fmt: TableFormat = TableFormat.CSV):
        self._stream = stream
        self._text = stream.read()
        self._pos = 0
        self._delimiter = delimiter_for(fmt)
        self._columns: Optional[list[str]] = None
        self.row_number = 0

    @property
    def columns(self) -> list[str]:
        return list(self._columns or [])

    def get_column(self, index: int) -> Optional[str]:
        if self._columns is not None and 0 <= index < len(self._columns):
            return self._columns[index]
        return None

    def _read(self) -> str:
        if self._pos >= len(self._text):
            return ""
        ch = self._text[self._pos]
        self._pos += 1
        return ch

    def _peek(self) -> str:
        if self._pos >= len(self._text):
            return ""
        return self._text[self._pos]

    def _at_newline(self, ch: str) -> bool:
        """True on ``\\n`` or on a ``\\r`` followed by ``\\n`` (the ``\\n`` is consumed)."""
        if ch == "\n":
            return True
        if ch == "\r" and self._peek() == "\n":
            self._pos += 1
            return True
        return False

    def _skip_all_newlines(self) -> str:
        """Skip blank lines; return the first char after them ('' at EOF)."""
        while True:
            ch = self._read()
            if not ch or not self._at_newline(ch):
                return ch

    def read_row(self) -> bool:
        current = self._skip_all_newlines()
        if not current:
            return False

        state = ReadState.TOKEN_START
        columns: list[str] = []
        buffer: list[str] = []
        delimiter = self._delimiter

        while True:
            if state is ReadState.TOKEN_START:
                if current == delimiter:
                    columns.append("".join(buffer))
                    buffer = []
                elif current == '"':
                    # opening quote is not part of the value
                    state = ReadState.QUOTED_CONTENT
                elif self._at_newline(current):
                    state = ReadState.LINE_END
                else:
                    buffer.append(current)
                    state = ReadState.UNQUOTED_CONTENT

            elif state is ReadState.UNQUOTED_CONTENT:
                if current == delimiter:
                    columns.append("".join(buffer))
                    buffer = []
                    state = ReadState.TOKEN_START
                elif self._at_newline(current):
                    state = ReadState.LINE_END
                else:
                    # a bare quote here is ordinary content
                    buffer.append(current)

            elif state is ReadState.QUOTED_CONTENT:
                if current == '"':
                    if self._peek() == '"':
                        self._pos += 1
                        buffer.append('"')
                    else:
                        state = ReadState.UNQUOTED_CONTENT
                else:
                    buffer.append(current)

            if state is ReadState.LINE_END:
                break
            current = self._read()
            if not current:
                break

        if buffer:
            columns.append("".join(buffer))

        self._columns = columns
        self.row_number += 1
        return True

    def __iter__(self) -> Iterator[list[str]]:
        while self.read_row():
            yield self.columns

    def close(self) -> None:
        self._stream.close()

    def __enter__(self) -> "DelimitedReader":
        return self

    def __exit__(self, *exc) -> None:
        self.close()


def format_row(values: Iterable[Optional[str]], fmt: TableFormat = TableFormat.CSV, line_terminator: str = "\n") -> str:
    """Render one row, terminator included."""
    buf = io.StringIO(newline="")
    DelimitedWriter(buf, fmt, line_terminator).write_row(values)
    return buf.getvalue()


def parse_rows(text: str, fmt: TableFormat = TableFormat.CSV) -> list[list[str]]:
    """Read every row of ``text``."""
    return list(DelimitedReader(io.StringIO(text, newline=""), fmt))
