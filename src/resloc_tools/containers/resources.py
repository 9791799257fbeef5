"""
Flat resource container (``.resources``)

Layout (little endian)::

    header  : 4s magic "RSRC" | u16 version | u32 entry count
    entry   : u16 name length | name (UTF-8) | u8 kind | u32 payload length | payload

VALUE entries hold serialized bytes and are read eagerly. STREAM entries are
handles over a region of the open file; they carry no serializable marker and
have to be read while the container is still open.
"""

from __future__ import annotations

import enum
import io
import logging
import struct
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Iterator, Optional, Union

from ..utils.logger import ContainerIOError

logger = logging.getLogger(__name__)

MAGIC = b"RSRC"
VERSION = 1

_HEADER = struct.Struct("<4sHI")
_NAME_LEN = struct.Struct("<H")
_ENTRY_TAIL = struct.Struct("<BI")


class EntryKind(enum.IntEnum):
    STREAM = 0
    VALUE = 1


class _StreamHandle:
    """Deferred read of ``length`` bytes at ``offset`` of the container file."""

    def __init__(self, stream: BinaryIO, offset: int, length: int):
        self._stream = stream
        self.offset = offset
        self.length = length

    def read(self) -> bytes:
        self._stream.seek(self.offset)
        data = self._stream.read(self.length)
        if len(data) != self.length:
            raise OSError(f"expected {self.length} bytes at offset {self.offset}, got {len(data)}")
        return data


@dataclass
class ResourceEntry:
    name: str
    kind: EntryKind
    _payload: Union[bytes, _StreamHandle]

    @property
    def serializable(self) -> bool:
        return self.kind is EntryKind.VALUE

    def read_bytes(self) -> bytes:
        """Payload bytes; a STREAM entry is read from the container file."""
        if isinstance(self._payload, bytes):
            return self._payload
        return self._payload.read()


class ResourceReader:
    """Iterates the entries of a flat container in stored order.

    Accepts a path (opened and owned by the reader) or an open binary stream.
    """

    def __init__(self, source: Union[str, Path, BinaryIO], name: Optional[str] = None):
        if isinstance(source, (str, Path)):
            self.name = name or Path(source).name
            try:
                self._stream: BinaryIO = open(source, "rb")
            except OSError as e:
                raise ContainerIOError(f"Cannot open resource container: {e}", container=self.name, file_path=Path(source)) from e
            self._owns_stream = True
        else:
            self.name = name or getattr(source, "name", "<memory>")
            self._stream = source
            self._owns_stream = False
        self._count = self._read_header()

    def _fail(self, message: str, entry: Optional[str] = None) -> ContainerIOError:
        return ContainerIOError(message, container=self.name, entry=entry)

    def _read_exact(self, size: int, entry: Optional[str] = None) -> bytes:
        data = self._stream.read(size)
        if len(data) != size:
            raise self._fail("Unexpected end of resource container", entry)
        return data

    def _read_header(self) -> int:
        self._stream.seek(0)
        magic, version, count = _HEADER.unpack(self._read_exact(_HEADER.size))
        if magic != MAGIC:
            raise self._fail(f"Not a resource container (magic {magic!r})")
        if version != VERSION:
            raise self._fail(f"Unsupported resource container version {version}")
        return count

    def __len__(self) -> int:
        return self._count

    def __iter__(self) -> Iterator[ResourceEntry]:
        self._stream.seek(_HEADER.size)
        offset = _HEADER.size
        for _ in range(self._count):
            self._stream.seek(offset)
            (name_len,) = _NAME_LEN.unpack(self._read_exact(_NAME_LEN.size))
            name = self._read_exact(name_len).decode("utf-8")
            kind_raw, length = _ENTRY_TAIL.unpack(self._read_exact(_ENTRY_TAIL.size, name))
            try:
                kind = EntryKind(kind_raw)
            except ValueError:
                raise self._fail(f"Unknown entry kind {kind_raw}", name) from None

            payload_offset = offset + _NAME_LEN.size + name_len + _ENTRY_TAIL.size
            if kind is EntryKind.VALUE:
                payload: Union[bytes, _StreamHandle] = self._read_exact(length, name)
            else:
                payload = _StreamHandle(self._stream, payload_offset, length)
            offset = payload_offset + length
            yield ResourceEntry(name, kind, payload)

    def close(self) -> None:
        if self._owns_stream:
            self._stream.close()

    def __enter__(self) -> "ResourceReader":
        return self

    def __exit__(self, *exc) -> None:
        self.close()


class ResourceWriter:
    """Collects entries and writes the container on ``generate()``."""

    def __init__(self, stream: BinaryIO):
        self._stream = stream
        self._entries: list[tuple[str, EntryKind, bytes]] = []
        self._names: set[str] = set()

    def add(self, name: str, data: bytes, kind: EntryKind = EntryKind.VALUE) -> None:
        if name in self._names:
            raise ContainerIOError("Duplicate resource name", entry=name)
        self._names.add(name)
        self._entries.append((name, kind, bytes(data)))

    def generate(self) -> None:
        self._stream.write(_HEADER.pack(MAGIC, VERSION, len(self._entries)))
        for name, kind, data in self._entries:
            encoded = name.encode("utf-8")
            self._stream.write(_NAME_LEN.pack(len(encoded)))
            self._stream.write(encoded)
            self._stream.write(_ENTRY_TAIL.pack(int(kind), len(data)))
            self._stream.write(data)
        logger.debug(f"Wrote {len(self._entries)} resource entries")

    def __enter__(self) -> "ResourceWriter":
        return self

    def __exit__(self, exc_type, *exc) -> None:
        if exc_type is None:
            self.generate()


def build_resources(entries: list[tuple[str, bytes, EntryKind]]) -> bytes:
    """Serialize entries into container bytes."""
    buf = io.BytesIO()
    writer = ResourceWriter(buf)
    for name, data, kind in entries:
        writer.add(name, data, kind)
    writer.generate()
    return buf.getvalue()
