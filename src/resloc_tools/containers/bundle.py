"""
Composite bundle (``.dll`` / ``.exe``)

A zip archive whose members are the manifest entries (flat containers, bare
leaf records, anything else). The archive comment records the bundle name
and culture as ``key=value`` lines.
"""

from __future__ import annotations

import logging
import zipfile
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Optional, Union

from ..utils.logger import ContainerIOError

logger = logging.getLogger(__name__)


@dataclass
class BundleInfo:
    name: str
    culture: Optional[str] = None
    module: Optional[str] = None

    def to_comment(self) -> bytes:
        lines = [f"name={self.name}"]
        if self.culture:
            lines.append(f"culture={self.culture}")
        if self.module:
            lines.append(f"module={self.module}")
        return "\n".join(lines).encode("utf-8")

    @classmethod
    def from_comment(cls, comment: bytes, fallback_name: str) -> "BundleInfo":
        fields: dict[str, str] = {}
        for line in comment.decode("utf-8", errors="replace").splitlines():
            key, sep, value = line.partition("=")
            if sep:
                fields[key.strip()] = value.strip()
        return cls(
            name=fields.get("name") or fallback_name,
            culture=fields.get("culture") or None,
            module=fields.get("module") or None,
        )


class BundleReader:
    """Read-only view of a bundle; members are read one at a time."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        try:
            self._zip = zipfile.ZipFile(self.path, "r")
        except (OSError, zipfile.BadZipFile) as e:
            raise ContainerIOError(f"Cannot open bundle: {e}", container=self.path.name, file_path=self.path) from e
        self.info = BundleInfo.from_comment(self._zip.comment, fallback_name=self.path.stem)

    def names(self) -> list[str]:
        """Manifest entry names in stored order."""
        return [item.filename for item in self._zip.infolist() if not item.is_dir()]

    def read(self, name: str) -> bytes:
        try:
            return self._zip.read(name)
        except (OSError, KeyError, zipfile.BadZipFile) as e:
            raise ContainerIOError(f"Cannot read bundle entry: {e}", container=self.path.name, entry=name) from e

    def close(self) -> None:
        self._zip.close()

    def __enter__(self) -> "BundleReader":
        return self

    def __exit__(self, *exc) -> None:
        self.close()


class BundleWriter:
    """Writes manifest entries in the order they are added."""

    def __init__(self, stream: Union[str, Path, BinaryIO], info: BundleInfo):
        self.info = info
        self._zip = zipfile.ZipFile(stream, "w", compression=zipfile.ZIP_DEFLATED)
        self._count = 0

    def add(self, name: str, data: bytes) -> None:
        self._zip.writestr(name, data)
        self._count += 1

    def close(self) -> None:
        self._zip.comment = self.info.to_comment()
        self._zip.close()
        logger.debug(f"Bundle {self.info.name}: {self._count} entries written")

    def __enter__(self) -> "BundleWriter":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
