"""
Container walker / repackager

Inputs are modelled as four node kinds:

- LeafNode       a single localizable record stream
- OpaqueNode     any payload that is copied through unchanged
- FlatNode       a ``.resources`` container (leaves and opaque entries)
- CompositeNode  a bundle of flat containers and manifest entries

``Repackager._emit()`` walks one node and writes its localized form to a
binary sink; ``iter_leaf_streams()`` walks the same shapes in the extraction
direction.
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO, Iterator, Optional, Union

from .filetypes import FileType, classify, is_executable, is_flat_name, is_leaf_name
from .keys import combine_stream_name
from .localizer import LeafLocalizer, LocalizabilityResolver, TranslationSet
from .naming import (
    culture_specific_resource_name,
    neutral_resource_name,
    output_file_name,
    satellite_bundle_name,
)
from .table import TranslationTable
from ..containers.bundle import BundleInfo, BundleReader, BundleWriter
from ..containers.resources import EntryKind, ResourceEntry, ResourceReader, ResourceWriter
from ..utils.config import LocalizeConfig
from ..utils.io import atomic_output
from ..utils.logger import ContainerIOError, InputOpenError, UnsupportedContainerShapeError

logger = logging.getLogger(__name__)

Payload = Union[bytes, ResourceEntry]


@dataclass
class LeafNode:
    stream_name: str
    entry_name: str
    source: Payload
    kind: EntryKind = EntryKind.VALUE

    def read(self) -> bytes:
        return self.source if isinstance(self.source, bytes) else self.source.read_bytes()


@dataclass
class OpaqueNode:
    entry_name: str
    source: Payload
    kind: EntryKind = EntryKind.VALUE


@dataclass
class FlatNode:
    display_name: str
    reader: ResourceReader


@dataclass
class CompositeNode:
    path: Path
    reader: BundleReader
    output_name: str


Node = Union[LeafNode, OpaqueNode, FlatNode, CompositeNode]


@dataclass
class SkippedLeaf:
    """A leaf whose translations were not applied under the tolerant error policy."""

    input: str
    stream_name: str
    reason: str

    def to_dict(self) -> dict[str, str]:
        return {"input": self.input, "stream": self.stream_name, "reason": self.reason}


def _flat_child(container: str, entry: ResourceEntry, config: LocalizeConfig) -> Union[LeafNode, OpaqueNode]:
    if is_leaf_name(entry.name, config):
        return LeafNode(combine_stream_name(container, entry.name), entry.name, entry, entry.kind)
    return OpaqueNode(entry.name, entry, entry.kind)


def _read_input(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except OSError as e:
        raise InputOpenError(f"Cannot open input: {e}", container=path.name, file_path=path) from e


def _open_flat(path: Path) -> ResourceReader:
    try:
        return ResourceReader(path)
    except ContainerIOError as e:
        raise InputOpenError(e.message, container=path.name, file_path=path) from e


def _open_bundle(path: Path) -> BundleReader:
    try:
        return BundleReader(path)
    except ContainerIOError as e:
        raise InputOpenError(e.message, container=path.name, file_path=path) from e


def localize_leaf(
    data: bytes,
    translations: Optional[TranslationSet],
    localizer: LeafLocalizer,
    resolver: LocalizabilityResolver,
    comments: Optional[str] = None,
) -> bytes:
    """Apply the genuinely changed part of ``translations`` to one leaf.

    Keys the source does not have and units whose content equals the source
    are dropped first. Nothing left means the leaf bytes are returned as is.
    """
    if not translations:
        return data

    source = localizer.extract(data, resolver, comments)
    changed = {
        key: unit
        for key, unit in translations.items()
        if key in source and (unit is None or unit.content != source[key].content)
    }
    if not changed:
        return data
    return localizer.apply(data, changed, comments)


class Repackager:
    """Regenerates input containers with translations applied.

    Args:
        table: translations for this run
        localizer: leaf record localizer
        resolver: localizability resolver handed to the localizer
        target_locale: culture of the generated output
        source_locale: culture of the inputs, used when a bundle does not record one
        config: run settings (error policy, extensions)
    """

    def __init__(
        self,
        table: TranslationTable,
        localizer: LeafLocalizer,
        resolver: LocalizabilityResolver,
        target_locale: str,
        source_locale: Optional[str] = None,
        config: Optional[LocalizeConfig] = None,
    ):
        self.table = table
        self.localizer = localizer
        self.resolver = resolver
        self.target_locale = target_locale
        self.source_locale = source_locale
        self.config = config or LocalizeConfig()
        self.skipped: list[SkippedLeaf] = []
        self._input = ""
        self._comments: Optional[str] = None

    # ------------------------------------------------------------------
    # 顶层入口
    # ------------------------------------------------------------------

    def generate(self, input_path: str | Path, output_dir: str | Path, comments: Optional[str] = None) -> Optional[Path]:
        """Generate the localized counterpart of one input file.

        Returns the written path, or None when the input was a leaf that the
        tolerant policy skipped.

        Raises:
            InputOpenError: the input cannot be opened
            ContainerIOError: a leaf failed (strict policy) or an entry copy failed
            UnsupportedContainerShapeError: the input type is not recognized
        """
        path = Path(input_path)
        file_type = classify(path, self.config)
        self._input = path.name
        self._comments = comments

        name = output_file_name(
            path,
            file_type,
            self.target_locale,
            source_locale=self.source_locale,
            executable=is_executable(path, self.config),
            satellite_suffix=self.config.satellite_suffix,
        )
        target = Path(output_dir) / name

        if file_type is FileType.LEAF:
            node: Node = LeafNode(path.name, path.name, _read_input(path))
            try:
                with atomic_output(target, "wb") as out:
                    self._emit(node, out)
            except ContainerIOError as e:
                if not self.config.tolerates_partial_output:
                    raise
                self._skip(node, e)
                return None

        elif file_type is FileType.FLAT:
            with _open_flat(path) as reader, atomic_output(target, "wb") as out:
                self._emit(FlatNode(path.name, reader), out)

        elif file_type is FileType.COMPOSITE:
            with _open_bundle(path) as reader, atomic_output(target, "wb") as out:
                self._emit(CompositeNode(path, reader, name), out)

        else:
            raise UnsupportedContainerShapeError(
                f"Cannot generate from a {file_type.value} file", file_path=path
            )

        logger.info(f"Generated {target}")
        return target

    # ------------------------------------------------------------------
    # 递归分派
    # ------------------------------------------------------------------

    def _emit(self, node: Node, out: BinaryIO) -> None:
        if isinstance(node, LeafNode):
            self._emit_leaf(node, out)
        elif isinstance(node, OpaqueNode):
            self._emit_opaque(node, out)
        elif isinstance(node, FlatNode):
            self._emit_flat(node, out)
        elif isinstance(node, CompositeNode):
            self._emit_composite(node, out)
        else:
            raise TypeError(f"unknown node {node!r}")

    def _emit_leaf(self, node: LeafNode, out: BinaryIO) -> None:
        logger.debug(f"Generating leaf {node.stream_name}")
        try:
            data = node.read()
            result = localize_leaf(
                data,
                self.table.get(node.stream_name),
                self.localizer,
                self.resolver,
                self._comments,
            )
        except (OSError, ValueError) as e:
            raise ContainerIOError(
                f"Cannot localize leaf: {e}", container=self._input, entry=node.stream_name
            ) from e
        out.write(result)

    def _emit_opaque(self, node: OpaqueNode, out: BinaryIO) -> None:
        source = node.source
        if isinstance(source, bytes):
            out.write(source)
            return
        # 非可序列化条目：在读取器关闭前复制到内存
        try:
            out.write(source.read_bytes())
        except OSError as e:
            raise ContainerIOError(
                f"Cannot copy entry: {e}", container=self._input, entry=node.entry_name
            ) from e

    def _emit_flat(self, node: FlatNode, out: BinaryIO) -> None:
        writer = ResourceWriter(out)
        for entry in node.reader:
            child = _flat_child(node.display_name, entry, self.config)
            buf = io.BytesIO()
            try:
                self._emit(child, buf)
            except ContainerIOError as e:
                if not (isinstance(child, LeafNode) and self.config.tolerates_partial_output):
                    raise
                source = self._keep_source(child, e)
                if source is not None:
                    writer.add(child.entry_name, source, child.kind)
                continue
            writer.add(child.entry_name, buf.getvalue(), child.kind)
        writer.generate()

    def _emit_composite(self, node: CompositeNode, out: BinaryIO) -> None:
        source_locale = node.reader.info.culture or self.source_locale
        info = BundleInfo(
            name=Path(node.output_name).stem,
            culture=self.target_locale,
            module=satellite_bundle_name(node.output_name, self.target_locale, self.config.satellite_suffix),
        )
        logger.info(f"Generating bundle {info.name} ({info.culture})")

        with BundleWriter(out, info) as writer:
            for name in node.reader.names():
                neutral = neutral_resource_name(name, source_locale)
                target_name = culture_specific_resource_name(neutral, self.target_locale)
                data = node.reader.read(name)

                if is_flat_name(neutral, self.config):
                    buf = io.BytesIO()
                    # 一次只展开一个内部容器
                    with ResourceReader(io.BytesIO(data), name=name) as inner:
                        self._emit(FlatNode(name, inner), buf)
                    writer.add(target_name, buf.getvalue())
                    continue

                if is_leaf_name(name, self.config):
                    child: Node = LeafNode(name, target_name, data)
                else:
                    child = OpaqueNode(target_name, data)

                buf = io.BytesIO()
                try:
                    self._emit(child, buf)
                except ContainerIOError as e:
                    if not (isinstance(child, LeafNode) and self.config.tolerates_partial_output):
                        raise
                    source = self._keep_source(child, e)
                    if source is not None:
                        writer.add(target_name, source)
                    continue
                writer.add(target_name, buf.getvalue())

    def _skip(self, node: LeafNode, error: ContainerIOError) -> None:
        logger.warning(f"Skipping leaf {node.stream_name}: {error}")
        self.skipped.append(SkippedLeaf(self._input, node.stream_name, str(error)))

    def _keep_source(self, node: LeafNode, error: ContainerIOError) -> Optional[bytes]:
        """Record a skipped leaf inside a container and return its untranslated bytes.

        None when the source itself cannot be read; the entry is then left out.
        """
        self._skip(node, error)
        try:
            return node.read()
        except (OSError, ValueError) as e:
            logger.warning(f"Leaving out {node.stream_name}: {e}")
            return None


def iter_leaf_streams(path: str | Path, config: Optional[LocalizeConfig] = None) -> Iterator[LeafNode]:
    """Every leaf stream of an input, named as the translation table names it.

    Containers stay open while the caller holds a yielded node, so
    ``node.read()`` must be called before advancing.
    """
    config = config or LocalizeConfig()
    path = Path(path)
    file_type = classify(path, config)

    if file_type is FileType.LEAF:
        yield LeafNode(path.name, path.name, _read_input(path))

    elif file_type is FileType.FLAT:
        with _open_flat(path) as reader:
            for entry in reader:
                if is_leaf_name(entry.name, config):
                    yield LeafNode(combine_stream_name(path.name, entry.name), entry.name, entry, entry.kind)

    elif file_type is FileType.COMPOSITE:
        with _open_bundle(path) as bundle:
            for name in bundle.names():
                if is_flat_name(name, config):
                    with ResourceReader(io.BytesIO(bundle.read(name)), name=name) as inner:
                        for entry in inner:
                            if is_leaf_name(entry.name, config):
                                yield LeafNode(combine_stream_name(name, entry.name), entry.name, entry, entry.kind)
                elif is_leaf_name(name, config):
                    yield LeafNode(name, name, bundle.read(name))

    else:
        raise UnsupportedContainerShapeError(
            f"Cannot extract from a {file_type.value} file", file_path=path
        )
