"""
Leaf localizer contract

The binary record format of a single leaf is not handled here. A leaf
localizer extracts ``{LocalizableKey: LocalizableUnit}`` from leaf bytes and
applies a translation set back onto them; a localizability resolver tells it
which types and properties are translatable.

Also provides:
- ResolverCache: per-run lookup cache handed to the resolver
- AttributeTableResolver: resolver driven by a JSON attribute table
- CommentLocator: finds the companion comment file of an input
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Hashable, Mapping, Optional, Protocol, TypeVar

from .models import LocalizableKey, LocalizableUnit, LocalizationCategory
from ..utils.io import read_optional_text
from ..utils.logger import ConfigurationError, log_exceptions

logger = logging.getLogger(__name__)

T = TypeVar("T")

# 翻译集合：None 表示该单元被删除
TranslationSet = Mapping[LocalizableKey, Optional[LocalizableUnit]]


@dataclass(frozen=True)
class Localizability:
    """Localizability metadata of a type or property."""

    category: LocalizationCategory = LocalizationCategory.INHERIT
    readable: bool = True
    modifiable: bool = True


class LocalizabilityResolver(Protocol):
    def element_localizability(self, container: str, type_name: str) -> Localizability:
        ...

    def property_localizability(
        self, container: str, type_name: str, property_name: str
    ) -> Optional[Localizability]:
        ...


class LeafLocalizer(Protocol):
    def extract(
        self,
        data: bytes,
        resolver: LocalizabilityResolver,
        comments: Optional[str] = None,
    ) -> dict[LocalizableKey, LocalizableUnit]:
        ...

    def apply(
        self,
        data: bytes,
        translations: TranslationSet,
        comments: Optional[str] = None,
    ) -> bytes:
        ...


class ResolverCache:
    """Memoizes resolver lookups for the duration of one run."""

    def __init__(self) -> None:
        self._entries: dict[Hashable, Any] = {}
        self.hits = 0
        self.misses = 0

    def get_or_compute(self, key: Hashable, compute: Callable[[], T]) -> T:
        if key in self._entries:
            self.hits += 1
            return self._entries[key]
        self.misses += 1
        value = compute()
        self._entries[key] = value
        return value

    def clear(self) -> None:
        self._entries.clear()
        self.hits = 0
        self.misses = 0

    def stats(self) -> dict[str, int]:
        return {"entries": len(self._entries), "hits": self.hits, "misses": self.misses}

    def __len__(self) -> int:
        return len(self._entries)


# 基本值类型默认不可读，Uri 默认不可修改
_NOT_READABLE = Localizability(LocalizationCategory.NONE, readable=False, modifiable=True)
_NOT_MODIFIABLE = Localizability(LocalizationCategory.NONE, readable=True, modifiable=False)

DEFAULT_ATTRIBUTES: dict[str, Localizability] = {
    **{
        name: _NOT_READABLE
        for name in (
            "Boolean", "Byte", "SByte", "Char", "Decimal", "Double", "Single",
            "Int16", "UInt16", "Int32", "UInt32", "Int64", "UInt64",
        )
    },
    "Uri": _NOT_MODIFIABLE,
}


def _short_name(type_name: str) -> str:
    return type_name.rsplit(".", 1)[-1]


def _parse_attribute(name: str, raw: Any) -> Localizability:
    if not isinstance(raw, dict):
        raise ConfigurationError(f"Attribute entry for {name!r} must be an object", config_key=name)
    try:
        category = LocalizationCategory.parse(str(raw.get("category", "Inherit")))
    except ValueError:
        raise ConfigurationError(f"Unknown category {raw.get('category')!r}", config_key=name) from None
    return Localizability(
        category=category,
        readable=bool(raw.get("readable", True)),
        modifiable=bool(raw.get("modifiable", True)),
    )


class AttributeTableResolver:
    """Resolver backed by a table of ``Type`` and ``Type.Property`` entries.

    Type entries are matched on the full name first, then on the name after
    the last dot. Types not in the table fall back to the built-in defaults,
    and finally to ``Inherit``.
    """

    def __init__(
        self,
        attributes: Optional[Mapping[str, Localizability]] = None,
        cache: Optional[ResolverCache] = None,
    ):
        self.attributes: dict[str, Localizability] = dict(attributes or {})
        self.cache = cache if cache is not None else ResolverCache()

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any], cache: Optional[ResolverCache] = None) -> "AttributeTableResolver":
        return cls({name: _parse_attribute(name, value) for name, value in raw.items()}, cache)

    @classmethod
    def load(cls, path: str | Path, cache: Optional[ResolverCache] = None) -> "AttributeTableResolver":
        """Load a JSON attribute table.

        Raises:
            ConfigurationError: the file is missing or not a JSON object
        """
        try:
            with open(path, "r", encoding="utf-8-sig") as f:
                raw = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"Cannot read attribute table: {e}", config_key="attributes_file") from e
        if not isinstance(raw, dict):
            raise ConfigurationError("Attribute table must be a JSON object", config_key="attributes_file")
        logger.debug(f"Loaded {len(raw)} localizability attributes from {path}")
        return cls.from_mapping(raw, cache)

    def _lookup_type(self, type_name: str) -> Localizability:
        for name in (type_name, _short_name(type_name)):
            if name in self.attributes:
                return self.attributes[name]
        return DEFAULT_ATTRIBUTES.get(_short_name(type_name), Localizability())

    def element_localizability(self, container: str, type_name: str) -> Localizability:
        return self.cache.get_or_compute(
            ("element", container, type_name),
            lambda: self._lookup_type(type_name),
        )

    def property_localizability(
        self, container: str, type_name: str, property_name: str
    ) -> Optional[Localizability]:
        def compute() -> Optional[Localizability]:
            for name in (f"{type_name}.{property_name}", f"{_short_name(type_name)}.{property_name}"):
                if name in self.attributes:
                    return self.attributes[name]
            return None

        return self.cache.get_or_compute(("property", container, type_name, property_name), compute)


class CommentLocator:
    """Companion comment file: same base name as the input, fixed extension."""

    def __init__(self, extension: str = ".loc"):
        self.extension = extension if extension.startswith(".") else f".{extension}"

    def locate(self, path: str | Path) -> Path:
        return Path(path).with_suffix(self.extension)

    @log_exceptions(reraise=False, default_return=None)
    def read(self, path: str | Path) -> Optional[str]:
        """Comment text, or None when there is no readable comment file."""
        text = read_optional_text(self.locate(path))
        if text is not None:
            logger.debug(f"Using comments from {self.locate(path).name}")
        return text
