"""
Output naming for a target locale.

- ``App.de.resources``      -> ``App.fr.resources``      (embedded locale segment)
- ``App.resources.dll``     -> ``App.fr.resources.dll``  (satellite bundle)
- ``App.exe``               -> ``App.resources.dll``     (satellite of an executable)
- ``App.g.de.resources``    -> ``App.g.resources``       (neutral manifest name)

Every rule is idempotent: naming an already named output again for the same
target locale returns it unchanged.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Iterable, Optional

from .filetypes import FileType

SATELLITE_SUFFIX = ".resources.dll"
RESOURCES_EXTENSION = ".resources"

# 语法检查，按规范大小写：语言小写，书写系统首字母大写，地区大写或三位数字
_LOCALE_TAG = re.compile(
    r"^[a-z]{2,3}"
    r"(?:-[A-Z][a-z]{3})?"
    r"(?:-(?:[A-Z]{2}|[0-9]{3}))?"
    r"(?:-(?:[A-Za-z0-9]{5,8}|[0-9][A-Za-z0-9]{3}))*$"
)


def is_valid_locale_tag(tag: Optional[str]) -> bool:
    """Syntactic check of a locale tag such as ``fr``, ``en-US`` or ``sr-Latn-RS``.

    No culture database is consulted, so ``xx-ZZ`` passes.
    """
    return bool(tag) and _LOCALE_TAG.match(tag) is not None


def _same_locale(a: Optional[str], b: Optional[str]) -> bool:
    return bool(a) and bool(b) and a.lower() == b.lower()


def _ends_with(name: str, suffix: str) -> bool:
    return name.lower().endswith(suffix.lower())


def _with_locale_before(name: str, suffix: str, source_locale: Optional[str], target_locale: str) -> str:
    """``{stem}{suffix}`` -> ``{stem}.{target}{suffix}``, replacing a locale already there."""
    stem = name[: len(name) - len(suffix)]
    head, dot, last = stem.rpartition(".")
    if dot and (_same_locale(last, source_locale) or _same_locale(last, target_locale)):
        stem = head
    return f"{stem}.{target_locale}{name[len(name) - len(suffix):]}"


def derive_output_name(
    source_name: str,
    source_locale: Optional[str],
    target_locale: str,
    container_suffixes: Iterable[str] = (SATELLITE_SUFFIX,),
) -> str:
    """Name of the localized counterpart of ``source_name``.

    1. A name ending in a composite container suffix gets ``.{target}``
       inserted before the suffix.
    2. A name shaped ``Base.{locale}.{ext}`` has its locale segment replaced
       when the segment is a valid locale tag.
    3. Anything else is returned unchanged.
    """
    for suffix in container_suffixes:
        if _ends_with(source_name, suffix) and len(source_name) > len(suffix):
            return _with_locale_before(source_name, suffix, source_locale, target_locale)

    last_dot = source_name.rfind(".")
    if last_dot <= 0:
        return source_name
    second_dot = source_name.rfind(".", 0, last_dot)
    if second_dot <= 0:
        return source_name

    segment = source_name[second_dot + 1:last_dot]
    if not is_valid_locale_tag(segment) and not _same_locale(segment, source_locale):
        return source_name
    return f"{source_name[:second_dot + 1]}{target_locale}{source_name[last_dot:]}"


def satellite_bundle_name(neutral_name: str, target_locale: str, suffix: str = SATELLITE_SUFFIX) -> str:
    """``App.resources.dll`` -> ``App.{target}.resources.dll``; other names unchanged."""
    if not _ends_with(neutral_name, suffix) or len(neutral_name) <= len(suffix):
        return neutral_name
    return _with_locale_before(neutral_name, suffix, None, target_locale)


def neutral_resource_name(name: str, source_locale: Optional[str]) -> str:
    """Strip the source locale segment in front of ``.resources``.

    ``App.g.de.resources`` with source ``de`` becomes ``App.g.resources``.
    Names without that segment, or an invariant source, are returned as is.
    """
    if not source_locale:
        return name
    end = name.lower().rfind(RESOURCES_EXTENSION)
    if end <= 0:
        return name
    start = name.rfind(".", 0, end)
    if start > 0 and _same_locale(name[start + 1:end], source_locale):
        return name[:start] + name[end:]
    return name


def culture_specific_resource_name(neutral_name: str, target_locale: Optional[str]) -> str:
    """Insert the target locale before the extension: ``App.g.resources`` -> ``App.g.fr.resources``."""
    if not target_locale:
        return neutral_name
    stem, dot, ext = neutral_name.rpartition(".")
    if not dot:
        return f"{neutral_name}.{target_locale}"
    if _same_locale(stem.rpartition(".")[2], target_locale):
        return neutral_name
    return f"{stem}.{target_locale}.{ext}"


def output_file_name(
    path: str | Path,
    file_type: FileType,
    target_locale: str,
    source_locale: Optional[str] = None,
    executable: bool = False,
    satellite_suffix: str = SATELLITE_SUFFIX,
) -> str:
    """Local file name (no directory) of the generated output for ``path``."""
    name = Path(path).name
    if file_type is FileType.LEAF:
        return name
    if file_type is FileType.COMPOSITE:
        if executable:
            return Path(name).stem + satellite_suffix
        return name
    if file_type is FileType.FLAT:
        return derive_output_name(name, source_locale, target_locale, container_suffixes=())
    raise ValueError(f"No output name for {file_type.value} input {name!r}")
