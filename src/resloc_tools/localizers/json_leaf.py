"""
JSON leaf localizer

Leaf records encoded as UTF-8 JSON::

    {
      "assembly": "App",
      "elements": [
        {"uid": "Title_1", "type": "System.Windows.Controls.TextBlock",
         "properties": {"Text": "Hello", "Width": "80"},
         "types": {"Width": "Double"}}
      ]
    }

Each ``(uid, type, property)`` is one localizable unit. The optional comment
file is a JSON object mapping key cells (``uid:Type.Property``) to comments.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

from ..core.keys import encode_key
from ..core.localizer import Localizability, LocalizabilityResolver, TranslationSet
from ..core.models import LocalizableKey, LocalizableUnit, LocalizationCategory

logger = logging.getLogger(__name__)


def _load_document(data: bytes) -> dict[str, Any]:
    try:
        doc = json.loads(data.decode("utf-8-sig"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ValueError(f"leaf record is not valid JSON: {e}") from e
    if not isinstance(doc, dict) or not isinstance(doc.get("elements", []), list):
        raise ValueError("leaf record must be an object with an 'elements' list")
    for index, element in enumerate(doc.get("elements", [])):
        if not isinstance(element, dict):
            raise ValueError(f"leaf record element {index} is not an object")
        for field in ("properties", "types"):
            if not isinstance(element.get(field, {}), dict):
                raise ValueError(f"leaf record element {index} has a non-object {field!r}")
    return doc


def _load_comments(comments: Optional[str]) -> dict[str, str]:
    if not comments:
        return {}
    try:
        raw = json.loads(comments)
    except json.JSONDecodeError as e:
        logger.warning(f"Ignoring unreadable comment file: {e}")
        return {}
    if not isinstance(raw, dict):
        return {}
    return {str(k): str(v) for k, v in raw.items()}


def _combine(element: Localizability, prop: Localizability) -> tuple[LocalizationCategory, bool, bool]:
    category = prop.category
    if category is LocalizationCategory.INHERIT:
        category = element.category
    if category is LocalizationCategory.INHERIT:
        category = LocalizationCategory.TEXT
    modifiable = element.modifiable and prop.modifiable and category is not LocalizationCategory.NEVER_LOCALIZE
    return category, element.readable and prop.readable, modifiable


class JsonLeafLocalizer:
    """Reads and rewrites JSON leaf records."""

    def __init__(self, indent: Optional[int] = 2):
        self.indent = indent

    def extract(
        self,
        data: bytes,
        resolver: LocalizabilityResolver,
        comments: Optional[str] = None,
    ) -> dict[LocalizableKey, LocalizableUnit]:
        doc = _load_document(data)
        container = str(doc.get("assembly", ""))
        notes = _load_comments(comments)
        units: dict[LocalizableKey, LocalizableUnit] = {}

        for element in doc.get("elements", []):
            uid = str(element.get("uid", ""))
            type_name = str(element.get("type", ""))
            if not uid or not type_name:
                continue
            element_loc = resolver.element_localizability(container, type_name)
            if element_loc.category is LocalizationCategory.IGNORE:
                continue

            types = element.get("types", {})
            for prop, value in element.get("properties", {}).items():
                prop_loc = resolver.property_localizability(container, type_name, prop)
                if prop_loc is None:
                    value_type = types.get(prop)
                    prop_loc = resolver.element_localizability(container, value_type) if value_type else Localizability()
                if prop_loc.category is LocalizationCategory.IGNORE:
                    continue

                category, readable, modifiable = _combine(element_loc, prop_loc)
                key = LocalizableKey(uid, type_name, prop)
                units[key] = LocalizableUnit(
                    category=category,
                    readable=readable,
                    modifiable=modifiable,
                    comment=notes.get(encode_key(key), ""),
                    content="" if value is None else str(value),
                )
        return units

    def apply(
        self,
        data: bytes,
        translations: TranslationSet,
        comments: Optional[str] = None,
    ) -> bytes:
        doc = _load_document(data)
        index = {
            (str(el.get("uid", "")), str(el.get("type", ""))): el
            for el in doc.get("elements", [])
        }

        for key, unit in translations.items():
            element = index.get((key.unit_id, key.type_name))
            if element is None:
                logger.debug(f"No element for {encode_key(key)}, skipped")
                continue
            props = element.setdefault("properties", {})
            if unit is None:
                # 删除：移除该属性
                props.pop(key.property_name, None)
            elif unit.modifiable:
                props[key.property_name] = unit.content or ""

        text = json.dumps(doc, ensure_ascii=False, indent=self.indent)
        return text.encode("utf-8")
