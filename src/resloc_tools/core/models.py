"""Value types shared by the translation table, the localizers and the walker."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional


class LocalizationCategory(enum.Enum):
    """Category of a localizable unit, as written in the third table column."""

    NONE = "None"
    TEXT = "Text"
    TITLE = "Title"
    LABEL = "Label"
    BUTTON = "Button"
    CHECK_BOX = "CheckBox"
    COMBO_BOX = "ComboBox"
    LIST_BOX = "ListBox"
    MENU = "Menu"
    RADIO_BUTTON = "RadioButton"
    TOOL_TIP = "ToolTip"
    HYPERLINK = "Hyperlink"
    TEXT_FLOW = "TextFlow"
    XML_DATA = "XmlData"
    FONT = "Font"
    INHERIT = "Inherit"
    IGNORE = "Ignore"
    NEVER_LOCALIZE = "NeverLocalize"

    @classmethod
    def parse(cls, text: str) -> "LocalizationCategory":
        """Parse a category cell. Raises ValueError for unknown names."""
        return cls(text.strip())

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class LocalizableKey:
    """Identifies one translatable field within one leaf record."""

    unit_id: str
    type_name: str
    property_name: str

    def __str__(self) -> str:
        return f"{self.unit_id}:{self.type_name}.{self.property_name}"


@dataclass(frozen=True)
class LocalizableUnit:
    """One translatable field's metadata and content."""

    category: LocalizationCategory
    readable: bool
    modifiable: bool
    comment: Optional[str] = None
    content: Optional[str] = None


def parse_bool(text: str) -> bool:
    """Parse ``true`` / ``false`` (surrounding whitespace and case ignored)."""
    value = text.strip().lower()
    if value == "true":
        return True
    if value == "false":
        return False
    raise ValueError(f"not a boolean: {text!r}")


def format_bool(value: bool) -> str:
    return "True" if value else "False"
