"""Number formats, colors and borders for cell formatting.

Presets are built once at import and are immutable; derive new values with
:func:`dataclasses.replace` rather than modifying them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

NUMBER_FORMAT_TYPES = (
    "TEXT",
    "NUMBER",
    "PERCENT",
    "CURRENCY",
    "DATE",
    "TIME",
    "DATE_TIME",
    "SCIENTIFIC",
)

BORDER_STYLES = (
    "DOTTED",
    "DASHED",
    "SOLID",
    "SOLID_MEDIUM",
    "SOLID_THICK",
    "NONE",
    "DOUBLE",
)

DEFAULT_DATE_PATTERN = "M/d/yyyy"
ACCOUNTING_PATTERN = '_($* #,##0.00_);_($* (#,##0.00);_($* "-"??_);_(@_)'
CURRENCY_PATTERN = "$#,##0.00"
PERCENT_PATTERN = "0.00%"


# =========================================================================
# Number formats
# =========================================================================


def number_format(format_type: str = "NUMBER", pattern: str | None = None) -> dict[str, Any]:
    """Build a ``NumberFormat`` dict.

    Args:
        format_type: One of NUMBER_FORMAT_TYPES.
        pattern: Sheets format pattern; the locale default is used if None.

    Raises:
        ValueError: If format_type is unknown.
    """
    if format_type not in NUMBER_FORMAT_TYPES:
        raise ValueError(
            f"Unknown number format type: {format_type}. Use one of: {list(NUMBER_FORMAT_TYPES)}"
        )
    fmt: dict[str, Any] = {"type": format_type}
    if pattern:
        fmt["pattern"] = pattern
    return fmt


def date_format(pattern: str = DEFAULT_DATE_PATTERN) -> dict[str, Any]:
    return number_format("DATE", pattern)


def accounting_format() -> dict[str, Any]:
    return number_format("NUMBER", ACCOUNTING_PATTERN)


def currency_format(pattern: str = CURRENCY_PATTERN) -> dict[str, Any]:
    return number_format("CURRENCY", pattern)


def percent_format(pattern: str = PERCENT_PATTERN) -> dict[str, Any]:
    return number_format("PERCENT", pattern)


# =========================================================================
# Colors
# =========================================================================


@dataclass(frozen=True)
class Color:
    """RGB color with components in the 0-1 range."""

    red: float = 0.0
    green: float = 0.0
    blue: float = 0.0

    def to_dict(self) -> dict[str, float]:
        return {"red": self.red, "green": self.green, "blue": self.blue}


def rgb(red: int, green: int, blue: int) -> Color:
    """Build a Color from 0-255 components."""
    for component in (red, green, blue):
        if not 0 <= component <= 255:
            raise ValueError(f"Color component out of range 0-255: {component}")
    return Color(red / 255, green / 255, blue / 255)


def hex_color(value: str) -> Color:
    """Build a Color from ``"#rrggbb"`` or ``"#rgb"``."""
    digits = value.lstrip("#")
    if len(digits) == 3:
        digits = "".join(c * 2 for c in digits)
    if len(digits) != 6 or not all(c in "0123456789abcdefABCDEF" for c in digits):
        raise ValueError(f"Invalid hex color: {value!r}")
    r, g, b = (int(digits[i : i + 2], 16) for i in (0, 2, 4))
    return rgb(r, g, b)


BLACK = Color(0.0, 0.0, 0.0)
WHITE = Color(1.0, 1.0, 1.0)
LIGHT_GRAY = rgb(217, 217, 217)
DARK_GRAY = rgb(67, 67, 67)
RED = rgb(204, 0, 0)
GREEN = rgb(56, 118, 29)
BLUE = rgb(17, 85, 204)


# =========================================================================
# Borders
# =========================================================================


@dataclass(frozen=True)
class BorderConf:
    """Which sides of a cell get a border, and how it looks."""

    top: bool = False
    bottom: bool = False
    left: bool = False
    right: bool = False
    style: str = "SOLID"
    color: Color = BLACK

    def __post_init__(self):
        if self.style not in BORDER_STYLES:
            raise ValueError(
                f"Unknown border style: {self.style}. Use one of: {list(BORDER_STYLES)}"
            )


def border(style: str = "SOLID", color: Color = BLACK) -> dict[str, Any]:
    """Build a single ``Border`` dict."""
    if style not in BORDER_STYLES:
        raise ValueError(f"Unknown border style: {style}. Use one of: {list(BORDER_STYLES)}")
    return {"style": style, "color": color.to_dict()}


def borders(conf: BorderConf | None) -> dict[str, Any]:
    """Build a ``Borders`` dict with only the enabled sides."""
    if conf is None:
        return {}

    result = {}
    for side in ("top", "bottom", "left", "right"):
        if getattr(conf, side):
            result[side] = border(conf.style, conf.color)
    return result


THIN_BORDERS = BorderConf(top=True, bottom=True, left=True, right=True, style="SOLID")
HEADER_BORDERS = BorderConf(top=True, bottom=True, left=True, right=True, style="SOLID_MEDIUM")
