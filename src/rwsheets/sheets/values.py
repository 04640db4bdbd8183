"""Typed cell values and serial dates.

The builders return Sheets API ``ExtendedValue`` dicts, suitable for a
cell's ``userEnteredValue``. Dates are written as numbers: convert them with
:func:`serial_date` and wrap the result in :func:`number_value`.
"""

from __future__ import annotations

import re
from datetime import datetime, timedelta
from typing import Any

from rwsheets.sheets.exceptions import DateParseError

# Day zero of Google Sheets serial dates (not 1900-01-01)
EPOCH = datetime(1899, 12, 30)

_ONE_DAY = timedelta(days=1)

_LAYOUT_TOKENS = {
    "YYYY": "%Y",
    "YY": "%y",
    "MMMM": "%B",
    "MMM": "%b",
    "MM": "%m",
    "M": "%m",
    "DD": "%d",
    "D": "%d",
    "HH": "%H",
    "mm": "%M",
    "ss": "%S",
}
_LAYOUT_RE = re.compile("|".join(sorted(_LAYOUT_TOKENS, key=len, reverse=True)))
_DIRECTIVE_RE = re.compile(r"%[^%]")


def bool_value(value: bool) -> dict[str, Any]:
    """ExtendedValue holding a boolean."""
    return {"boolValue": bool(value)}


def formula_value(value: str) -> dict[str, Any]:
    """ExtendedValue holding a formula, e.g. ``"=SUM(A1:A3)"``."""
    return {"formulaValue": value}


def text_value(value: str) -> dict[str, Any]:
    """ExtendedValue holding a string."""
    return {"stringValue": value}


def number_value(value: float) -> dict[str, Any]:
    """ExtendedValue holding a number.

    Use together with :func:`serial_date` for date values.
    """
    return {"numberValue": value}


def to_strptime(layout: str) -> str:
    """Translate a token layout such as ``"M/D/YYYY"`` to a strptime format.

    Layouts that already contain ``%`` directives are returned unchanged.
    Token letters always translate, so a layout cannot carry them as
    literal text (the ``D`` in ``"Day D"`` becomes ``%d`` too).
    """
    if "%" in layout:
        return layout
    return _LAYOUT_RE.sub(lambda m: _LAYOUT_TOKENS[m.group(0)], layout)


def serial_date(value: str, layout: str) -> float:
    """Return the Google Sheets serial number for a date.

    Both the parsed value and the epoch are naive; no timezone adjustment
    is made.

    Args:
        value: Date string, e.g. ``"3/2/2023"``.
        layout: Token layout (``"M/D/YYYY"``) or strptime format (``"%m/%d/%Y"``).
            It must name at least one date or time field.

    Returns:
        Days since 1899-12-30. Fractional when the value carries a time of day.

    Raises:
        DateParseError: If value does not match layout, or layout has no fields.
    """
    fmt = to_strptime(layout)
    # strptime matches a field-less format literally and returns 1900-01-01
    if not _DIRECTIVE_RE.search(fmt.replace("%%", "")):
        raise DateParseError(value, layout, "layout has no date or time fields")

    try:
        parsed = datetime.strptime(value, fmt)
    except ValueError as e:
        raise DateParseError(value, layout, str(e)) from e

    return (parsed - EPOCH) / _ONE_DAY
