"""Fluent styler for building formatted cells and header rows.

A Styler is immutable: every setter returns a new Styler, so a base style
can be shared and specialized without aliasing.

Usage:
    header = Styler().font_bold(True).font_family("Verdana").font_size(12)
    rows = header.horizontal_alignment("CENTER").create_header_row(
        ["Customer", "Invoice", "Amount"], HEADER_BORDERS
    )

    body = header.font_size(10).font_bold(False)
    cells = [
        body.horizontal_alignment("LEFT").text_cell("Acme", THIN_BORDERS),
        body.horizontal_alignment("RIGHT").accounting_cell(120.5, THIN_BORDERS),
        body.date_pattern("M/d/yyyy").date_cell("2023-03-02", "YYYY-MM-DD"),
    ]
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, replace
from typing import Any

from rwsheets.sheets import formats
from rwsheets.sheets.formats import BorderConf, Color
from rwsheets.sheets.rows import row
from rwsheets.sheets.values import (
    bool_value,
    formula_value,
    number_value,
    serial_date,
    text_value,
)

HORIZONTAL_ALIGNMENTS = ("LEFT", "CENTER", "RIGHT")
VERTICAL_ALIGNMENTS = ("TOP", "MIDDLE", "BOTTOM")
WRAP_STRATEGIES = ("OVERFLOW_CELL", "LEGACY_WRAP", "CLIP", "WRAP")


def _check(value: str, allowed: tuple[str, ...], name: str) -> str:
    if value not in allowed:
        raise ValueError(f"Unknown {name}: {value}. Use one of: {list(allowed)}")
    return value


@dataclass(frozen=True)
class Styler:
    """Cell formatting configuration with fluent setters."""

    bold: bool = False
    italic: bool = False
    family: str | None = None
    size: int | None = None
    foreground: Color | None = None
    background: Color | None = None
    horizontal: str | None = None
    vertical: str | None = None
    wrap: str | None = None
    date_format_pattern: str = formats.DEFAULT_DATE_PATTERN
    number_format_pattern: str | None = None

    # -------------------------------------------------------------------------
    # Setters
    # -------------------------------------------------------------------------

    def font_bold(self, bold: bool) -> Styler:
        return replace(self, bold=bold)

    def font_italic(self, italic: bool) -> Styler:
        return replace(self, italic=italic)

    def font_family(self, family: str) -> Styler:
        return replace(self, family=family)

    def font_size(self, size: int) -> Styler:
        if size <= 0:
            raise ValueError(f"Font size must be positive, got {size}")
        return replace(self, size=size)

    def text_color(self, color: Color) -> Styler:
        return replace(self, foreground=color)

    def background_color(self, color: Color) -> Styler:
        return replace(self, background=color)

    def horizontal_alignment(self, alignment: str) -> Styler:
        return replace(
            self, horizontal=_check(alignment, HORIZONTAL_ALIGNMENTS, "horizontal alignment")
        )

    def vertical_alignment(self, alignment: str) -> Styler:
        return replace(self, vertical=_check(alignment, VERTICAL_ALIGNMENTS, "vertical alignment"))

    def wrap_strategy(self, strategy: str) -> Styler:
        return replace(self, wrap=_check(strategy, WRAP_STRATEGIES, "wrap strategy"))

    def date_pattern(self, pattern: str) -> Styler:
        """Display pattern for date cells, e.g. ``"M/d/yyyy"``."""
        return replace(self, date_format_pattern=pattern)

    def number_pattern(self, pattern: str | None) -> Styler:
        """Display pattern for number cells; None uses the sheet default."""
        return replace(self, number_format_pattern=pattern)

    # -------------------------------------------------------------------------
    # Formats
    # -------------------------------------------------------------------------

    def text_format(self) -> dict[str, Any]:
        """Build the ``TextFormat`` dict."""
        fmt: dict[str, Any] = {"bold": self.bold, "italic": self.italic}
        if self.family:
            fmt["fontFamily"] = self.family
        if self.size:
            fmt["fontSize"] = self.size
        if self.foreground:
            fmt["foregroundColor"] = self.foreground.to_dict()
        return fmt

    def cell_format(
        self,
        borders: BorderConf | None = None,
        number_format: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Build the ``CellFormat`` dict for this style.

        Args:
            borders: Sides to draw; no borders if None.
            number_format: ``NumberFormat`` dict to apply, if any.
        """
        fmt: dict[str, Any] = {"textFormat": self.text_format()}
        if self.horizontal:
            fmt["horizontalAlignment"] = self.horizontal
        if self.vertical:
            fmt["verticalAlignment"] = self.vertical
        if self.wrap:
            fmt["wrapStrategy"] = self.wrap
        if self.background:
            fmt["backgroundColor"] = self.background.to_dict()
        if number_format:
            fmt["numberFormat"] = number_format
        cell_borders = formats.borders(borders)
        if cell_borders:
            fmt["borders"] = cell_borders
        return fmt

    # -------------------------------------------------------------------------
    # Cells
    # -------------------------------------------------------------------------

    def _cell(
        self,
        value: dict[str, Any],
        borders: BorderConf | None,
        number_format: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        return {
            "userEnteredValue": value,
            "userEnteredFormat": self.cell_format(borders, number_format),
        }

    def text_cell(self, value: str, borders: BorderConf | None = None) -> dict[str, Any]:
        return self._cell(text_value(value), borders)

    def number_cell(self, value: float, borders: BorderConf | None = None) -> dict[str, Any]:
        number_format = None
        if self.number_format_pattern:
            number_format = formats.number_format("NUMBER", self.number_format_pattern)
        return self._cell(number_value(value), borders, number_format)

    def accounting_cell(self, value: float, borders: BorderConf | None = None) -> dict[str, Any]:
        return self._cell(number_value(value), borders, formats.accounting_format())

    def date_cell(
        self, value: str, layout: str, borders: BorderConf | None = None
    ) -> dict[str, Any]:
        """Date cell stored as a serial number.

        Raises:
            DateParseError: If value does not match layout.
        """
        serial = serial_date(value, layout)
        return self._cell(
            number_value(serial), borders, formats.date_format(self.date_format_pattern)
        )

    def check_box_cell(self, value: bool, borders: BorderConf | None = None) -> dict[str, Any]:
        cell = self._cell(bool_value(value), borders)
        cell["dataValidation"] = {"condition": {"type": "BOOLEAN"}}
        return cell

    def formula_cell(self, value: str, borders: BorderConf | None = None) -> dict[str, Any]:
        return self._cell(formula_value(value), borders)

    def create_header_row(
        self, headers: Sequence[str], borders: BorderConf | None = None
    ) -> list[dict[str, Any]]:
        """Build a single-row ``RowData`` list of header text cells."""
        return [row([self.text_cell(header, borders) for header in headers])]


def new_styler() -> Styler:
    """Styler with default (plain) formatting."""
    return Styler()
