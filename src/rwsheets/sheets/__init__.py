"""Google Sheets row/cell read and update helpers.

Usage:
    from rwsheets.google import new_sheets_service
    from rwsheets.sheets import HEADER_BORDERS, Styler, get_sheet_data, update_sheet_data

    service = new_sheets_service("credentials.json", "token.json", "sheets")

    # Read rows, including formats
    rows = get_sheet_data(ssid, "Sheet1!B2:F20", service)

    # Write a styled header row to B2:F2
    styler = Styler().font_bold(True).horizontal_alignment("CENTER")
    header = styler.create_header_row(["Customer", "Invoice"], HEADER_BORDERS)
    update_sheet_data(ssid, 6, gid, 1, 1, header, service)

OAuth Setup:
    1. Download OAuth credentials from Google Cloud Console
    2. Save them as google/credentials.json (or set RWSHEETS_CREDENTIALS)
    3. Authorize: rwsheets login
"""

from __future__ import annotations

from rwsheets.sheets.client import SheetsClient, get_sheet_data, update_sheet_data
from rwsheets.sheets.exceptions import DateParseError, NoSheetDataError, SheetsError
from rwsheets.sheets.formats import (
    BLACK,
    HEADER_BORDERS,
    LIGHT_GRAY,
    THIN_BORDERS,
    WHITE,
    BorderConf,
    Color,
    hex_color,
    rgb,
)
from rwsheets.sheets.rows import remove_row, row
from rwsheets.sheets.styler import Styler, new_styler
from rwsheets.sheets.values import (
    EPOCH,
    bool_value,
    formula_value,
    number_value,
    serial_date,
    text_value,
)

__all__ = [
    "SheetsClient",
    "get_sheet_data",
    "update_sheet_data",
    "remove_row",
    "row",
    "Styler",
    "new_styler",
    "BorderConf",
    "Color",
    "rgb",
    "hex_color",
    "BLACK",
    "WHITE",
    "LIGHT_GRAY",
    "THIN_BORDERS",
    "HEADER_BORDERS",
    "EPOCH",
    "bool_value",
    "formula_value",
    "number_value",
    "text_value",
    "serial_date",
    "SheetsError",
    "NoSheetDataError",
    "DateParseError",
]
