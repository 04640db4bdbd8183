"""Sheets data exceptions."""


class SheetsError(Exception):
    """Base exception for spreadsheet data errors."""

    pass


class NoSheetDataError(SheetsError):
    """Raised when a read returns no sheet or no grid data."""

    def __init__(self, spreadsheet_id: str, read_range: str):
        self.spreadsheet_id = spreadsheet_id
        self.read_range = read_range
        super().__init__(f"No sheet data found in {spreadsheet_id} for range {read_range!r}")


class DateParseError(SheetsError, ValueError):
    """Raised when a date string does not match its layout."""

    def __init__(self, value: str, layout: str, reason: str | None = None):
        self.value = value
        self.layout = layout
        message = f"Cannot parse {value!r} with layout {layout!r}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
