"""Google Sheets read/update implementation."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from rwsheets import config
from rwsheets.google.oauth import new_sheets_service
from rwsheets.sheets.exceptions import NoSheetDataError
from rwsheets.sheets.rows import remove_row

logger = logging.getLogger(__name__)


def get_sheet_data(spreadsheet_id: str, read_range: str, service: Any) -> list[dict[str, Any]]:
    """Retrieve the row data of a range, including cell formats.

    Args:
        spreadsheet_id: Google Sheets spreadsheet ID.
        read_range: A1 notation (e.g., "Sheet1!A1:E20").
        service: Sheets v4 service from new_sheets_service().

    Returns:
        List of ``RowData`` dicts for the first sheet in the response.
        Empty if the range has no rows.

    Raises:
        NoSheetDataError: If the response holds no sheet or no grid data.
        googleapiclient.errors.HttpError: If the API call fails.
    """
    logger.debug(f"Reading {read_range} from {spreadsheet_id}")
    result = (
        service.spreadsheets()
        .get(
            spreadsheetId=spreadsheet_id,
            ranges=[read_range],
            includeGridData=True,
        )
        .execute()
    )

    sheets = result.get("sheets", [])
    if not sheets:
        raise NoSheetDataError(spreadsheet_id, read_range)

    grids = sheets[0].get("data", [])
    if not grids:
        raise NoSheetDataError(spreadsheet_id, read_range)

    return grids[0].get("rowData", [])


def update_sheet_data(
    spreadsheet_id: str,
    end_column_index: int,
    gid: int,
    start_column_index: int,
    start_row_index: int,
    rows: Sequence[dict[str, Any]],
    service: Any,
) -> dict[str, Any]:
    """Overwrite a block of cells, values and formats, with new rows.

    Start indices are zero-based; ``end_column_index`` is exclusive, so a
    block ending at column A has ``end_column_index=1``. The block covers
    ``len(rows)`` rows from ``start_row_index``.

    Args:
        spreadsheet_id: Spreadsheet ID.
        end_column_index: Exclusive end column.
        gid: Sheet ID (not title) of the tab to update.
        start_column_index: First column, zero-based.
        start_row_index: First row, zero-based.
        rows: ``RowData`` dicts to write.
        service: Sheets v4 service from new_sheets_service().

    Returns:
        The batchUpdate response.

    Raises:
        googleapiclient.errors.HttpError: If the API call fails.
    """
    grid_range = {
        "sheetId": gid,
        "startRowIndex": start_row_index,
        "endRowIndex": start_row_index + len(rows),
        "startColumnIndex": start_column_index,
        "endColumnIndex": end_column_index,
    }
    body = {
        "requests": [
            {
                "updateCells": {
                    "fields": "*",
                    "range": grid_range,
                    "rows": list(rows),
                }
            }
        ],
        "includeSpreadsheetInResponse": False,
    }

    logger.debug(f"Updating {len(rows)} rows of sheet {gid} in {spreadsheet_id}")
    return (
        service.spreadsheets()
        .batchUpdate(spreadsheetId=spreadsheet_id, body=body)
        .execute()
    )


class SheetsClient:
    """Google Sheets client with OAuth authentication.

    Usage:
        client = SheetsClient("credentials.json", "token.json")

        rows = client.read_rows(ssid, "Sheet1!A1:E20")
        rows = client.remove_row(rows, 3)
        client.update_rows(ssid, gid, rows, start_row_index=0,
                           start_column_index=0, end_column_index=5)

    Note:
        The first call runs the interactive OAuth flow if no token is cached.
        Run `rwsheets login` to authorize ahead of time.
    """

    def __init__(
        self,
        credentials_path: str | Path | None = None,
        token_path: str | Path | None = None,
        scopes: list[str] | None = None,
        service: Any = None,
    ) -> None:
        """Initialize Sheets client.

        Args:
            credentials_path: OAuth client credentials file. Defaults to config.
            token_path: Cached token file. Defaults to config.
            scopes: OAuth scopes. Defaults to ["sheets"].
            service: Prebuilt Sheets service; skips OAuth when given.
        """
        self._credentials_path = credentials_path or config.credentials_path()
        self._token_path = token_path or config.token_path()
        self._scopes = scopes or ["sheets"]
        self._service = service

    def _get_service(self) -> Any:
        """Get or create Sheets API service."""
        if self._service is None:
            self._service = new_sheets_service(
                self._credentials_path, self._token_path, *self._scopes
            )
        return self._service

    def read_rows(self, spreadsheet_id: str, read_range: str) -> list[dict[str, Any]]:
        """Read ``RowData`` for a range. See get_sheet_data()."""
        return get_sheet_data(spreadsheet_id, read_range, self._get_service())

    def update_rows(
        self,
        spreadsheet_id: str,
        gid: int,
        rows: Sequence[dict[str, Any]],
        start_row_index: int = 0,
        start_column_index: int = 0,
        end_column_index: int | None = None,
    ) -> dict[str, Any]:
        """Write ``RowData`` to a sheet. See update_sheet_data().

        If end_column_index is None, it is derived from the widest row.
        """
        if end_column_index is None:
            width = max((len(r.get("values", [])) for r in rows), default=0)
            end_column_index = start_column_index + width

        return update_sheet_data(
            spreadsheet_id,
            end_column_index,
            gid,
            start_column_index,
            start_row_index,
            rows,
            self._get_service(),
        )

    @staticmethod
    def remove_row(rows: Sequence[dict[str, Any]], index: int) -> list[dict[str, Any]]:
        """Drop a row by position. See rows.remove_row()."""
        return remove_row(rows, index)
