"""CLI for rwsheets - credentials and spreadsheet data.

Usage:
    rwsheets init                          # Create directories, show setup instructions
    rwsheets status                        # Show configuration status
    rwsheets login                         # Interactive OAuth login
    rwsheets token                         # Show OAuth token status
    rwsheets revoke                        # Revoke OAuth token
    rwsheets import <path>                 # Import OAuth credentials
    rwsheets read <ssid> <range>           # Print row data as JSON
    rwsheets serial-date <value> <layout>  # Print a date's serial number
    rwsheets update-sample <path>          # Write styled invoice data to a sheet
"""

from __future__ import annotations

import argparse
import json
import logging
import shutil
import sys
from pathlib import Path
from typing import Any

DEFAULT_SCOPES = "sheets"

# Sample invoice layout: header row at B2, data below it in columns B:F
SAMPLE_START_ROW = 1
SAMPLE_START_COLUMN = 1
SAMPLE_END_COLUMN = 6
SAMPLE_DATE_LAYOUT = "YYYY-MM-DD"


def _mark(ok: bool) -> str:
    return "[x]" if ok else "[ ]"


def cmd_init() -> int:
    """Create the google/ directory and say where credentials belong."""
    from rwsheets.config import ENV_FILE, ensure_google_dir, get_config_status

    google_dir = ensure_google_dir()
    status = get_config_status()
    google = status["google"]

    print(f"rwsheets setup ({status['repo_root']})")
    print(f"  directory   : {google_dir}/")
    print(f"  .env        : {ENV_FILE}")
    print(f"  credentials : {google['credentials_path']}")
    print(f"  token       : {google['token_path']} (written by 'rwsheets login')")
    print()
    print("Settings read from the environment or .env:")
    print("  RWSHEETS_CREDENTIALS, RWSHEETS_TOKEN, RWSHEETS_SSID, RWSHEETS_GID")

    if not google["credentials"]:
        print()
        print("Download an OAuth client (Desktop app) from")
        print("  https://console.cloud.google.com/apis/credentials")
        print("and save it with 'rwsheets import <path>'.")

    return 0


def cmd_status() -> int:
    """Show which credential files and spreadsheet defaults are configured."""
    from rwsheets.config import get_config_status

    status = get_config_status()
    google = status["google"]
    spreadsheet = status["spreadsheet"]

    print(f"{_mark(status['env_file'])} .env in {status['repo_root']}")
    print(f"{_mark(google['credentials'])} credentials {google['credentials_path']}")
    print(f"{_mark(google['token'])} token       {google['token_path']}")
    print(f"{_mark(spreadsheet['ssid'])} RWSHEETS_SSID")
    print(f"{_mark(spreadsheet['gid'])} RWSHEETS_GID")
    return 0


def _open_auth(scopes: list[str]):
    """Build GoogleOAuth, printing the failure and setup hint on error."""
    from rwsheets.google import GoogleAuthError, GoogleOAuth

    try:
        return GoogleOAuth(scopes=scopes)
    except GoogleAuthError as e:
        print(f"Error: {e}")
        print("Run 'rwsheets init' for setup instructions")
        return None


def google_login(scopes: list[str], no_browser: bool = False) -> int:
    """Interactive Google OAuth login."""
    from rwsheets.google import GoogleAuthError

    auth = _open_auth(scopes)
    if auth is None:
        return 1

    info = auth.get_token_info()
    if auth.is_authorized() and info["status"] == "valid":
        print("Already authorized with valid token")
        return google_status(scopes)

    if info["status"] == "expired":
        print("Token expired, attempting refresh...")
        try:
            auth.get_credentials()
            if auth.get_token_info()["status"] == "valid":
                print("Token refreshed")
                return google_status(scopes)
        except GoogleAuthError as e:
            print(f"Refresh failed: {e}")

    print(f"Authorizing scopes: {', '.join(scopes)}")
    print("After granting access, copy the redirect URL back here.\n")

    try:
        auth.authorize_interactive(open_browser=not no_browser)
    except GoogleAuthError as e:
        print(f"Error: {e}")
        return 1

    print("Token saved")
    return google_status(scopes)


def google_status(scopes: list[str]) -> int:
    """Show Google OAuth token status."""
    auth = _open_auth(scopes)
    if auth is None:
        return 1

    info = auth.get_token_info()
    if info["status"] == "no_token":
        print("No token found - run 'rwsheets login'")
        return 1

    print(f"Status     : {info['status']}")
    print(f"Scopes     : {', '.join(info['scopes'])}")
    print(f"Expires in : {info['expires_in']}")
    print(f"Refreshable: {'yes' if info['has_refresh_token'] else 'no'}")
    return 0


def google_revoke(scopes: list[str]) -> int:
    """Revoke Google OAuth token."""
    from rwsheets.google import CredentialsNotFoundError, GoogleAuthError, GoogleOAuth

    try:
        auth = GoogleOAuth(scopes=scopes)
    except CredentialsNotFoundError:
        print("No credentials to revoke")
        return 0
    except GoogleAuthError as e:
        print(f"Error: {e}")
        return 1

    auth.revoke_token()
    print("Token revoked and local cache cleared")
    return 0


def google_import(source_path: str) -> int:
    """Import OAuth credentials from a file."""
    from rwsheets.config import credentials_path

    source = Path(source_path).expanduser()

    if not source.exists():
        print(f"Error: File not found: {source}")
        return 1

    try:
        with open(source) as f:
            data = json.load(f)

        if "installed" not in data and "web" not in data:
            print("Error: Invalid OAuth credentials format")
            print("Expected 'installed' or 'web' key in JSON")
            return 1

        key = "installed" if "installed" in data else "web"
        client_id = data[key].get("client_id", "unknown")

    except json.JSONDecodeError as e:
        print(f"Error: Invalid JSON: {e}")
        return 1

    target = credentials_path()
    target.parent.mkdir(parents=True, exist_ok=True)
    shutil.copy2(source, target)

    print("Imported OAuth credentials")
    print(f"  From: {source}")
    print(f"  To:   {target}")
    print(f"  Client ID: {client_id[:40]}...")
    print()
    print("Next: Run 'rwsheets login' to authorize")
    return 0


def cmd_read(ssid: str, read_range: str, scopes: list[str]) -> int:
    """Print the row data of a range as JSON."""
    from googleapiclient.errors import HttpError

    from rwsheets.google import GoogleAuthError
    from rwsheets.sheets import SheetsClient, SheetsError

    try:
        rows = SheetsClient(scopes=scopes).read_rows(ssid, read_range)
    except (GoogleAuthError, SheetsError, HttpError) as e:
        print(f"Error: {e}")
        return 1

    print(json.dumps(rows, indent=2))
    return 0


def cmd_serial_date(value: str, layout: str) -> int:
    """Print the serial number for a date."""
    from rwsheets.sheets import DateParseError, serial_date

    try:
        print(serial_date(value, layout))
    except DateParseError as e:
        print(f"Error: {e}")
        return 1
    return 0


def build_invoice_rows(data: dict[str, Any]) -> list[dict[str, Any]]:
    """Build a styled header row plus one row per invoice.

    ``data`` holds ``headers`` (list of str) and ``invoices`` (dicts with
    customer, invoice, amount, date and paid).

    Raises:
        DateParseError: If an invoice date is not YYYY-MM-DD.
    """
    from dataclasses import replace

    from rwsheets.sheets import HEADER_BORDERS, THIN_BORDERS, new_styler, row

    styler = (
        new_styler()
        .font_bold(True)
        .font_family("Verdana")
        .font_size(12)
        .horizontal_alignment("CENTER")
        .vertical_alignment("MIDDLE")
    )
    rows = styler.create_header_row(data.get("headers", []), HEADER_BORDERS)

    body = styler.font_size(10).font_bold(False)
    cell_borders = replace(THIN_BORDERS, top=False)

    for i, invoice in enumerate(data.get("invoices", [])):
        if i > 0:
            cell_borders = THIN_BORDERS
        cells = [
            body.horizontal_alignment("LEFT").text_cell(invoice["customer"], cell_borders),
            body.horizontal_alignment("CENTER").text_cell(invoice["invoice"], cell_borders),
            body.horizontal_alignment("RIGHT").accounting_cell(invoice["amount"], cell_borders),
            body.horizontal_alignment("RIGHT")
            .date_pattern("M/d/yyyy")
            .date_cell(invoice["date"], SAMPLE_DATE_LAYOUT, cell_borders),
            body.horizontal_alignment("CENTER").check_box_cell(invoice["paid"], cell_borders),
        ]
        rows.append(row(cells))

    return rows


def cmd_update_sample(
    sample_path: str, ssid: str | None, gid: int | None, scopes: list[str]
) -> int:
    """Write the invoices in a sample JSON file to B2:F of a sheet."""
    from googleapiclient.errors import HttpError

    from rwsheets.config import default_spreadsheet
    from rwsheets.google import GoogleAuthError
    from rwsheets.sheets import SheetsClient, SheetsError

    try:
        env_ssid, env_gid = default_spreadsheet()
    except ValueError as e:
        print(f"Error: {e}")
        return 1
    ssid = ssid or env_ssid
    gid = gid if gid is not None else env_gid
    if not ssid or gid is None:
        print("Error: spreadsheet ID and sheet GID are required (--ssid/--gid or .env)")
        return 1

    try:
        with open(Path(sample_path).expanduser()) as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        print(f"Error: failed to read sample data: {e}")
        return 1
    if not isinstance(data, dict):
        print("Error: sample data must be a JSON object with headers and invoices")
        return 1

    try:
        rows = build_invoice_rows(data)
        SheetsClient(scopes=scopes).update_rows(
            ssid,
            gid,
            rows,
            start_row_index=SAMPLE_START_ROW,
            start_column_index=SAMPLE_START_COLUMN,
            end_column_index=SAMPLE_END_COLUMN,
        )
    except (KeyError, GoogleAuthError, SheetsError, HttpError) as e:
        print(f"Error: failed to update sheet data: {e}")
        return 1

    print(f"Updated {len(rows)} rows")
    return 0


def parse_scopes(scope_str: str | None) -> list[str]:
    """Parse comma-separated scopes."""
    if not scope_str:
        return [DEFAULT_SCOPES]
    return [s.strip() for s in scope_str.split(",")]


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="rwsheets",
        description="Read and update Google Sheets row data",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument(
        "--scopes",
        type=str,
        default=DEFAULT_SCOPES,
        help=f"Comma-separated scopes (default: {DEFAULT_SCOPES})",
    )
    subparsers = parser.add_subparsers(dest="command", help="Command")

    subparsers.add_parser("init", help="Initialize credential directories")
    subparsers.add_parser("status", help="Show configuration status")

    login_parser = subparsers.add_parser("login", help="Interactive OAuth login")
    login_parser.add_argument(
        "--no-browser",
        action="store_true",
        help="Don't open browser automatically",
    )

    subparsers.add_parser("token", help="Show token status")
    subparsers.add_parser("revoke", help="Revoke token")

    import_parser = subparsers.add_parser("import", help="Import OAuth credentials")
    import_parser.add_argument("path", help="Path to credentials.json file")

    read_parser = subparsers.add_parser("read", help="Print row data as JSON")
    read_parser.add_argument("ssid", help="Spreadsheet ID")
    read_parser.add_argument("range", help="A1 range, e.g. Sheet1!A1:E20")

    serial_parser = subparsers.add_parser("serial-date", help="Print a date's serial number")
    serial_parser.add_argument("value", help="Date, e.g. 3/2/2023")
    serial_parser.add_argument("layout", help="Layout, e.g. M/D/YYYY or %%m/%%d/%%Y")

    sample_parser = subparsers.add_parser("update-sample", help="Write sample invoices")
    sample_parser.add_argument("path", help="Path to sample JSON file")
    sample_parser.add_argument("--ssid", help="Spreadsheet ID (default: RWSHEETS_SSID)")
    sample_parser.add_argument("--gid", type=int, help="Sheet GID (default: RWSHEETS_GID)")

    args = parser.parse_args(argv if argv is not None else sys.argv[1:])

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)

    if args.command is None:
        parser.print_help()
        return 0

    from rwsheets.google.oauth import resolve_scopes

    scopes = parse_scopes(args.scopes)
    try:
        resolve_scopes(scopes)
    except ValueError as e:
        print(f"Error: {e}")
        return 1

    if args.command == "init":
        return cmd_init()
    elif args.command == "status":
        return cmd_status()
    elif args.command == "login":
        return google_login(scopes, args.no_browser)
    elif args.command == "token":
        return google_status(scopes)
    elif args.command == "revoke":
        return google_revoke(scopes)
    elif args.command == "import":
        return google_import(args.path)
    elif args.command == "read":
        return cmd_read(args.ssid, args.range, scopes)
    elif args.command == "serial-date":
        return cmd_serial_date(args.value, args.layout)
    elif args.command == "update-sample":
        return cmd_update_sample(args.path, args.ssid, args.gid, scopes)

    return 0


if __name__ == "__main__":
    sys.exit(main())
