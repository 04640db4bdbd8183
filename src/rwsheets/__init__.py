"""Read and update Google Sheets row data, with cell styling helpers."""
