"""Spreadsheet import/export of characters."""
