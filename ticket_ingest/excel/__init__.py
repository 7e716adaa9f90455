"""Spreadsheet reading, header aliases and column resolution."""
