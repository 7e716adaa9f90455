"""Application logging and the row error log."""
