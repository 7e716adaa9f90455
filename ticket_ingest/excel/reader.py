from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import pandas as pd

from ..normalize.values import cell_text

"""Excel reader.

The first row of the first sheet is the header, every following row is data.
Cells are read raw (header=None) so that the column resolver sees the header
text exactly as written in the file.

.xlsx is read with openpyxl, legacy .xls with xlrd.
"""

__all__ = [
    "IngestionError",
    "EmptyFileError",
    "MissingHeaderError",
    "SheetGrid",
    "read_excel_file",
    "read_sheet_grid",
    "dataframe_to_grid",
    "split_header",
    "row_to_dict",
    "is_blank_row",
]

ENGINES = {".xlsx": "openpyxl", ".xlsm": "openpyxl", ".xls": "xlrd"}


class IngestionError(Exception):
    """Base class for structural failures that reject a whole file."""


class EmptyFileError(IngestionError):
    """Raised when the table has no rows (or only a header)."""


class MissingHeaderError(IngestionError):
    """Raised when the first row is not a non-empty list of column names."""


@dataclass
class SheetGrid:
    sheet_name: str
    cells: list[list[Any]]  # 1 行目 = ヘッダ


def read_excel_file(
    path: Path, target_sheets: Iterable[str] | None = None, keep_na_strings: list[str] | None = None
) -> dict[str, pd.DataFrame]:
    """Read an Excel file returning raw DataFrames keyed by sheet name.

    Parameters
    ----------
    path: Excel ファイルパス
    target_sheets: 対象シート制限 (None なら全シート)
    keep_na_strings: pandas の既定 NaN 変換から除外する文字列リスト (例: ['NA'])
    """
    import pandas._libs.parsers as parsers

    if keep_na_strings:
        custom_na = parsers.STR_NA_VALUES.copy() - set(keep_na_strings)
        na_values = list(custom_na)
        keep_default_na = False
    else:
        na_values = None
        keep_default_na = True

    engine = ENGINES.get(Path(path).suffix.lower())
    dfs: dict[str, pd.DataFrame] = {}
    xls = pd.ExcelFile(path, engine=engine)
    for name in xls.sheet_names:
        if target_sheets is not None and str(name) not in target_sheets:
            continue
        df = xls.parse(name, header=None, keep_default_na=keep_default_na, na_values=na_values)
        dfs[str(name)] = df
    return dfs


def dataframe_to_grid(df: pd.DataFrame) -> list[list[Any]]:
    """Convert a raw DataFrame into a list of rows with NaN/NaT as None."""
    grid: list[list[Any]] = []
    for raw in df.itertuples(index=False, name=None):
        grid.append([None if _is_missing(v) else v for v in raw])
    return grid


def read_sheet_grid(
    path: Path, sheet: str | None = None, keep_na_strings: list[str] | None = None
) -> SheetGrid:
    """Read one sheet (default: the first) as a cell grid.

    Raises:
        EmptyFileError: when the workbook has no sheets
    """
    target = [sheet] if sheet is not None else None
    dfs = read_excel_file(path, target_sheets=target, keep_na_strings=keep_na_strings)
    if not dfs:
        raise EmptyFileError(f"no sheets in workbook: {Path(path).name}")
    name, df = next(iter(dfs.items()))
    return SheetGrid(sheet_name=name, cells=dataframe_to_grid(df))


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def is_blank_row(cells: Sequence[Any] | None) -> bool:
    """True when no cell of the row carries a non-blank value."""
    if not cells:
        return True
    for v in cells:
        if _is_missing(v):
            continue
        if isinstance(v, str) and not v.strip():
            continue
        return False
    return True


def split_header(grid: Sequence[Sequence[Any]] | None) -> tuple[list[str], list[Sequence[Any]]]:
    """Split a grid into (header names, data rows).

    Raises:
        EmptyFileError: grid has no rows, or only the header row
        MissingHeaderError: first row is not a list with at least one name
    """
    if not grid:
        raise EmptyFileError("empty file: no rows")
    header = grid[0]
    if not isinstance(header, (list, tuple)) or is_blank_row(header):
        raise MissingHeaderError("header row not found: first row has no column names")
    columns = [cell_text(h).strip() for h in header]
    data = list(grid[1:])
    if not data:
        raise EmptyFileError("empty file: header without data rows")
    return columns, data


def row_to_dict(columns: Sequence[str], cells: Sequence[Any]) -> dict[str, Any]:
    """Build a RawRow: header text -> cell value.

    Columns with a blank header are dropped; when a header repeats, the
    first occurrence wins. Missing trailing cells read as None.
    """
    row: dict[str, Any] = {}
    for index, name in enumerate(columns):
        if not name or name in row:
            continue
        value = cells[index] if index < len(cells) else None
        row[name] = None if _is_missing(value) else value
    return row
