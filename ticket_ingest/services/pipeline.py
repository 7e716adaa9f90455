from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from datetime import UTC, datetime, tzinfo
from pathlib import Path
from typing import Any

import pandas as pd

from ..excel.aliases import alias_table_for
from ..excel.columns import MissingRequiredColumnsError, resolve_columns
from ..excel.reader import (
    EmptyFileError,
    IngestionError,
    MissingHeaderError,
    dataframe_to_grid,
    is_blank_row,
    read_sheet_grid,
    row_to_dict,
    split_header,
)
from ..logging.error_log import ErrorLogBuffer
from ..models.config_models import FieldAliasTable, IngestConfig
from ..models.ingestion_result import IngestionResult
from ..models.ticket import Ticket
from ..models.validation_error import RowError
from ..normalize.rules import PRIORITY_RULES, PriorityRule
from .validator import ERROR_COLUMN_ORDER, validate_row

"""Ingestion pipeline.

Orchestrates one upload end to end:

1. Split the grid into header and data rows (EmptyFileError / MissingHeaderError)
2. Resolve the header once against the alias table (MissingRequiredColumnsError)
3. Validate every data row, accumulating records and row errors
4. Fail with NoValidRecordsError when no row survived

Structural errors are raised before any row is looked at, so nothing is
partially loaded. Entirely blank rows are skipped silently. Every ``stride``
rows the progress callback is invoked; this is advisory pacing only and does
not change row or error order.
"""

__all__ = [
    "IngestionError",
    "EmptyFileError",
    "MissingHeaderError",
    "MissingRequiredColumnsError",
    "NoValidRecordsError",
    "ProgressCallback",
    "DEFAULT_STRIDE",
    "alias_table_from_config",
    "ingest",
    "ingest_file",
]

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]

DEFAULT_STRIDE = 100


class NoValidRecordsError(IngestionError):
    """Raised when the file is well-formed but every row failed validation.

    ``errors`` carries the row errors that were accumulated (and discarded
    from the result) so they can still be shown to the operator.
    """

    def __init__(self, errors: Sequence[RowError], total_rows: int = 0) -> None:
        self.errors = list(errors)
        self.total_rows = total_rows
        super().__init__(
            f"no valid tickets found in file ({len(self.errors)} row errors in {total_rows} rows); "
            "check that the columns are correct"
        )


def alias_table_from_config(kind: str, config: IngestConfig | None) -> FieldAliasTable:
    """Built-in alias table for ``kind`` with the config's overrides applied."""
    table = alias_table_for(kind)
    if config is not None and config.alias_overrides.get(kind):
        table = table.merged(config.alias_overrides[kind])
    return table


def _error_sort_key(error: RowError) -> tuple[int, int, str]:
    return (error.row, ERROR_COLUMN_ORDER.get(error.column, len(ERROR_COLUMN_ORDER)), error.column)


def _as_grid(raw_table: Any) -> Sequence[Any] | None:
    if isinstance(raw_table, pd.DataFrame):
        # header=None で読んだ DataFrame 前提 (1 行目 = ヘッダ)
        return dataframe_to_grid(raw_table)
    return raw_table


def ingest(
    raw_table: Sequence[Sequence[Any]] | pd.DataFrame | None,
    *,
    kind: str = "incident",
    alias_table: FieldAliasTable | None = None,
    progress: ProgressCallback | None = None,
    stride: int = DEFAULT_STRIDE,
    tz: str | tzinfo | None = UTC,
    priority_rules: Sequence[PriorityRule] = PRIORITY_RULES,
    source: str | None = None,
) -> IngestionResult:
    """Ingest a header + rows cell grid.

    Parameters:
        raw_table: Grid whose first row is the header (or a raw DataFrame)
        kind: "incident" or "request"; selects the built-in alias table
            and, for requests, the extra request row checks
        alias_table: Explicit alias table (overrides ``kind``)
        progress: Callback ``(processed_rows, total_rows)``
        stride: Rows between two progress callbacks
        tz: Timezone for naive dates
        priority_rules: Priority rule table
        source: Name of the originating file, for logs

    Returns:
        IngestionResult with records in original row order and errors
        ordered by (row, column)

    Raises:
        EmptyFileError, MissingHeaderError, MissingRequiredColumnsError:
            before any row is processed
        NoValidRecordsError: after processing, when no row was valid
    """
    start_time = datetime.now(UTC)
    table = alias_table if alias_table is not None else alias_table_for(kind)
    stride = max(1, int(stride))

    header, data = split_header(_as_grid(raw_table))
    columns = resolve_columns(header, table)
    logger.debug(f"resolved columns ({source or '<table>'}): {columns}")

    records: list[Ticket] = []
    errors: list[RowError] = []
    skipped = 0
    rejected = 0
    total = len(data)

    for index, cells in enumerate(data):
        row_number = index + 2  # ヘッダ = 1 行目
        if isinstance(cells, Mapping):
            raw_row = dict(cells)
            blank = is_blank_row(list(raw_row.values()))
        else:
            blank = is_blank_row(cells)
            raw_row = {} if blank else row_to_dict(header, cells)
        if blank:
            skipped += 1
        else:
            outcome = validate_row(
                raw_row,
                row_number,
                table,
                kind=kind,
                columns=columns,
                tz=tz,
                priority_rules=priority_rules,
            )
            if isinstance(outcome, Ticket):
                records.append(outcome)
            else:
                rejected += 1
                errors.extend(outcome)

        if progress is not None and (index + 1) % stride == 0:
            progress(index + 1, total)

    if progress is not None:
        progress(total, total)

    errors.sort(key=_error_sort_key)

    if not records:
        raise NoValidRecordsError(errors, total_rows=total)

    end_time = datetime.now(UTC)
    if errors:
        logger.debug(f"{rejected} rows rejected with {len(errors)} errors ({source or '<table>'})")
    return IngestionResult(
        records=records,
        errors=errors,
        kind=kind,
        total_rows=total,
        skipped_rows=skipped,
        rejected_rows=rejected,
        columns=columns,
        start_time=start_time,
        end_time=end_time,
        elapsed_seconds=(end_time - start_time).total_seconds(),
        source=source,
    )


def ingest_file(
    path: Path,
    *,
    kind: str = "incident",
    config: IngestConfig | None = None,
    sheet: str | None = None,
    progress: ProgressCallback | None = None,
    error_log: ErrorLogBuffer | None = None,
    keep_na_strings: list[str] | None = None,
) -> IngestionResult:
    """Read an .xlsx/.xls file and ingest its first (or named) sheet.

    Row errors, including those carried by NoValidRecordsError, are also
    appended to ``error_log`` when one is given.
    """
    path = Path(path)
    cfg = config or IngestConfig()
    grid = read_sheet_grid(path, sheet=sheet, keep_na_strings=keep_na_strings)
    logger.debug(f"read {path.name} sheet={grid.sheet_name} rows={len(grid.cells)}")

    rules = cfg.priority_rules if cfg.priority_rules else PRIORITY_RULES
    try:
        result = ingest(
            grid.cells,
            kind=kind,
            alias_table=alias_table_from_config(kind, cfg),
            progress=progress,
            stride=cfg.progress_stride,
            tz=cfg.timezone,
            priority_rules=rules,
            source=path.name,
        )
    except NoValidRecordsError as e:
        if error_log is not None:
            error_log.extend(e.errors, file=path.name)
        raise
    if error_log is not None:
        error_log.extend(result.errors, file=path.name)
    return result
