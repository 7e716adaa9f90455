from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from .ticket import Ticket
from .validation_error import RowError

"""Ingestion result model.

Aggregates the outcome of one ingestion: the accepted records in original
row order, the accumulated row errors, and the counters used by the
SUMMARY line.
"""

__all__ = [
    "IngestionResult",
]


@dataclass(frozen=True)
class IngestionResult:
    """Outcome of ingesting one table.

    ``total_rows`` counts every data row below the header, including the
    blank rows that were skipped (``skipped_rows``) and the rejected ones
    (``rejected_rows``).
    """
    records: list[Ticket]
    errors: list[RowError]
    kind: str = "incident"
    total_rows: int = 0
    skipped_rows: int = 0  # 全セル空の行
    rejected_rows: int = 0  # エラーで除外された行
    columns: dict[str, str] = field(default_factory=dict)  # field -> 実ヘッダ
    start_time: datetime | None = None
    end_time: datetime | None = None
    elapsed_seconds: float = 0.0
    source: str | None = None

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    @property
    def accepted_rows(self) -> int:
        return len(self.records)
