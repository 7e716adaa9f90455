from __future__ import annotations

from collections.abc import Iterable
from datetime import UTC, datetime
from pathlib import Path

from ticket_ingest.models.validation_error import RowError

"""Row error log buffering.

- JSON Lines, fixed keys (file, row, column, value, reason)
- One file per run: ``logs/row-errors-YYYYMMDD-HHMMSS.log`` (UTC), created
  on first flush
- Records are buffered and written in one go at flush time
"""

__all__ = [
    "RowError",
    "ErrorLogBuffer",
]

LOGS_DIR = Path("./logs")
TIMESTAMP_FMT = "%Y%m%d-%H%M%S"


class ErrorLogBuffer:
    """In-memory buffer for row errors. Flush writes JSON Lines.

    シリアル実行前提のためスレッド安全性は不要。
    """
    def __init__(self, logs_dir: Path | None = None) -> None:
        self._records: list[tuple[str | None, RowError]] = []
        self._logs_dir = logs_dir if logs_dir is not None else LOGS_DIR
        self._file_path: Path | None = None

    @property
    def file_path(self) -> Path:
        if self._file_path is None:
            self._logs_dir.mkdir(parents=True, exist_ok=True)
            stamp = datetime.now(UTC).strftime(TIMESTAMP_FMT)
            self._file_path = self._logs_dir / f"row-errors-{stamp}.log"
        return self._file_path

    def append(self, record: RowError, file: str | None = None) -> None:
        self._records.append((file, record))

    def extend(self, records: Iterable[RowError], file: str | None = None) -> None:
        for r in records:
            self.append(r, file=file)

    def __len__(self) -> int:  # pragma: no cover (trivial)
        return len(self._records)

    def flush(self) -> Path | None:
        """Write buffered records; returns the log path, or None when nothing was buffered."""
        if not self._records:
            return None
        fp = self.file_path
        with fp.open("a", encoding="utf-8") as f:
            for file, r in self._records:
                f.write(r.to_json_line(file=file or "") + "\n")
        self._records.clear()
        return fp
