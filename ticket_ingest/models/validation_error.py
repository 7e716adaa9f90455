from __future__ import annotations

import json
from dataclasses import asdict, dataclass

"""RowError model for row-level validation failures.

One RowError is produced per violated rule; a single row may yield several.
Row numbers follow the spreadsheet numbering the operator sees: the header
is row 1, so the first data row is row 2. ``row=-1`` is allowed for
file-level problems where no row applies.

Named RowError (not ValidationError) so it does not shadow
jsonschema.exceptions.ValidationError in modules that use both.
"""

__all__ = [
    "RowError",
    "REASON_REQUIRED",
    "REASON_INVALID_DATE",
    "REASON_INVALID_PRIORITY",
    "REASON_INVALID_STATE",
]

REASON_REQUIRED = "required"
REASON_INVALID_DATE = "invalid date"
REASON_INVALID_PRIORITY = "invalid priority, expected P1–P4"
REASON_INVALID_STATE = (
    "invalid state, expected Opened, Assigned, Work in Progress, Closed Complete, "
    "Closed Incomplete, Closed Skipped or On Hold"
)


@dataclass(frozen=True)
class RowError:
    """Field-level validation error.

    Attributes:
        row: Spreadsheet row number (header = 1). -1 when unknown
        column: Display name of the offending column (e.g. "Opened")
        value: Raw cell text as read from the file ("" when missing)
        reason: Short machine-stable reason
    """
    row: int
    column: str
    value: str
    reason: str

    def describe(self) -> str:
        """Render the operator-facing line ``row N: <column> <reason> (value: X)``."""
        if self.value:
            return f"row {self.row}: {self.column} {self.reason} (value: {self.value})"
        return f"row {self.row}: {self.column} {self.reason}"

    def to_json_line(self, file: str | None = None) -> str:
        """Serialize to a JSON Lines entry.

        Parameters:
            file: Optional source file name, added as a ``file`` key

        Returns:
            JSON string with keys row, column, value, reason (+ file)
        """
        data: dict[str, object] = asdict(self)
        if file is not None:
            data = {"file": file, **data}
        return json.dumps(data, ensure_ascii=False)
