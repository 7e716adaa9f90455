from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from datetime import UTC, tzinfo
from typing import Any

from ..excel.aliases import INCIDENT_ALIASES
from ..excel.columns import find_column_value
from ..models.config_models import FieldAliasTable
from ..models.ticket import DISPLAY_NAMES, TICKET_FIELDS, Ticket
from ..models.validation_error import (
    REASON_INVALID_DATE,
    REASON_INVALID_PRIORITY,
    REASON_INVALID_STATE,
    REASON_REQUIRED,
    RowError,
)
from ..normalize.dates import parse_flexible_date
from ..normalize.rules import PRIORITY_RULES, PriorityRule
from ..normalize.values import PRIORITY_UNDEFINED, cell_text, normalize_priority, normalize_request_state

"""Row validator.

Turns one RawRow into either a Ticket or the list of RowErrors it violates.
The checks are independent, so one row can report several errors at once.
A row with any error yields no Ticket: errored rows are dropped, never
defaulted.

Service request rows (``kind="request"``) get extra checks on top of the
incident ones: RequestItem and RequestedForName are required, Updated must
parse when present, and State must belong to the request vocabulary (it is
rewritten to the canonical label).
"""

__all__ = [
    "CLOSED_STATE_VOCABULARY",
    "ERROR_COLUMN_ORDER",
    "REQUEST_REQUIRED_FIELDS",
    "extract_fields",
    "validate_row",
]

logger = logging.getLogger(__name__)

# title-case 対象の状態語彙
CLOSED_STATE_VOCABULARY = frozenset({"closed", "resolved", "cancelled", "fechado", "resolvido", "cancelado"})

# エラー並び順 (row, column) の column 側キー
ERROR_COLUMN_ORDER: dict[str, int] = {
    "Number": 0,
    "Opened": 1,
    "Updated": 2,
    "RequestItem": 3,
    "RequestedForName": 4,
    "Priority": 5,
    "State": 6,
}

REQUEST_REQUIRED_FIELDS: tuple[str, ...] = ("request_item", "requested_for_name")


def extract_fields(
    raw_row: Mapping[str, Any],
    alias_table: FieldAliasTable,
    columns: Mapping[str, str] | None = None,
) -> dict[str, str]:
    """Resolve every canonical field of ``alias_table`` from one row.

    When ``columns`` (field -> header, from resolve_columns) is given the
    header lookup is direct; otherwise each field goes through
    find_column_value. Unresolved fields read as "".
    """
    values: dict[str, str] = {}
    for name in alias_table:
        if name not in TICKET_FIELDS:
            continue
        if columns is not None:
            header = columns.get(name)
            values[name] = cell_text(raw_row.get(header)).strip() if header is not None else ""
        else:
            values[name] = find_column_value(raw_row, alias_table[name])
    return values


def _request_errors(values: dict[str, str], row_number: int, tz: str | tzinfo | None) -> list[RowError]:
    # values["state"] はここで正規ラベルに書き換える
    errors: list[RowError] = []

    updated = values.get("updated", "")
    if updated and parse_flexible_date(updated, tz=tz) is None:
        errors.append(
            RowError(row=row_number, column=DISPLAY_NAMES["updated"], value=updated, reason=REASON_INVALID_DATE)
        )

    for name in REQUEST_REQUIRED_FIELDS:
        if not values.get(name, ""):
            errors.append(RowError(row=row_number, column=DISPLAY_NAMES[name], value="", reason=REASON_REQUIRED))

    state = values.get("state", "")
    if state:
        label = normalize_request_state(state)
        if label is None:
            errors.append(
                RowError(row=row_number, column=DISPLAY_NAMES["state"], value=state, reason=REASON_INVALID_STATE)
            )
        else:
            values["state"] = label
    return errors


def validate_row(
    raw_row: Mapping[str, Any],
    row_number: int,
    alias_table: FieldAliasTable = INCIDENT_ALIASES,
    *,
    kind: str = "incident",
    columns: Mapping[str, str] | None = None,
    tz: str | tzinfo | None = UTC,
    priority_rules: Sequence[PriorityRule] = PRIORITY_RULES,
) -> Ticket | list[RowError]:
    """Validate one row.

    Parameters:
        raw_row: Header text -> cell value
        row_number: Spreadsheet row number (header = 1)
        alias_table: Aliases used to resolve the canonical fields
        kind: "incident" or "request"; requests get the extra request checks
        columns: Pre-resolved field -> header mapping for this file
        tz: Timezone for naive dates when checking Opened and Updated
        priority_rules: Priority rule table

    Returns:
        A Ticket when every check passes, otherwise the list of RowErrors
    """
    values = extract_fields(raw_row, alias_table, columns)
    errors: list[RowError] = []

    number = values.get("number", "")
    if not number:
        errors.append(RowError(row=row_number, column=DISPLAY_NAMES["number"], value="", reason=REASON_REQUIRED))

    opened = values.get("opened", "")
    if not opened:
        errors.append(RowError(row=row_number, column=DISPLAY_NAMES["opened"], value="", reason=REASON_REQUIRED))
    elif parse_flexible_date(opened, tz=tz) is None:
        errors.append(
            RowError(row=row_number, column=DISPLAY_NAMES["opened"], value=opened, reason=REASON_INVALID_DATE)
        )

    priority = values.get("priority", "")
    if priority:
        tier = normalize_priority(priority, priority_rules)
        if tier == PRIORITY_UNDEFINED:
            errors.append(
                RowError(
                    row=row_number,
                    column=DISPLAY_NAMES["priority"],
                    value=priority,
                    reason=REASON_INVALID_PRIORITY,
                )
            )
        else:
            values["priority"] = tier

    if kind == "request":
        errors.extend(_request_errors(values, row_number, tz))
    else:
        state = values.get("state", "")
        if state:
            lowered = state.strip().lower()
            if lowered in CLOSED_STATE_VOCABULARY:
                values["state"] = lowered.capitalize()

    if errors:
        logger.debug(f"row {row_number} rejected: {[e.reason for e in errors]}")
        return errors
    return Ticket(**values, row_number=row_number)
