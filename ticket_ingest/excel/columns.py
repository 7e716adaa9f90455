from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from ..models.config_models import FieldAliasTable
from ..models.ticket import DISPLAY_NAMES
from ..normalize.values import cell_text
from .reader import IngestionError

"""Column resolver.

Maps an arbitrary header row onto canonical field names using a
FieldAliasTable, independent of column order, wording and language. Matching
is exact first, then case-insensitive; there is no accent or locale folding
beyond what the alias lists spell out.
"""

__all__ = [
    "MissingRequiredColumnsError",
    "resolve_columns",
    "find_column_value",
]


class MissingRequiredColumnsError(IngestionError):
    """Raised when a required field (Number / Opened) has no matching header."""

    def __init__(self, missing: Sequence[str]) -> None:
        self.missing = list(missing)
        names = ", ".join(DISPLAY_NAMES.get(m, m) for m in self.missing)
        super().__init__(f"missing required columns: {names}")


def _match(aliases: Iterable[str], headers: Sequence[str], lowered: Mapping[str, str]) -> str | None:
    aliases = tuple(aliases)
    for alias in aliases:
        if alias in headers:
            return alias
    for alias in aliases:
        hit = lowered.get(alias.lower())
        if hit is not None:
            return hit
    return None


def resolve_columns(
    header_row: Sequence[Any],
    alias_table: FieldAliasTable,
    required: Sequence[str] | None = None,
) -> dict[str, str]:
    """Resolve canonical field -> actual header text.

    Parameters:
        header_row: Header cells as read from the sheet
        alias_table: Aliases per canonical field
        required: Fields that must resolve (default: the table's required set)

    Returns:
        Mapping for every field that resolved; optional fields without a
        matching header are simply absent

    Raises:
        MissingRequiredColumnsError: when any required field is unresolved
    """
    headers = [cell_text(h).strip() for h in header_row]
    headers = [h for h in headers if h]
    lowered: dict[str, str] = {}
    for h in headers:
        lowered.setdefault(h.lower(), h)

    resolved: dict[str, str] = {}
    for name in alias_table:
        hit = _match(alias_table[name], headers, lowered)
        if hit is not None:
            resolved[name] = hit

    required = alias_table.required if required is None else required
    missing = [r for r in required if r not in resolved]
    if missing:
        raise MissingRequiredColumnsError(missing)
    return resolved


def find_column_value(row: Mapping[str, Any] | None, aliases: Iterable[str]) -> str:
    """Return the trimmed text of the first alias present in ``row``.

    Exact key match first, then case-insensitive. An alias that is present
    with an empty cell still wins (returns ""). Never raises.
    """
    if not row or not isinstance(row, Mapping):
        return ""
    aliases = tuple(aliases)
    for alias in aliases:
        if alias in row:
            return cell_text(row[alias]).strip()
    keys: dict[str, str] = {}
    for key in row:
        keys.setdefault(str(key).lower(), key)
    for alias in aliases:
        key = keys.get(alias.lower())
        if key is not None:
            return cell_text(row[key]).strip()
    return ""
