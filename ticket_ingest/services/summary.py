from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Mapping

from ..models.ingestion_result import IngestionResult
from ..models.ticket import Ticket
from ..models.validation_error import RowError
from ..normalize.rules import LOCATION_MAP
from ..normalize.values import normalize_location_name
from .sla import SLACompliance

"""Summary rendering for ingestion runs.

Format of the SUMMARY line::

    SUMMARY rows={total} records={accepted} errors={errors} rejected={rows}
    skipped={blank} elapsed_sec={elapsed}

Row errors render one per line as ``row N: <column> <reason> (value: X)``.
"""

__all__ = [
    "format_number",
    "render_summary_line",
    "render_error_lines",
    "render_sla_line",
    "count_by_location",
    "render_location_lines",
]


def format_number(value: float) -> str:
    """Format a metric without scientific notation or a trailing ``.0``."""
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if abs(value) < 0.01:
        return f"{value:.6f}".rstrip("0").rstrip(".")
    return str(round(value, 3))


def render_summary_line(result: IngestionResult) -> str:
    """Render the SUMMARY line for one IngestionResult.

    Examples:
        >>> r = IngestionResult(records=[], errors=[], total_rows=10, skipped_rows=1,
        ...                     rejected_rows=0, elapsed_seconds=2.0)
        >>> render_summary_line(r)
        'SUMMARY rows=10 records=0 errors=0 rejected=0 skipped=1 elapsed_sec=2'
    """
    return (
        f"SUMMARY rows={result.total_rows} "
        f"records={len(result.records)} "
        f"errors={len(result.errors)} "
        f"rejected={result.rejected_rows} "
        f"skipped={result.skipped_rows} "
        f"elapsed_sec={format_number(result.elapsed_seconds)}"
    )


def render_error_lines(errors: Iterable[RowError], limit: int | None = None) -> list[str]:
    """Render row errors for the operator, optionally truncated to ``limit`` lines."""
    errors = list(errors)
    shown = errors if limit is None else errors[:limit]
    lines = [e.describe() for e in shown]
    if limit is not None and len(errors) > limit:
        lines.append(f"... and {len(errors) - limit} more")
    return lines


def render_sla_line(compliance: SLACompliance) -> str:
    return (
        f"SLA compliant={compliance.compliant}/{compliance.total} "
        f"percentage={format_number(compliance.percentage)} "
        f"not_computed={compliance.not_computed}"
    )


def count_by_location(
    records: Iterable[Ticket],
    mapping: Mapping[str, str] | None = None,
) -> dict[str, int]:
    """Count tickets per location label (derived from the assignment group).

    Most frequent first; ties keep first-seen order.
    """
    counts = Counter(
        normalize_location_name(r.assignment_group, mapping if mapping is not None else LOCATION_MAP)
        for r in records
    )
    return dict(counts.most_common())


def render_location_lines(counts: Mapping[str, int]) -> list[str]:
    return [f"LOCATION {label}={count}" for label, count in counts.items()]
