from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import UTC, datetime, tzinfo
from types import MappingProxyType
from typing import Any

from ..models.sla_result import LAST_TS_AS_OF, LAST_TS_CLOSED, LAST_TS_UPDATED, SLAResult
from ..models.ticket import DISPLAY_NAMES, Ticket
from ..normalize.dates import hours_between, parse_flexible_date, resolve_timezone
from ..normalize.values import (
    is_closed_state,
    normalize_priority,
    normalize_request_priority,
    normalize_request_status,
)

"""SLA duration engine.

Classifies each ticket as within SLA or computes by how many hours it
breached, from Opened to the last known timestamp:

- Updated, when present and parseable
- otherwise Closed, when the state is closed/cancelled and Closed parses
- otherwise ``assume_open_as_of``: the instant an open ticket is measured
  against. Callers should pass it explicitly; only when it is omitted does
  the engine fall back to the current wall-clock time.

The breach check compares exact elapsed time with the threshold; reported
hour figures are rounded to ``HOURS_PRECISION`` decimals. Tickets whose
timestamps cannot be classified (Opened unparseable, negative or NaN
elapsed time) get SLAResult.not_computed(); evaluate_sla never raises.

Service requests follow their own rules (see evaluate_request_sla): only a
COMPLETED request stops at Updated, and elapsed time is compared in whole
days.
"""

__all__ = [
    "SLA_THRESHOLDS_HOURS",
    "DEFAULT_SLA_HOURS",
    "REQUEST_SLA_THRESHOLDS_DAYS",
    "HOURS_PRECISION",
    "SLACompliance",
    "evaluate_sla",
    "evaluate_request_sla",
    "attach_sla",
    "out_of_sla",
    "sla_compliance",
    "format_hours_as_days",
]

logger = logging.getLogger(__name__)

SLA_THRESHOLDS_HOURS: Mapping[str, float] = MappingProxyType({"P1": 1, "P2": 4, "P3": 36, "P4": 72})
DEFAULT_SLA_HOURS: float = 36

# Service request は日単位
REQUEST_SLA_THRESHOLDS_DAYS: Mapping[str, float] = MappingProxyType({"HIGH": 3, "MEDIUM": 5, "LOW": 7})

HOURS_PRECISION = 2


@dataclass(frozen=True)
class SLACompliance:
    """Compliance summary over a set of tickets (not-computed excluded)."""
    total: int
    compliant: int
    not_computed: int

    @property
    def percentage(self) -> float:
        if self.total == 0:
            return 0.0
        return round(self.compliant / self.total * 100, 1)


def _field(record: Ticket | Mapping[str, Any], name: str) -> Any:
    if isinstance(record, Mapping):
        if name in record:
            return record[name]
        return record.get(DISPLAY_NAMES.get(name, name), "")
    return getattr(record, name, "")


def _measure(
    record: Ticket | Mapping[str, Any],
    threshold: float,
    assume_open_as_of: datetime | None,
    tz: str | tzinfo | None,
) -> SLAResult:
    zone = resolve_timezone(tz)
    opened = parse_flexible_date(_field(record, "opened"), tz=zone)
    if opened is None:
        return SLAResult.not_computed(threshold)

    last = parse_flexible_date(_field(record, "updated"), tz=zone)
    source = LAST_TS_UPDATED
    if last is None and is_closed_state(_field(record, "state")):
        last = parse_flexible_date(_field(record, "closed"), tz=zone)
        source = LAST_TS_CLOSED
    if last is None:
        as_of = assume_open_as_of if assume_open_as_of is not None else datetime.now(UTC)
        last = parse_flexible_date(as_of, tz=zone)
        source = LAST_TS_AS_OF
    if last is None:
        return SLAResult.not_computed(threshold)

    elapsed = hours_between(opened, last)
    if math.isnan(elapsed) or elapsed < 0:
        return SLAResult.not_computed(threshold)

    within = elapsed <= threshold
    over = 0.0 if within else round(elapsed - threshold, HOURS_PRECISION)
    return SLAResult(
        computed=True,
        within_sla=within,
        hours_over_threshold=over,
        elapsed_hours=round(elapsed, HOURS_PRECISION),
        threshold_hours=threshold,
        last_timestamp_source=source,
    )


def _measure_request(
    record: Ticket | Mapping[str, Any],
    threshold_days: float,
    assume_open_as_of: datetime | None,
    tz: str | tzinfo | None,
) -> SLAResult:
    # 完了済みのみ Updated まで、それ以外は as_of まで。比較は切り捨てた日数で行う
    threshold = threshold_days * 24
    zone = resolve_timezone(tz)
    opened = parse_flexible_date(_field(record, "opened"), tz=zone)
    if opened is None:
        return SLAResult.not_computed(threshold)

    last = None
    source = LAST_TS_UPDATED
    if normalize_request_status(_field(record, "state")) == "COMPLETED":
        last = parse_flexible_date(_field(record, "updated"), tz=zone)
    if last is None:
        as_of = assume_open_as_of if assume_open_as_of is not None else datetime.now(UTC)
        last = parse_flexible_date(as_of, tz=zone)
        source = LAST_TS_AS_OF
    if last is None:
        return SLAResult.not_computed(threshold)

    elapsed = hours_between(opened, last)
    if math.isnan(elapsed) or elapsed < 0:
        return SLAResult.not_computed(threshold)

    within = int(elapsed // 24) <= threshold_days
    over = 0.0 if within else round(elapsed - threshold, HOURS_PRECISION)
    return SLAResult(
        computed=True,
        within_sla=within,
        hours_over_threshold=over,
        elapsed_hours=round(elapsed, HOURS_PRECISION),
        threshold_hours=threshold,
        last_timestamp_source=source,
    )


def evaluate_sla(
    record: Ticket | Mapping[str, Any],
    *,
    assume_open_as_of: datetime | None = None,
    thresholds: Mapping[str, float] = SLA_THRESHOLDS_HOURS,
    default_hours: float = DEFAULT_SLA_HOURS,
    tz: str | tzinfo | None = UTC,
) -> SLAResult:
    """Evaluate the incident SLA of one ticket.

    Parameters:
        record: Ticket, or a mapping with snake_case or display column names
        assume_open_as_of: Instant used as "now" for tickets still open
        thresholds: Priority tier -> max hours
        default_hours: Threshold for an unrecognized priority
        tz: Timezone for naive timestamps

    Returns:
        SLAResult; ``computed=False`` when the ticket cannot be classified
    """
    threshold = default_hours
    try:
        threshold = thresholds.get(normalize_priority(_field(record, "priority")), default_hours)
        return _measure(record, threshold, assume_open_as_of, tz)
    except (TypeError, ValueError, AttributeError, OverflowError) as e:
        logger.debug(f"sla not computed for {_safe_number(record)}: {e}")
        return SLAResult.not_computed(threshold)


def evaluate_request_sla(
    record: Ticket | Mapping[str, Any],
    *,
    assume_open_as_of: datetime | None = None,
    thresholds_days: Mapping[str, float] = REQUEST_SLA_THRESHOLDS_DAYS,
    tz: str | tzinfo | None = UTC,
) -> SLAResult:
    """Evaluate a service request against the day-based request thresholds.

    A request is measured up to Updated only when its status is COMPLETED;
    any other request is measured up to ``assume_open_as_of``. Elapsed time
    is truncated to whole days before the comparison, so a HIGH request
    closed after 3.5 days is still within its 3 day threshold.
    """
    threshold_days = thresholds_days["MEDIUM"]
    try:
        tier = normalize_request_priority(_field(record, "priority"))
        threshold_days = thresholds_days.get(tier, thresholds_days["MEDIUM"])
        return _measure_request(record, threshold_days, assume_open_as_of, tz)
    except (TypeError, ValueError, AttributeError, OverflowError) as e:
        logger.debug(f"request sla not computed for {_safe_number(record)}: {e}")
        return SLAResult.not_computed(threshold_days * 24)


def _safe_number(record: Any) -> str:
    try:
        return str(_field(record, "number"))
    except (TypeError, AttributeError):
        return "<unknown>"


def attach_sla(records: Iterable[Ticket], *, kind: str = "incident", **kwargs: Any) -> list[Ticket]:
    """Return copies of ``records`` carrying their SLA result.

    ``kwargs`` are passed to evaluate_sla (incident) or evaluate_request_sla
    (request).
    """
    evaluate = evaluate_request_sla if kind == "request" else evaluate_sla
    return [r.with_sla(evaluate(r, **kwargs)) for r in records]


def out_of_sla(records: Iterable[Ticket], **kwargs: Any) -> list[Ticket]:
    """Tickets that breached their SLA, with the result attached."""
    return [t for t in attach_sla(records, **kwargs) if t.sla is not None and t.sla.computed and not t.sla.within_sla]


def sla_compliance(records: Iterable[Ticket], **kwargs: Any) -> SLACompliance:
    """Count compliant tickets; not-computed tickets are reported apart."""
    total = compliant = skipped = 0
    for t in attach_sla(records, **kwargs):
        if t.sla is None or not t.sla.computed:
            skipped += 1
            continue
        total += 1
        if t.sla.within_sla:
            compliant += 1
    return SLACompliance(total=total, compliant=compliant, not_computed=skipped)


def format_hours_as_days(hours: float) -> str:
    """Render whole hours as ``"5 horas"`` / ``"2 dias e 3 horas"``."""
    whole = int(hours)
    if whole < 24:
        return f"{whole} horas"
    days, rest = divmod(whole, 24)
    text = f"{days} {'dia' if days == 1 else 'dias'}"
    if rest > 0:
        text += f" e {rest} horas"
    return text
