from __future__ import annotations

from dataclasses import dataclass

"""SLAResult model.

Derived per ticket by services.sla.evaluate_sla; never stored on its own.
``computed=False`` is the explicit "not computed" sentinel used when the
timestamps of a ticket cannot be classified (missing, unparseable, negative
or NaN elapsed time).
"""

__all__ = [
    "SLAResult",
    "NOT_COMPUTED_LABEL",
    "LAST_TS_UPDATED",
    "LAST_TS_CLOSED",
    "LAST_TS_AS_OF",
]

NOT_COMPUTED_LABEL = "não calculado"

# 最終タイムスタンプの採用元
LAST_TS_UPDATED = "updated"
LAST_TS_CLOSED = "closed"
LAST_TS_AS_OF = "as_of"


@dataclass(frozen=True)
class SLAResult:
    """Outcome of an SLA evaluation for one ticket.

    Attributes:
        computed: False when the ticket could not be classified
        within_sla: True when elapsed hours do not exceed the threshold
        hours_over_threshold: 0 when within SLA, otherwise elapsed - threshold
        elapsed_hours: Hours between Opened and the last timestamp (2 decimals)
        threshold_hours: Threshold applied for the ticket priority
        last_timestamp_source: Which timestamp closed the interval
    """
    computed: bool
    within_sla: bool | None = None
    hours_over_threshold: float | None = None
    elapsed_hours: float | None = None
    threshold_hours: float | None = None
    last_timestamp_source: str | None = None

    @staticmethod
    def not_computed(threshold_hours: float | None = None) -> SLAResult:
        return SLAResult(computed=False, threshold_hours=threshold_hours)

    def label(self) -> str:
        """Short human readable rendering used by summary output."""
        if not self.computed:
            return NOT_COMPUTED_LABEL
        if self.within_sla:
            return "dentro do SLA"
        return f"fora do SLA (+{self.hours_over_threshold:g}h)"
