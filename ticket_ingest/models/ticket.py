from __future__ import annotations

from dataclasses import asdict, dataclass, fields, replace
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .sla_result import SLAResult

"""Ticket (canonical record) model.

A Ticket is one spreadsheet row after column resolution, validation and
value normalization. Incidents and service requests share the same shape;
request-only columns (request_item, requested_for_name, description) stay
empty for incidents and vice versa.

Tickets are frozen. The SLA engine attaches its derived result through
``with_sla`` which returns a new instance.
"""

__all__ = [
    "Ticket",
    "TICKET_FIELDS",
    "DISPLAY_NAMES",
]


@dataclass(frozen=True)
class Ticket:
    """Canonical ticket record built by the row validator."""
    number: str
    opened: str
    short_description: str = ""
    caller: str = ""
    priority: str = ""
    state: str = ""
    category: str = ""
    subcategory: str = ""
    assignment_group: str = ""
    assigned_to: str = ""
    updated: str = ""
    updated_by: str = ""
    business_impact: str = ""
    comments_and_work_notes: str = ""
    # request 専用列
    request_item: str = ""
    requested_for_name: str = ""
    description: str = ""
    # 元システム由来の任意列
    location: str = ""
    response_time: str = ""
    closed: str = ""
    row_number: int = -1  # 元スプレッドシート行番号 (ヘッダ = 1)
    sla: SLAResult | None = None

    def with_sla(self, sla: SLAResult) -> Ticket:
        """Return a copy of this ticket carrying the given SLA result."""
        return replace(self, sla=sla)

    def as_display_dict(self) -> dict[str, Any]:
        """Return the record keyed by display (PascalCase) column names.

        Only the string columns are included; ``row_number`` and ``sla`` are
        bookkeeping, not ticket data.
        """
        data = asdict(self)
        return {DISPLAY_NAMES[name]: data[name] for name in TICKET_FIELDS}


# Ticket 文字列列 (row_number / sla を除く)
TICKET_FIELDS: tuple[str, ...] = tuple(
    f.name for f in fields(Ticket) if f.name not in ("row_number", "sla")
)

DISPLAY_NAMES: dict[str, str] = {
    "number": "Number",
    "opened": "Opened",
    "short_description": "ShortDescription",
    "caller": "Caller",
    "priority": "Priority",
    "state": "State",
    "category": "Category",
    "subcategory": "Subcategory",
    "assignment_group": "AssignmentGroup",
    "assigned_to": "AssignedTo",
    "updated": "Updated",
    "updated_by": "UpdatedBy",
    "business_impact": "BusinessImpact",
    "comments_and_work_notes": "CommentsAndWorkNotes",
    "request_item": "RequestItem",
    "requested_for_name": "RequestedForName",
    "description": "Description",
    "location": "Location",
    "response_time": "ResponseTime",
    "closed": "Closed",
}
