"""Value normalizers and the flexible date parser."""

from .dates import hours_between, parse_flexible_date
from .values import (
    PRIORITY_UNDEFINED,
    get_incident_state,
    is_cancelled,
    normalize_location_name,
    normalize_priority,
)

__all__ = [
    "PRIORITY_UNDEFINED",
    "get_incident_state",
    "hours_between",
    "is_cancelled",
    "normalize_location_name",
    "normalize_priority",
    "parse_flexible_date",
]
