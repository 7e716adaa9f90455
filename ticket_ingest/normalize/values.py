from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from typing import Any

import pandas as pd

from .rules import (
    CANCELLED_TOKENS,
    HIGH_PRIORITY_RULES,
    LOCATION_MAP,
    PRIORITY_RULES,
    REQUEST_PRIORITY_RULES,
    REQUEST_STATE_RULES,
    REQUEST_STATUS_RULES,
    STATE_CLOSED,
    STATE_RULES,
    PriorityRule,
    StateRule,
)

"""Value normalizers for free-text ticket columns.

Pure, total functions: any input (str, number, None, NaN) yields a value and
none of them raise. Two fallback policies coexist on purpose:

- normalize_priority maps unrecognized input to the PRIORITY_UNDEFINED
  sentinel, so callers can tell "no tier" from a tier.
- get_incident_state and normalize_location_name return unrecognized input
  unchanged, so no data is lost when a vocabulary is incomplete. Callers must
  treat a pass-through state as "unknown", not as one of the three
  canonical states.
"""

__all__ = [
    "PRIORITY_UNDEFINED",
    "PRIORITY_TIERS",
    "LOCATION_UNSPECIFIED",
    "cell_text",
    "normalize_priority",
    "is_high_priority",
    "get_incident_state",
    "is_cancelled",
    "is_closed_state",
    "is_active_incident",
    "normalize_location_name",
    "original_location_name",
    "normalize_request_priority",
    "normalize_request_status",
    "normalize_request_state",
    "is_request_active",
    "is_request_high_priority",
]

PRIORITY_UNDEFINED = "Não definido"
PRIORITY_TIERS: tuple[str, ...] = ("P1", "P2", "P3", "P4")
LOCATION_UNSPECIFIED = "Não especificado"


def cell_text(value: Any) -> str:
    """Render a spreadsheet cell as text.

    None and NaN become "", integral floats lose their ".0" (Excel stores
    the priority code 1 as 1.0), everything else goes through str().
    """
    if value is None:
        return ""
    if isinstance(value, float):
        if math.isnan(value):
            return ""
        if value.is_integer():
            return str(int(value))
        return str(value)
    try:
        # pandas NaT / NA
        if pd.isna(value):
            return ""
    except (TypeError, ValueError):
        pass
    return str(value)


def _key(value: Any) -> str:
    return cell_text(value).strip().lower()


def normalize_priority(value: Any, rules: Sequence[PriorityRule] = PRIORITY_RULES) -> str:
    """Map free-text priority to P1..P4, or PRIORITY_UNDEFINED.

    Idempotent: canonical tiers and the sentinel map to themselves.
    """
    p = _key(value)
    if not p:
        return PRIORITY_UNDEFINED
    for rule in rules:
        if rule.matches(p):
            return rule.tier
    return PRIORITY_UNDEFINED


def is_high_priority(value: Any) -> bool:
    """True for P1/P2 spellings (critical, high, alta prioridade, ...)."""
    p = _key(value)
    if not p:
        return False
    return any(rule.matches(p) for rule in HIGH_PRIORITY_RULES)


def get_incident_state(value: Any, rules: Sequence[StateRule] = STATE_RULES) -> str:
    """Map a lifecycle state to Aberto / Em Andamento / Fechado.

    Unrecognized input is returned verbatim.
    """
    s = _key(value)
    for rule in rules:
        if rule.matches(s):
            return rule.target
    return value if isinstance(value, str) else cell_text(value)


def is_cancelled(value: Any, tokens: Sequence[str] = CANCELLED_TOKENS) -> bool:
    # 接尾辞の揺れを許容するため部分一致
    s = _key(value)
    if not s:
        return False
    return any(token in s for token in tokens)


def is_closed_state(value: Any) -> bool:
    """True when the state is closed/resolved or cancelled."""
    return get_incident_state(value) == STATE_CLOSED or is_cancelled(value)


def is_active_incident(value: Any) -> bool:
    """Tickets without a state are treated as active."""
    if not _key(value):
        return True
    return not is_closed_state(value)


def normalize_location_name(value: Any, mapping: Mapping[str, str] = LOCATION_MAP) -> str:
    """Shorten an assignment group / location to its stable site label.

    Unmapped input is returned unchanged; empty input yields
    LOCATION_UNSPECIFIED. The result is always a str so it can key a dict.
    """
    text = cell_text(value)
    if not text.strip():
        return LOCATION_UNSPECIFIED
    return mapping.get(text.strip(), text)


def original_location_name(label: Any, mapping: Mapping[str, str] = LOCATION_MAP) -> str:
    """Reverse of normalize_location_name; unknown labels are returned unchanged."""
    text = cell_text(label)
    for original, short in mapping.items():
        if short == text:
            return original
    return text


def normalize_request_priority(value: Any, rules: Sequence[PriorityRule] = REQUEST_PRIORITY_RULES) -> str:
    """Map a service request priority to HIGH / MEDIUM / LOW (default MEDIUM)."""
    p = _key(value)
    if not p:
        return "MEDIUM"
    for rule in rules:
        if rule.matches(p):
            return rule.tier
    return "MEDIUM"


def normalize_request_status(value: Any) -> str:
    """Map a service request status to NEW / IN_PROGRESS / ON_HOLD / COMPLETED / CANCELLED."""
    s = _key(value)
    if not s:
        return "NEW"
    for target, tokens in REQUEST_STATUS_RULES:
        if any(token in s for token in tokens):
            return target
    return "NEW"


def normalize_request_state(value: Any) -> str | None:
    """Map a service request State to its canonical label.

    Unlike get_incident_state this does not pass unknown text through:
    None means the state is not part of the request vocabulary.
    """
    s = _key(value)
    if not s:
        return None
    for label, tokens in REQUEST_STATE_RULES:
        if any(token in s for token in tokens):
            return label
    return None


def is_request_active(value: Any) -> bool:
    return normalize_request_status(value) not in ("COMPLETED", "CANCELLED")


def is_request_high_priority(value: Any) -> bool:
    return normalize_request_priority(value) == "HIGH"
