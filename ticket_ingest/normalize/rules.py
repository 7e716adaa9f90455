from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

"""Rule tables for the value normalizers.

Each table is an ordered tuple of rules evaluated top to bottom; the first
rule that matches decides the canonical value and a fixed fallback applies
when none does. Tables are plain data so that new locale variants can be
added (in code or through the YAML config) without touching control flow.

All tokens are stored lower-cased; inputs are lower-cased and stripped
before matching.
"""

__all__ = [
    "PriorityRule",
    "StateRule",
    "PRIORITY_RULES",
    "STATE_RULES",
    "STATE_OPEN",
    "STATE_IN_PROGRESS",
    "STATE_CLOSED",
    "CANCELLED_TOKENS",
    "LOCATION_MAP",
    "REQUEST_PRIORITY_RULES",
    "REQUEST_STATUS_RULES",
    "REQUEST_STATE_RULES",
    "HIGH_PRIORITY_RULES",
    "priority_rules_from_config",
]


@dataclass(frozen=True)
class PriorityRule:
    """One tier of a priority rule table.

    A value matches when it equals one of ``exact``, starts with one of
    ``prefixes`` or contains one of ``contains``.
    """
    tier: str
    exact: frozenset[str] = frozenset()
    prefixes: tuple[str, ...] = ()
    contains: tuple[str, ...] = ()

    def matches(self, value: str) -> bool:
        if value in self.exact:
            return True
        if self.prefixes and value.startswith(self.prefixes):
            return True
        return any(token in value for token in self.contains)


@dataclass(frozen=True)
class StateRule:
    """Literal set of state spellings that map to one canonical state."""
    target: str
    values: frozenset[str]

    def matches(self, value: str) -> bool:
        return value in self.values


# P1 -> P4 の順に評価 (先勝ち)
PRIORITY_RULES: tuple[PriorityRule, ...] = (
    PriorityRule(
        tier="P1",
        exact=frozenset({"p1", "1", "priority 1", "critical", "crítico", "critico", "crítica", "critica"}),
        prefixes=("p1 -", "p1-", "1 -", "1-"),
        contains=("critical", "crítico", "critico"),
    ),
    PriorityRule(
        tier="P2",
        exact=frozenset({"p2", "2", "priority 2", "high", "alta", "alto"}),
        prefixes=("p2 -", "p2-", "2 -", "2-"),
        contains=("high", "alta prioridade", "alto"),
    ),
    PriorityRule(
        tier="P3",
        exact=frozenset({"p3", "3", "priority 3", "medium", "moderate", "média", "media", "médio", "medio"}),
        prefixes=("p3 -", "p3-", "3 -", "3-"),
        contains=("medium", "moderate", "médio", "medio"),
    ),
    PriorityRule(
        tier="P4",
        exact=frozenset({"p4", "4", "priority 4", "low", "planning", "baixa", "baixo"}),
        prefixes=("p4 -", "p4-", "4 -", "4-"),
        contains=("low", "baixo", "baixa"),
    ),
)

# 高優先度 (P1/P2) 判定用。PRIORITY_RULES より狭い語彙
HIGH_PRIORITY_RULES: tuple[PriorityRule, ...] = (
    PriorityRule(
        tier="P1",
        exact=frozenset({"p1", "1", "priority 1", "critical", "crítico"}),
        prefixes=("p1 -", "p1-", "1 -", "1-"),
        contains=("critical", "crítico"),
    ),
    PriorityRule(
        tier="P2",
        exact=frozenset({"p2", "2", "priority 2", "high", "alta"}),
        prefixes=("p2 -", "p2-", "2 -", "2-"),
        contains=("high priority", "alta prioridade"),
    ),
)

STATE_OPEN = "Aberto"
STATE_IN_PROGRESS = "Em Andamento"
STATE_CLOSED = "Fechado"

STATE_RULES: tuple[StateRule, ...] = (
    StateRule(target=STATE_OPEN, values=frozenset({"aberto", "new", "open", "novo"})),
    StateRule(
        target=STATE_IN_PROGRESS,
        values=frozenset({"em andamento", "in progress", "work in progress"}),
    ),
    StateRule(target=STATE_CLOSED, values=frozenset({"fechado", "closed", "resolved", "resolvido"})),
)

CANCELLED_TOKENS: tuple[str, ...] = ("cancel", "cancelled", "canceled", "cancelado", "cancelada")

# assignment group / location -> site + function の短縮ラベル
LOCATION_MAP: Mapping[str, str] = {
    "Brazil-Santo Andre-Manufacturing-Local Support": "SA-MNF-local Sup",
    "Brazil-Santo Andre-Network/Telecom": "SA-Net/Tel",
    "Brazil-Bahia-Manufacturing-Local Support": "BA-MNF-local Sup",
    "Brazil-Santo Andre-Local Support": "SA-Local Sup",
    "Brazil-Bahia-Local Support": "BA-Local Sup",
    "Brazil-Bahia-Network/Telecom": "BA-Net/Tel",
    "Brazil-Bandag-Local Support": "Berrini-Local Sup",
    "Brazil-Bandag-Manufacturing-Local Support": "Campinas-MNF-local Sup",
    "Brazil-Bandag-Network/Telecom": "Berrini-Net/Tel",
    "Brazil-Local Support": "BR-Local Sup",
    "Brazil-Mafra-Local Support": "SC-Local Sup",
    "Brazil-Telephony": "BR-Net/Tel",
    "Brazil-Ticket Manager": "BR-TM",
}

# Service request 用 (HIGH / MEDIUM / LOW)。該当なしは MEDIUM
REQUEST_PRIORITY_RULES: tuple[PriorityRule, ...] = (
    PriorityRule(
        tier="HIGH",
        exact=frozenset({"1", "2", "p1", "p2"}),
        prefixes=("1 -", "1-", "2 -", "2-", "p1", "p2"),
        contains=("high", "alta", "urgent", "urgente", "critical", "crítico"),
    ),
    PriorityRule(
        tier="LOW",
        exact=frozenset({"4", "p4"}),
        prefixes=("4 -", "4-", "p4"),
        contains=("low", "baixa", "baixo"),
    ),
)

# 部分一致で評価する。順序に意味がある (closed complete は cancelled より先)
REQUEST_STATUS_RULES: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("ON_HOLD", ("open", "aberto")),
    ("IN_PROGRESS", ("progress", "andamento", "assigned")),
    ("COMPLETED", ("completed", "concluído", "concluido", "done", "closed complete", "fechado completo")),
    ("CANCELLED", ("cancelled", "canceled", "cancelado", "closed incomplete", "closed skipped")),
    ("ON_HOLD", ("on hold", "hold", "espera", "pending", "aguardando")),
)

# Service request の State 語彙。部分一致、上から評価する。
# incomplete は complete より先 (Closed Incomplete を取りこぼさない)
REQUEST_STATE_RULES: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("Opened", ("opened", "new", "aberto", "novo")),
    ("Assigned", ("assigned", "atribuído", "atribuido")),
    ("Work in Progress", ("work in progress", "progress", "andamento")),
    ("Closed Incomplete", ("closed incomplete", "incomplete", "incompleto")),
    ("Closed Complete", ("closed complete", "complete", "concluído", "concluido")),
    ("Closed Skipped", ("closed skipped", "skipped")),
    ("On Hold", ("on hold", "hold", "espera", "aguardando")),
)


def _lowered(values: Iterable[Any]) -> list[str]:
    return [str(v).strip().lower() for v in values]


def priority_rules_from_config(data: Iterable[Mapping[str, Any]]) -> tuple[PriorityRule, ...]:
    """Build a priority rule table from config entries.

    Each entry is a mapping with ``tier`` and optional ``exact``, ``prefixes``
    and ``contains`` lists, e.g.::

        - tier: P1
          exact: [p1, "1", crítico]
          prefixes: ["1 -"]
    """
    rules: list[PriorityRule] = []
    for entry in data:
        rules.append(
            PriorityRule(
                tier=str(entry["tier"]),
                exact=frozenset(_lowered(entry.get("exact", ()))),
                prefixes=tuple(_lowered(entry.get("prefixes", ()))),
                contains=tuple(_lowered(entry.get("contains", ()))),
            )
        )
    return tuple(rules)
