from __future__ import annotations

from datetime import UTC, datetime

import pytest

from ticket_ingest.models.sla_result import LAST_TS_AS_OF, LAST_TS_CLOSED, LAST_TS_UPDATED, NOT_COMPUTED_LABEL
from ticket_ingest.models.ticket import Ticket
from ticket_ingest.services.sla import (
    DEFAULT_SLA_HOURS,
    SLA_THRESHOLDS_HOURS,
    attach_sla,
    evaluate_request_sla,
    evaluate_sla,
    format_hours_as_days,
    out_of_sla,
    sla_compliance,
)

AS_OF = datetime(2025, 4, 2, 8, 0, tzinfo=UTC)


def _ticket(**kw) -> Ticket:
    base = {"number": "INC1", "opened": "2025-04-01T08:00:00", "priority": "P2"}
    base.update(kw)
    return Ticket(**base)


def test_thresholds_table():
    assert dict(SLA_THRESHOLDS_HOURS) == {"P1": 1, "P2": 4, "P3": 36, "P4": 72}
    assert DEFAULT_SLA_HOURS == 36


def test_p2_exactly_at_threshold_is_within():
    r = evaluate_sla(_ticket(updated="2025-04-01T12:00:00"))
    assert r.computed
    assert r.within_sla is True
    assert r.hours_over_threshold == 0
    assert r.elapsed_hours == 4
    assert r.threshold_hours == 4
    assert r.last_timestamp_source == LAST_TS_UPDATED


def test_p2_one_minute_over_is_breach():
    r = evaluate_sla(_ticket(updated="2025-04-01T12:01:00"))
    assert r.within_sla is False
    assert r.hours_over_threshold == pytest.approx(0.02)
    assert r.label() == "fora do SLA (+0.02h)"


def test_unknown_priority_uses_default_threshold():
    r = evaluate_sla(_ticket(priority="???", updated="2025-04-02T20:00:00"))
    assert r.threshold_hours == DEFAULT_SLA_HOURS
    assert r.within_sla is True


def test_raw_priority_spelling_is_normalized():
    r = evaluate_sla(_ticket(priority="1 - Critical", updated="2025-04-01T09:30:00"))
    assert r.threshold_hours == 1
    assert r.hours_over_threshold == 0.5


def test_open_ticket_uses_as_of():
    r = evaluate_sla(_ticket(priority="P4", state="Aberto"), assume_open_as_of=AS_OF)
    assert r.last_timestamp_source == LAST_TS_AS_OF
    assert r.elapsed_hours == 24
    assert r.within_sla is True


def test_closed_ticket_without_updated_uses_closed():
    t = _ticket(priority="P3", state="Resolved", closed="2025-04-03T08:00:00")
    r = evaluate_sla(t, assume_open_as_of=AS_OF)
    assert r.last_timestamp_source == LAST_TS_CLOSED
    assert r.elapsed_hours == 48
    assert r.hours_over_threshold == 12


def test_open_ticket_ignores_closed_column():
    t = _ticket(priority="P3", state="Em Andamento", closed="2025-04-03T08:00:00")
    assert evaluate_sla(t, assume_open_as_of=AS_OF).last_timestamp_source == LAST_TS_AS_OF


@pytest.mark.parametrize(
    "kw",
    [
        {"opened": ""},
        {"opened": "garbage"},
        # updated が opened より前
        {"updated": "2025-03-31T08:00:00"},
    ],
)
def test_not_computed(kw):
    r = evaluate_sla(_ticket(**kw), assume_open_as_of=AS_OF)
    assert r.computed is False
    assert r.within_sla is None
    assert r.label() == NOT_COMPUTED_LABEL


def test_evaluate_sla_accepts_display_mappings():
    record = {"Number": "INC1", "Opened": "2025-04-01T08:00:00", "Priority": "P1", "Updated": "2025-04-01T08:30:00"}
    assert evaluate_sla(record).within_sla is True
    record = {"number": "INC1", "opened": "2025-04-01T08:00:00", "priority": "P1", "updated": "2025-04-01T10:00:00"}
    assert evaluate_sla(record).within_sla is False


def test_evaluate_sla_never_raises():
    assert evaluate_sla(object()).computed is False
    assert evaluate_sla({}).computed is False


def test_custom_thresholds_and_timezone():
    t = _ticket(priority="P3", opened="01/04/2025 08:00", updated="02/04/2025 09:00")
    r = evaluate_sla(t, thresholds={**SLA_THRESHOLDS_HOURS, "P3": 24}, tz="America/Sao_Paulo")
    assert r.threshold_hours == 24
    assert r.hours_over_threshold == 1


def test_request_sla_uses_day_thresholds():
    t = _ticket(priority="High", state="Closed Complete", updated="2025-04-05T09:00:00")
    r = evaluate_request_sla(t)
    assert r.threshold_hours == 72
    assert r.within_sla is False
    assert r.hours_over_threshold == 25
    assert r.last_timestamp_source == LAST_TS_UPDATED
    r = evaluate_request_sla(_ticket(priority="", state="Closed Complete", updated="2025-04-04T09:00:00"))
    assert r.threshold_hours == 120
    assert r.within_sla is True


def test_request_sla_open_request_ignores_updated():
    t = _ticket(priority="High", state="Work in Progress", updated="2025-04-01T09:00:00")
    r = evaluate_request_sla(t, assume_open_as_of=datetime(2025, 4, 10, tzinfo=UTC))
    assert r.last_timestamp_source == LAST_TS_AS_OF
    assert r.elapsed_hours == 208
    assert r.within_sla is False
    assert r.hours_over_threshold == 136


def test_request_sla_compares_whole_days():
    # 3.5 日は 3 日に切り捨てられ HIGH (3 日) の範囲内
    r = evaluate_request_sla(_ticket(priority="High", state="Closed Complete", updated="2025-04-04T20:00:00"))
    assert r.elapsed_hours == 84
    assert r.within_sla is True
    assert r.hours_over_threshold == 0
    r = evaluate_request_sla(_ticket(priority="High", state="Closed Complete", updated="2025-04-05T08:00:00"))
    assert r.within_sla is False
    assert r.hours_over_threshold == 24


def test_attach_out_of_sla_and_compliance():
    records = [
        _ticket(number="A", priority="P1", updated="2025-04-01T08:30:00"),
        _ticket(number="B", priority="P1", updated="2025-04-01T10:00:00"),
        _ticket(number="C", priority="P2", updated="2025-04-01T11:00:00"),
        _ticket(number="D", opened="bad"),
    ]
    attached = attach_sla(records, assume_open_as_of=AS_OF)
    assert all(t.sla is not None for t in attached)
    assert records[0].sla is None

    late = out_of_sla(records, assume_open_as_of=AS_OF)
    assert [t.number for t in late] == ["B"]

    c = sla_compliance(records, assume_open_as_of=AS_OF)
    assert (c.total, c.compliant, c.not_computed) == (3, 2, 1)
    assert c.percentage == 66.7


def test_attach_sla_request_kind():
    t = _ticket(priority="Low", state="Closed Complete", updated="2025-04-05T08:00:00")
    [attached] = attach_sla([t], kind="request")
    assert attached.sla.threshold_hours == 168
    assert attached.sla.within_sla is True
    assert attached.sla.last_timestamp_source == LAST_TS_UPDATED


def test_compliance_empty():
    assert sla_compliance([]).percentage == 0.0


@pytest.mark.parametrize(
    "hours, text",
    [
        (0, "0 horas"),
        (5, "5 horas"),
        (23.9, "23 horas"),
        (24, "1 dia"),
        (26, "1 dia e 2 horas"),
        (51, "2 dias e 3 horas"),
        (72, "3 dias"),
    ],
)
def test_format_hours_as_days(hours, text):
    assert format_hours_as_days(hours) == text
