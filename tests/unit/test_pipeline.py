from __future__ import annotations

import pandas as pd
import pytest

from ticket_ingest.excel.aliases import INCIDENT_ALIASES
from ticket_ingest.excel.columns import MissingRequiredColumnsError
from ticket_ingest.excel.reader import EmptyFileError, MissingHeaderError
from ticket_ingest.models.config_models import IngestConfig
from ticket_ingest.models.validation_error import REASON_INVALID_DATE, REASON_INVALID_STATE, REASON_REQUIRED
from ticket_ingest.services.pipeline import NoValidRecordsError, alias_table_from_config, ingest

HEADER = ["Number", "Opened", "Priority"]


def _rows(n: int) -> list[list[object]]:
    return [[f"INC{i}", "2025-04-01T08:00:00", "P3"] for i in range(1, n + 1)]


def test_end_to_end_small_table(incident_grid):
    result = ingest(incident_grid)
    assert [r.number for r in result.records] == ["INC1", "INC3"]
    assert result.records[0].priority == "P1"
    assert result.records[1].priority == "P3"
    assert result.records[1].row_number == 4
    assert len(result.errors) == 1
    err = result.errors[0]
    assert (err.row, err.column, err.reason) == (3, "Number", REASON_REQUIRED)
    assert result.total_rows == 3
    assert result.rejected_rows == 1
    assert result.accepted_rows == 2
    assert result.has_errors


def test_error_isolation():
    rows = _rows(10)
    rows[4][1] = "not a date"
    result = ingest([HEADER, *rows])
    assert len(result.records) == 9
    assert len(result.errors) == 1
    assert result.errors[0].row == 6
    assert result.errors[0].reason == REASON_INVALID_DATE
    assert "INC5" not in [r.number for r in result.records]


def test_records_keep_source_order():
    result = ingest([HEADER, *_rows(5)])
    assert [r.number for r in result.records] == ["INC1", "INC2", "INC3", "INC4", "INC5"]
    assert [r.row_number for r in result.records] == [2, 3, 4, 5, 6]


def test_errors_sorted_by_row_then_column():
    rows = [["", "bad", "P9"], ["INC2", "", ""], ["INC3", "2025-04-01T08:00:00", ""]]
    result = ingest([HEADER, *rows])
    assert [(e.row, e.column) for e in result.errors] == [
        (2, "Number"),
        (2, "Opened"),
        (2, "Priority"),
        (3, "Opened"),
    ]


def test_blank_rows_are_skipped():
    rows = [_rows(1)[0], [None, None, None], ["", " ", None], _rows(2)[1]]
    result = ingest([HEADER, *rows])
    assert len(result.records) == 2
    assert result.errors == []
    assert result.skipped_rows == 2
    assert result.records[1].row_number == 5


def test_all_rows_invalid_raises():
    rows = [["", "2025-04-01T08:00:00", "P1"], ["INC2", "nope", "P1"]]
    with pytest.raises(NoValidRecordsError) as e:
        ingest([HEADER, *rows])
    assert len(e.value.errors) == 2
    assert e.value.total_rows == 2
    assert "no valid tickets" in str(e.value)


def test_only_blank_rows_raises_no_valid_records():
    with pytest.raises(NoValidRecordsError) as e:
        ingest([HEADER, [None, None, None]])
    assert e.value.errors == []


def test_structural_errors_fail_fast():
    with pytest.raises(EmptyFileError):
        ingest([])
    with pytest.raises(EmptyFileError):
        ingest([HEADER])
    with pytest.raises(MissingHeaderError):
        ingest(["Number", ["INC1"]])
    with pytest.raises(MissingRequiredColumnsError) as e:
        ingest([["Priority", "State"], ["P1", "new"]])
    assert e.value.missing == ["number", "opened"]


def test_missing_optional_columns_are_empty():
    result = ingest([["Number", "Opened"], ["INC1", "2025-04-01T08:00:00"]])
    t = result.records[0]
    assert t.priority == ""
    assert t.state == ""
    assert result.columns == {"number": "Number", "opened": "Opened"}


def test_portuguese_and_english_headers_give_same_records():
    en = ingest([["Number", "Opened", "Priority"], ["INC1", "01/04/2025 08:00", "Alta"]])
    pt = ingest([["Prioridade", "Número", "Data Abertura"], ["Alta", "INC1", "01/04/2025 08:00"]])
    assert en.records == pt.records


def test_progress_callback_stride():
    calls: list[tuple[int, int]] = []
    ingest([HEADER, *_rows(250)], progress=lambda done, total: calls.append((done, total)), stride=100)
    assert calls == [(100, 250), (200, 250), (250, 250)]


def test_progress_callback_does_not_change_result():
    rows = _rows(30)
    rows[10][0] = ""
    plain = ingest([HEADER, *rows])
    paced = ingest([HEADER, *rows], progress=lambda done, total: None, stride=7)
    assert plain.records == paced.records
    assert plain.errors == paced.errors


def test_dataframe_input():
    df = pd.DataFrame([HEADER, *_rows(2)])
    result = ingest(df)
    assert len(result.records) == 2


def test_mapping_rows():
    # ヘッダ行 + dict 行 (ヘッダ名 -> 値)
    grid = [HEADER, {"Number": "INC1", "Opened": "2025-04-01T08:00:00", "Priority": "P2"}]
    result = ingest(grid)
    assert result.records[0].priority == "P2"


def test_alias_table_from_config_overrides():
    cfg = IngestConfig(alias_overrides={"incident": {"number": ("Ticket ID",)}})
    table = alias_table_from_config("incident", cfg)
    assert table["number"] == ("Ticket ID",)
    result = ingest([["Ticket ID", "Opened"], ["X1", "2025-04-01T08:00:00"]], alias_table=table)
    assert result.records[0].number == "X1"
    assert alias_table_from_config("incident", None) is INCIDENT_ALIASES


def test_request_kind_applies_request_checks():
    grid = [
        ["Number", "Opened", "Request item [Catalog Task]", "Requested for Name", "Updated", "State"],
        ["REQ1", "2025-04-01T08:00:00", "", "", "garbage", "bogus state"],
        ["REQ2", "2025-04-01T08:00:00", "Laptop", "Ana", "", "Em Andamento"],
    ]
    result = ingest(grid, kind="request")
    assert [(r.number, r.state) for r in result.records] == [("REQ2", "Work in Progress")]
    assert [(e.row, e.column, e.reason) for e in result.errors] == [
        (2, "Updated", REASON_INVALID_DATE),
        (2, "RequestItem", REASON_REQUIRED),
        (2, "RequestedForName", REASON_REQUIRED),
        (2, "State", REASON_INVALID_STATE),
    ]
    # 同じ表でも incident として読めば request 用チェックは掛からない
    assert len(ingest(grid[:1] + grid[2:]).records) == 1


def test_alias_override_on_numeric_header():
    table = INCIDENT_ALIASES.merged({"number": ("1",)})
    result = ingest([[1.0, "Opened"], ["X1", "2025-04-01T08:00:00"]], alias_table=table)
    assert result.records[0].number == "X1"
