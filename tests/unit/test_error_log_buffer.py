from __future__ import annotations

import json
import re
from pathlib import Path

from ticket_ingest.logging.error_log import ErrorLogBuffer
from ticket_ingest.models.validation_error import REASON_INVALID_DATE, REASON_REQUIRED, RowError


def test_flush_empty_returns_none(tmp_path: Path):
    buf = ErrorLogBuffer(tmp_path / "logs")
    assert buf.flush() is None
    assert not (tmp_path / "logs").exists()


def test_flush_writes_json_lines(tmp_path: Path):
    buf = ErrorLogBuffer(tmp_path / "logs")
    buf.append(RowError(row=3, column="Number", value="", reason=REASON_REQUIRED), file="a.xlsx")
    buf.extend(
        [RowError(row=4, column="Opened", value="ontem", reason=REASON_INVALID_DATE)],
        file="a.xlsx",
    )
    assert len(buf) == 2
    path = buf.flush()
    assert path is not None
    assert re.fullmatch(r"row-errors-\d{8}-\d{6}\.log", path.name)
    lines = path.read_text(encoding="utf-8").splitlines()
    assert [json.loads(line) for line in lines] == [
        {"file": "a.xlsx", "row": 3, "column": "Number", "value": "", "reason": "required"},
        {"file": "a.xlsx", "row": 4, "column": "Opened", "value": "ontem", "reason": "invalid date"},
    ]
    # flush 後はバッファが空
    assert len(buf) == 0
    assert buf.flush() is None


def test_flush_appends_to_same_file(tmp_path: Path):
    buf = ErrorLogBuffer(tmp_path)
    buf.append(RowError(row=2, column="Number", value="", reason=REASON_REQUIRED))
    first = buf.flush()
    buf.append(RowError(row=5, column="Number", value="", reason=REASON_REQUIRED))
    second = buf.flush()
    assert first == second
    rows = [json.loads(line)["row"] for line in second.read_text(encoding="utf-8").splitlines()]
    assert rows == [2, 5]
    assert json.loads(second.read_text(encoding="utf-8").splitlines()[0])["file"] == ""


def test_row_error_describe_and_json():
    e = RowError(row=6, column="Opened", value="ontem", reason=REASON_INVALID_DATE)
    assert e.describe() == "row 6: Opened invalid date (value: ontem)"
    assert RowError(row=3, column="Number", value="", reason=REASON_REQUIRED).describe() == "row 3: Number required"
    assert json.loads(e.to_json_line()) == {"row": 6, "column": "Opened", "value": "ontem", "reason": "invalid date"}
