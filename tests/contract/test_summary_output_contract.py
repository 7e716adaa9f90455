from __future__ import annotations

import re
from pathlib import Path

from ticket_ingest.cli.__main__ import main as cli_main

"""SUMMARY line contract: exactly one line, fixed key order."""

SUMMARY_RE = re.compile(
    r"^SUMMARY rows=\d+ records=\d+ errors=\d+ rejected=\d+ skipped=\d+ elapsed_sec=[0-9.]+$"
)


def test_summary_line_format(temp_workdir: Path, incident_file: Path, capsys):
    cli_main([str(incident_file)])
    lines = [line for line in capsys.readouterr().out.splitlines() if line.startswith("SUMMARY")]
    assert len(lines) == 1
    assert SUMMARY_RE.match(lines[0])


def test_summary_is_last_line(temp_workdir: Path, incident_file: Path, capsys):
    cli_main([str(incident_file), "--sla", "--as-of", "2025-04-02T08:00:00", "--by-location"])
    lines = capsys.readouterr().out.splitlines()
    assert lines[-1].startswith("SUMMARY ")
