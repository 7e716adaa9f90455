# Shared pytest fixtures
from __future__ import annotations

import tempfile
from pathlib import Path

import pandas as pd
import pytest

from ticket_ingest.logging.init import reset_logging

INCIDENT_HEADER = ["Number", "Opened", "Short description", "Priority", "State", "Assignment group", "Updated"]


def make_excel(directory: Path, name: str, sheets: dict[str, list[list[object]]]) -> Path:
    """Write a workbook whose sheets are raw grids (first row = header)."""
    p = directory / name
    with pd.ExcelWriter(p, engine="openpyxl") as writer:
        for sheet, rows in sheets.items():
            df = pd.DataFrame(rows)
            df.to_excel(writer, sheet_name=sheet, header=False, index=False)
    return p


@pytest.fixture(autouse=True)
def _clean_state(monkeypatch):
    # ロガーは stdout を掴むため、capsys の差し替え後に作り直す
    reset_logging()
    monkeypatch.delenv("TICKET_INGEST_CONFIG", raising=False)
    monkeypatch.delenv("TICKET_INGEST_TZ", raising=False)
    yield
    reset_logging()


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture()
def sample_config_yaml() -> str:
    return """timezone: America/Sao_Paulo
progress_stride: 50
sla:
  thresholds:
    P3: 24
  default_hours: 48
aliases:
  incident:
    number: [Number, Ticket ID]
location_map:
  Brazil-Recife-Local Support: PE-Local Sup
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "ingest.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def incident_grid() -> list[list[object]]:
    return [
        INCIDENT_HEADER,
        ["INC1", "2025-04-01T08:00:00", "Printer down", "Crítico", "Aberto", "Brazil-Bahia-Local Support", ""],
        ["", "2025-04-01T09:00:00", "No number", "P2", "new", "", ""],
        ["INC3", "01/04/2025 10:00", "VPN", "3 - Moderate", "Resolved", "Brazil-Telephony", "01/04/2025 12:00"],
    ]


@pytest.fixture()
def incident_file(temp_workdir: Path, incident_grid) -> Path:
    return make_excel(temp_workdir / "data", "incidents.xlsx", {"Incidents": incident_grid})
