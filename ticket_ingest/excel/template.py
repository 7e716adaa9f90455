from __future__ import annotations

from pathlib import Path

import pandas as pd

"""Template workbook writer.

Produces an .xlsx the operator can fill in: the data sheet first (header row
plus two sample rows that ingest cleanly) and a documentation sheet listing
each column.
"""

__all__ = [
    "TEMPLATES",
    "write_template",
]

_INCIDENT_HEADERS = [
    "Number", "Opened", "Short description", "Caller", "Priority", "State", "Category",
    "Subcategory", "Assignment group", "Assigned to", "Updated", "Updated by", "Business impact",
]

_INCIDENT_SAMPLES = [
    ["INC0001234", "2025-04-01T08:30:00", "Computador não liga", "João Silva", "P3", "Em Andamento",
     "Hardware", "Desktop", "Brazil-Santo Andre-Local Support", "Maria Oliveira",
     "2025-04-01T10:15:00", "Maria Oliveira", "Medium"],
    ["INC0001235", "2025-04-01T09:15:00", "Erro ao acessar sistema ERP", "Carlos Mendes", "P2", "Aberto",
     "Software", "ERP", "Brazil-Bahia-Network/Telecom", "Pedro Santos", "", "", "High"],
]

_REQUEST_HEADERS = [
    "Number", "Opened", "Short description", "Request item [Catalog Task]", "Requested for Name",
    "Priority", "State", "Assignment group", "Assigned to", "Updated", "Updated by",
    "Comments and Work notes", "Business impact",
]

_REQUEST_SAMPLES = [
    ["REQ0001234", "2025-04-01T08:30:00", "Solicitação de novo laptop", "Hardware Request", "João Silva",
     "Medium", "Em Andamento", "Brazil-Santo Andre-Local Support", "Maria Oliveira",
     "2025-04-01T10:15:00", "Maria Oliveira",
     "Usuário solicitou novo laptop para substituir equipamento antigo.", "Medium"],
    ["REQ0001235", "2025-04-01T09:15:00", "Acesso ao sistema financeiro", "Access Request", "Carlos Mendes",
     "High", "Aberto", "Brazil-Bahia-Network/Telecom", "Pedro Santos", "", "",
     "Usuário precisa de acesso ao sistema financeiro para novo cargo.", "High"],
]

_FIELD_DOCS = {
    "Number": "Número único do chamado (obrigatório)",
    "Opened": "Data e hora de abertura (obrigatório, ex: 2025-04-01T08:30:00 ou 01/04/2025 08:30)",
    "Priority": "Prioridade (P1, P2, P3, P4)",
    "State": "Estado (Aberto, Em Andamento, Fechado, ...)",
    "Updated": "Data e hora da última atualização",
}

_REQUEST_FIELD_DOCS = {
    **_FIELD_DOCS,
    "Request item [Catalog Task]": "Item do catálogo (obrigatório)",
    "Requested for Name": "Solicitado para (obrigatório)",
    "State": "Estado (Opened, Assigned, Work in Progress, Closed Complete, Closed Incomplete, Closed Skipped, On Hold)",
}

TEMPLATES: dict[str, tuple[str, list[str], list[list[str]]]] = {
    "incident": ("Incidents", _INCIDENT_HEADERS, _INCIDENT_SAMPLES),
    "request": ("Requests", _REQUEST_HEADERS, _REQUEST_SAMPLES),
}


def write_template(path: Path, kind: str = "incident") -> Path:
    """Write the template workbook for ``kind`` to ``path``."""
    if kind not in TEMPLATES:
        raise ValueError(f"unknown ticket kind '{kind}' (expected one of {sorted(TEMPLATES)})")
    sheet_name, headers, samples = TEMPLATES[kind]
    field_docs = _REQUEST_FIELD_DOCS if kind == "request" else _FIELD_DOCS
    docs = [["Coluna", "Descrição"]] + [[h, field_docs.get(h, "")] for h in headers]

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        pd.DataFrame([headers, *samples]).to_excel(writer, sheet_name=sheet_name, header=False, index=False)
        pd.DataFrame(docs).to_excel(writer, sheet_name="Documentação", header=False, index=False)
    return path
