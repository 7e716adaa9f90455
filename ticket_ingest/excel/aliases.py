from __future__ import annotations

from ..models.config_models import FieldAliasTable

"""Built-in header alias tables.

Canonical field names are the Ticket attribute names. Aliases are listed in
resolution order (first match wins) and cover the English and Portuguese
exports seen in the field; the single-letter entries are bare spreadsheet
column letters left behind by exports without a header row label.
"""

__all__ = [
    "INCIDENT_ALIASES",
    "REQUEST_ALIASES",
    "KINDS",
    "alias_table_for",
]

_COMMENTS = (
    "Comments and Work notes",
    "Work notes",
    "Additional comments",
    "Comments",
    "Work Notes",
    "Comentários",
    "Notas de Trabalho",
    "Observações",
    "Notas",
    "Comentarios",
    "Notas de trabalho",
)

_CLOSED = (
    "Closed",
    "Closed at",
    "Closed Date",
    "Resolved",
    "Resolved at",
    "Data Fechamento",
    "Data de Fechamento",
    "Fechado em",
)

INCIDENT_ALIASES = FieldAliasTable(
    aliases={
        "number": ("Number", "Incident Number", "ID", "Reference", "IncidentNumber", "Número", "Numero", "Chamado", "Ticket"),
        "opened": ("Opened", "Created Date", "Open Date", "Start Date", "Created", "Data Abertura", "Data", "Data Criação", "Início"),
        "short_description": ("Short description", "Description", "Details", "Summary", "Descrição", "Descricao", "Resumo", "C"),
        "caller": (
            "Request item [Catalog Task] Requested for Name",
            "Requested for Name",
            "Caller",
            "Reported By",
            "Created By",
            "Requestor",
            "Solicitante",
            "Usuario",
            "Usuário",
            "D",
        ),
        "priority": ("Priority", "Incident Priority", "Urgency", "Prioridade", "Urgência"),
        "state": ("State", "Status", "Current State", "Estado", "Situação"),
        "category": ("Category", "Incident Category", "Type", "Categoria", "Tipo"),
        "subcategory": ("Subcategory", "Sub Category", "Sub-Category", "Subcategoria", "Sub-Categoria"),
        "assignment_group": ("Assignment group", "Assigned Group", "Team", "Grupo", "Grupo Atribuído", "G"),
        "assigned_to": ("Assigned to", "Assigned To", "Owner", "Atribuído para", "Atribuido para", "Responsável"),
        "updated": ("Updated", "Last Modified Date", "Modified Date", "Data Atualização", "Última Atualização"),
        "updated_by": ("Updated by", "Last Modified By", "Modified By", "Atualizado por", "Modificado por"),
        "business_impact": ("Business impact", "Impact", "Severity", "Impacto", "Severidade"),
        "response_time": ("Response Time", "Resolution Time", "Time to Resolve", "Tempo Resposta", "Tempo de Resolução"),
        "location": ("Location", "Site", "Local", "Localidade", "Localização"),
        "comments_and_work_notes": _COMMENTS,
        "closed": _CLOSED,
    }
)

REQUEST_ALIASES = FieldAliasTable(
    aliases={
        "number": ("Number", "Request Number", "ID", "Reference", "RequestNumber", "Número", "Numero", "Chamado", "Ticket"),
        "opened": ("Opened", "Open", "Created Date", "Open Date", "Start Date", "Created", "Data Abertura", "Data", "Data Criação", "Início"),
        "short_description": ("Short description", "Short Description", "Summary", "Resumo", "Descrição Curta", "Descricao Curta"),
        "description": ("Description", "Details", "Full Description", "Descrição", "Descricao", "Descrição Completa", "Descricao Completa"),
        "request_item": ("Request item [Catalog Task]", "Catalog Task", "Item Catálogo", "Item", "Tipo de Solicitação"),
        "requested_for_name": ("Requested for Name", "Requested For", "Solicitado Para", "Solicitante", "Usuario", "Usuário"),
        "priority": ("Priority", "Request Priority", "Urgency", "Prioridade", "Urgência"),
        "state": ("State", "Status", "Current State", "Estado", "Situação"),
        "assignment_group": ("Assignment group", "Assigned Group", "Team", "Grupo", "Grupo Atribuído", "Localidade"),
        "assigned_to": ("Assigned to", "Assigned To", "Owner", "Atribuído para", "Atribuido para", "Responsável"),
        "updated": ("Updated", "Last Modified Date", "Modified Date", "Data Atualização", "Última Atualização"),
        "updated_by": ("Updated by", "Last Modified By", "Modified By", "Atualizado por", "Modificado por"),
        "business_impact": ("Business impact", "Impact", "Severity", "Impacto", "Severidade"),
        "comments_and_work_notes": _COMMENTS,
        "closed": _CLOSED,
    }
)

KINDS: dict[str, FieldAliasTable] = {
    "incident": INCIDENT_ALIASES,
    "request": REQUEST_ALIASES,
}


def alias_table_for(kind: str) -> FieldAliasTable:
    """Return the built-in alias table for ``incident`` or ``request``."""
    try:
        return KINDS[kind]
    except KeyError:
        raise ValueError(f"unknown ticket kind '{kind}' (expected one of {sorted(KINDS)})") from None
