"""Domain models for the ticket ingestion pipeline.

This package contains the record, error, result and configuration types
shared by the normalizers, the pipeline and the SLA engine.
"""

from .config_models import AliasOverlapError, FieldAliasTable, IngestConfig
from .ingestion_result import IngestionResult
from .sla_result import SLAResult
from .ticket import DISPLAY_NAMES, TICKET_FIELDS, Ticket
from .validation_error import RowError

__all__ = [
    # Configuration models
    "AliasOverlapError",
    "FieldAliasTable",
    "IngestConfig",
    # Records
    "Ticket",
    "TICKET_FIELDS",
    "DISPLAY_NAMES",
    "RowError",
    # Results
    "IngestionResult",
    "SLAResult",
]
