"""Excel ticket export ingestion: column resolution, validation, normalization and SLA."""

from .models import FieldAliasTable, IngestConfig, IngestionResult, RowError, SLAResult, Ticket
from .services.pipeline import NoValidRecordsError, ingest, ingest_file
from .services.sla import evaluate_sla

__version__ = "0.1.0"

__all__ = [
    "FieldAliasTable",
    "IngestConfig",
    "IngestionResult",
    "RowError",
    "SLAResult",
    "Ticket",
    "NoValidRecordsError",
    "ingest",
    "ingest_file",
    "evaluate_sla",
    "__version__",
]
