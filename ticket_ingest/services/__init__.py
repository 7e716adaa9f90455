"""Row validation, the ingestion pipeline and the SLA engine."""
