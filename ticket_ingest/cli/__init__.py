"""Command line entrypoint (``python -m ticket_ingest.cli``)."""
