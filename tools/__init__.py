"""Provider-facing tooling for channel ingestion."""
