"""Family event ingestion, deduplication and enrichment pipeline."""
