"""Market data ingestion: source protocols and venue clients."""
