"""Event logs and label files."""
