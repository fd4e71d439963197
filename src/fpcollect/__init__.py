"""Browser fingerprint collection service."""
