"""Offline sync services: queue, reconciliation, cache, drafts and connectivity."""
