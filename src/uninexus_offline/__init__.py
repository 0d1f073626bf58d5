"""UniNexus offline write queue and reconciliation."""

__version__ = "0.1.0"
