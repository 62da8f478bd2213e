"""Offline-first quote collection with remote reconciliation."""

__version__ = "0.1.0"
