"""Durable and per-session storage.

Provides:
- DurableStore: quote snapshot and category filter, survives restarts
- EphemeralCache: last viewed quote, cleared when the session ends
"""

from .durable_store import DurableStore
from .session_cache import EphemeralCache

__all__ = ["DurableStore", "EphemeralCache"]
