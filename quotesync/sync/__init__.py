"""Reconciliation of local quotes with a remote source.

Provides a remote client, the sync engine state machine, resolution
policies for divergent data, and notifications for the view layer.
"""

from .engine import SyncEngine, SyncOutcome, SyncResult, SyncState
from .notifications import Notification, NotificationLevel, NotificationLog
from .remote_source import RemoteSource
from .resolution import ConsolePrompt, always_accept, always_decline, resolver_for_policy

__all__ = [
    "ConsolePrompt",
    "Notification",
    "NotificationLevel",
    "NotificationLog",
    "RemoteSource",
    "SyncEngine",
    "SyncOutcome",
    "SyncResult",
    "SyncState",
    "always_accept",
    "always_decline",
    "resolver_for_policy",
]
