"""Sync engine reconciling the local collection with the remote source.

Each cycle fetches candidates, compares them with the collection as it is
at comparison time, and on divergence asks a resolver whether to overwrite
local quotes. Comparison is whole-collection structural equality because
remote records carry no identity to merge on.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any

from ..exceptions import RemoteUnavailable
from ..quotes.collection import QuoteCollection, serialize_quotes
from .notifications import Notification, NotificationLevel, Notifier, log_notifier
from .resolution import Resolver, always_decline, decide

if TYPE_CHECKING:
    from .remote_source import RemoteSource

logger = logging.getLogger(__name__)

OVERWRITTEN_MESSAGE = "Quotes synced with server. Local data was overwritten."
KEPT_LOCAL_MESSAGE = "Conflict detected. Local data was kept."
IN_PROGRESS_MESSAGE = "A sync is already in progress."


class SyncState(Enum):
    """Where the engine is within a sync cycle."""

    IDLE = "idle"
    FETCHING = "fetching"
    COMPARING = "comparing"
    NO_CHANGE = "no_change"
    AWAITING_RESOLUTION = "awaiting_resolution"
    RESOLVED = "resolved"


class SyncOutcome(Enum):
    """How a sync cycle ended."""

    NO_CHANGE = "no_change"
    OVERWRITTEN = "overwritten"
    KEPT_LOCAL = "kept_local"
    SKIPPED = "skipped"  # Another cycle was in flight


@dataclass
class SyncResult:
    """Result of a sync cycle."""

    outcome: SyncOutcome
    local_count: int = 0
    remote_count: int = 0
    timestamp: datetime | None = None


class SyncEngine:
    """Runs sync cycles on demand and on a recurring timer.

    Cycles are non-reentrant: while one is fetching or waiting on a
    resolution, further requests are rejected rather than queued.
    """

    def __init__(
        self,
        collection: QuoteCollection,
        remote: "RemoteSource",
        resolver: Resolver = always_decline,
        notifier: Notifier = log_notifier,
        notification_duration: float = 3.0,
    ):
        """Initialize the sync engine.

        Args:
            collection: Local collection to reconcile.
            remote: Source of candidate quotes.
            resolver: Decides whether to overwrite local quotes on divergence.
            notifier: Receives user-facing notifications.
            notification_duration: Seconds each notification stays visible.
        """
        self._collection = collection
        self._remote = remote
        self._resolver = resolver
        self._notifier = notifier
        self._duration = notification_duration
        self._state = SyncState.IDLE
        self._in_flight = False
        self._last_sync: datetime | None = None
        self._last_outcome: SyncOutcome | None = None
        self._task: asyncio.Task | None = None
        self._running = False

    @property
    def state(self) -> SyncState:
        return self._state

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    @property
    def last_sync(self) -> datetime | None:
        """Get timestamp of last completed cycle."""
        return self._last_sync

    @property
    def running(self) -> bool:
        return self._running

    def _notify(self, level: NotificationLevel, message: str) -> None:
        notification = Notification(level=level, message=message, duration=self._duration)
        try:
            self._notifier(notification)
        except Exception as e:
            logger.error(f"Notifier failed: {e}", exc_info=True)

    async def sync_now(self, manual: bool = False) -> SyncResult:
        """Run one sync cycle.

        Args:
            manual: True when requested by the user. A rejected manual request
                emits an informational notification; a timer tick does not.

        Returns:
            SyncResult describing how the cycle ended.
        """
        if self._in_flight:
            logger.info(f"Sync skipped, cycle in {self._state.value} state")
            if manual:
                self._notify(NotificationLevel.INFO, IN_PROGRESS_MESSAGE)
            return SyncResult(outcome=SyncOutcome.SKIPPED, timestamp=datetime.now())

        self._in_flight = True
        try:
            return await self._run_cycle()
        finally:
            self._state = SyncState.IDLE
            self._in_flight = False

    async def _run_cycle(self) -> SyncResult:
        self._state = SyncState.FETCHING
        try:
            candidates = list(await self._remote.fetch_candidates())
        except RemoteUnavailable as e:
            logger.warning(f"Remote unavailable, no candidates: {e}")
            candidates = []

        # Re-read the collection now so local edits made during the fetch count
        self._state = SyncState.COMPARING
        local = self._collection.quotes

        if serialize_quotes(local) == serialize_quotes(candidates):
            self._state = SyncState.NO_CHANGE
            logger.debug("Local quotes match remote, nothing to do")
            return self._finish(SyncOutcome.NO_CHANGE, local, candidates)

        self._state = SyncState.AWAITING_RESOLUTION
        logger.info(
            f"Divergence detected: {len(local)} local, {len(candidates)} remote"
        )
        try:
            accepted = await decide(self._resolver, local, candidates)
        except Exception as e:
            # Treated as a decline, local quotes stay untouched
            logger.error(f"Resolver failed: {e}", exc_info=True)
            accepted = False

        if accepted:
            self._collection.replace_all(candidates)
            outcome = SyncOutcome.OVERWRITTEN
            self._notify(NotificationLevel.SUCCESS, OVERWRITTEN_MESSAGE)
        else:
            outcome = SyncOutcome.KEPT_LOCAL
            self._notify(NotificationLevel.CONFLICT, KEPT_LOCAL_MESSAGE)

        self._state = SyncState.RESOLVED
        return self._finish(outcome, local, candidates)

    def _finish(self, outcome: SyncOutcome, local: list, candidates: list) -> SyncResult:
        self._last_sync = datetime.now()
        self._last_outcome = outcome
        logger.info(f"Sync: {outcome.value}")
        return SyncResult(
            outcome=outcome,
            local_count=len(local),
            remote_count=len(candidates),
            timestamp=self._last_sync,
        )

    async def start(self, interval_seconds: float = 30.0) -> None:
        """Start the recurring sync as a background task."""
        if self._running:
            return

        self._running = True
        self._task = asyncio.create_task(self._run_loop(interval_seconds))
        logger.info(f"Sync loop started (interval={interval_seconds}s)")

    async def stop(self) -> None:
        """Stop the recurring sync."""
        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        logger.info("Sync loop stopped")

    async def _run_loop(self, interval_seconds: float) -> None:
        """Main sync loop."""
        while self._running:
            await asyncio.sleep(interval_seconds)

            try:
                await self.sync_now()
            except Exception as e:
                logger.error(f"Sync cycle failed: {e}", exc_info=True)

    def get_sync_status(self) -> dict[str, Any]:
        """Get current sync status.

        Returns:
            Dictionary with sync state and statistics.
        """
        return {
            "state": self._state.value,
            "running": self._running,
            "last_sync": self._last_sync.isoformat() if self._last_sync else None,
            "last_outcome": self._last_outcome.value if self._last_outcome else None,
            "local_quotes": len(self._collection),
            "remote_failures": self._remote.consecutive_failures,
        }
