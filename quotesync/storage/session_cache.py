"""Per-session cache, discarded when the process ends."""

import logging

logger = logging.getLogger(__name__)

LAST_VIEWED_KEY = "lastViewedQuote"


class EphemeralCache:
    """Session-scoped key/value medium. Nothing here survives a restart."""

    def __init__(self):
        self._values: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value

    def clear(self) -> None:
        """Forget everything, as at the end of a session."""
        self._values.clear()

    def remember_last_viewed(self, text: str) -> None:
        self.set(LAST_VIEWED_KEY, text)
        logger.debug("Remembered last viewed quote")

    def last_viewed(self) -> str | None:
        """Text of the most recently displayed quote, if any."""
        return self.get(LAST_VIEWED_KEY)
