"""Application state shared by the sync engine and the view layer."""

import logging
import random
from typing import Any

from .config import Config
from .quotes import (
    DEFAULT_QUOTES,
    Quote,
    QuoteCollection,
    category_index,
    export_json,
    import_json,
    resolve_filter,
)
from .storage import DurableStore, EphemeralCache
from .sync import RemoteSource, SyncEngine, resolver_for_policy
from .sync.notifications import Notifier, log_notifier
from .sync.resolution import Resolver

logger = logging.getLogger(__name__)

NO_QUOTES_MESSAGE = "No quotes found for this category."


class QuoteApp:
    """Owns the quote collection, its storage and the sync engine."""

    def __init__(
        self,
        config: Config,
        store: DurableStore | None = None,
        remote: RemoteSource | None = None,
        resolver: Resolver | None = None,
        notifier: Notifier = log_notifier,
        rng: random.Random | None = None,
    ):
        self.config = config
        self._rng = rng or random.Random()

        self.store = store or DurableStore(config.storage.db_path)
        self.cache = EphemeralCache()

        stored = self.store.load_quotes()
        if stored is None:
            logger.info("No stored quotes, seeding defaults")
            stored = list(DEFAULT_QUOTES)
        self.collection = QuoteCollection(stored, store=self.store)

        self.remote = remote or RemoteSource(
            url=config.remote.url,
            timeout=config.remote.timeout,
            max_retries=config.remote.max_retries,
            text_field=config.remote.text_field,
            sentinel_category=config.remote.sentinel_category,
            fetch_limit=config.remote.fetch_limit,
            user_id=config.remote.user_id,
        )
        self.engine = SyncEngine(
            collection=self.collection,
            remote=self.remote,
            resolver=resolver or resolver_for_policy(config.sync.resolution),
            notifier=notifier,
            notification_duration=config.notifications.duration_seconds,
        )

    def close(self) -> None:
        self.store.close()

    @property
    def categories(self) -> list[str]:
        return category_index(self.collection)

    @property
    def selected_category(self) -> str:
        """Remembered filter, or ALL if it no longer matches any quote."""
        return resolve_filter(self.store.load_selected_category(), self.collection)

    def select_category(self, category_filter: str) -> str:
        """Remember a filter for later sessions."""
        resolved = resolve_filter(category_filter, self.collection)
        self.store.save_selected_category(resolved)
        return resolved

    def add_quote(self, text: str, category: str) -> Quote:
        return self.collection.add({"text": text, "category": category})

    def quotes_for(self, category_filter: str | None = None) -> list[Quote]:
        if category_filter is None:
            category_filter = self.selected_category
        return self.collection.filter_by_category(category_filter)

    def show_random_quote(self, category_filter: str | None = None) -> Quote | None:
        """Pick a random quote and remember it as last viewed.

        Returns:
            The chosen quote, or None if the filter matches nothing.
        """
        candidates = self.quotes_for(category_filter)
        if not candidates:
            return None

        quote = self._rng.choice(candidates)
        self.cache.remember_last_viewed(quote.text)
        return quote

    def last_viewed(self) -> str | None:
        return self.cache.last_viewed()

    def export_json(self) -> str:
        return export_json(self.collection)

    def import_json(self, document: str, strict: bool | None = None) -> int:
        if strict is None:
            strict = self.config.transfer.strict_import
        return import_json(self.collection, document, strict=strict)

    async def post_quote(self, quote: Quote) -> dict[str, Any] | None:
        return await self.remote.post_quote(quote)

    def get_status(self) -> dict[str, Any]:
        return {
            "quotes": len(self.collection),
            "categories": self.categories,
            "selected_category": self.selected_category,
            "sync": self.engine.get_sync_status(),
        }
