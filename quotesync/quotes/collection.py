"""In-memory quote collection, the single mutable source of truth."""

import json
import logging
from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING, Any

from ..exceptions import ValidationError
from .models import ALL, Quote

if TYPE_CHECKING:
    from ..storage import DurableStore

logger = logging.getLogger(__name__)


def serialize_quotes(quotes: Iterable[Quote]) -> str:
    """Order-sensitive serialized form used for structural comparison."""
    return json.dumps([q.to_dict() for q in quotes], ensure_ascii=False)


class QuoteCollection:
    """Ordered list of quotes, persisted after every mutation.

    Duplicates are allowed. Insertion order only matters for display and
    export determinism.
    """

    def __init__(
        self,
        quotes: Iterable[Quote] = (),
        store: "DurableStore | None" = None,
    ):
        """Initialize the collection.

        Args:
            quotes: Initial quotes, already validated.
            store: Optional durable store written after each mutation.
        """
        self._quotes: list[Quote] = list(quotes)
        self._store = store

    def __len__(self) -> int:
        return len(self._quotes)

    def __iter__(self):
        return iter(list(self._quotes))

    def __eq__(self, other: object) -> bool:
        if isinstance(other, QuoteCollection):
            return self._quotes == other._quotes
        return NotImplemented

    def __repr__(self) -> str:
        return f"QuoteCollection({self._quotes!r})"

    @property
    def quotes(self) -> list[Quote]:
        """Snapshot copy of the current quotes."""
        return list(self._quotes)

    def serialize(self) -> str:
        return serialize_quotes(self._quotes)

    def _persist(self) -> None:
        if self._store is not None:
            self._store.save_quotes(list(self._quotes))

    def add(self, quote: Quote | dict[str, Any]) -> Quote:
        """Append a quote after trimming and validating it.

        Args:
            quote: Quote or {text, category} mapping.

        Returns:
            The quote as stored.

        Raises:
            ValidationError: If text or category is empty after trimming.
        """
        if isinstance(quote, Quote):
            quote = Quote.create(quote.text, quote.category)
        else:
            quote = Quote.from_dict(quote)

        self._quotes.append(quote)
        logger.debug(f"Added quote in category {quote.category!r}")
        self._persist()
        return quote

    def filter_by_category(self, category_filter: str = ALL) -> list[Quote]:
        """Return quotes in a category, or all quotes for ALL."""
        if category_filter == ALL:
            return list(self._quotes)
        return [q for q in self._quotes if q.category == category_filter]

    def replace_all(self, new_quotes: Iterable[Quote]) -> None:
        """Swap the entire collection in one step."""
        replacement = list(new_quotes)
        self._quotes = replacement
        logger.info(f"Replaced collection with {len(replacement)} quotes")
        self._persist()

    def merge_in(self, imported: Any, strict: bool = True) -> int:
        """Append imported quotes without de-duplication.

        Args:
            imported: Sequence of Quote objects or {text, category} mappings.
            strict: Reject the whole merge if any element is malformed.
                When False, malformed elements are skipped with a warning.

        Returns:
            Number of quotes appended.

        Raises:
            ValidationError: If imported is not a sequence, or (strict) if any
                element is not a well-formed quote record.
        """
        if isinstance(imported, (str, bytes, dict)) or not isinstance(imported, Sequence):
            raise ValidationError("Imported quotes must be a list of quote records")

        accepted: list[Quote] = []
        for index, item in enumerate(imported):
            try:
                accepted.append(Quote.from_dict(item))
            except ValidationError as e:
                if strict:
                    raise ValidationError(f"Invalid quote at index {index}: {e}") from e
                logger.warning(f"Skipping malformed quote at index {index}: {e}")

        if accepted:
            self._quotes.extend(accepted)
            self._persist()

        logger.info(f"Merged {len(accepted)} imported quotes")
        return len(accepted)
