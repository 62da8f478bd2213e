"""Category index derived from the quote collection."""

from collections.abc import Iterable

from .models import ALL, Quote


def category_index(quotes: Iterable[Quote]) -> list[str]:
    """Distinct categories in first-seen order.

    Recomputed on every call; collections are small.
    """
    return list(dict.fromkeys(q.category for q in quotes))


def resolve_filter(selected: str | None, quotes: Iterable[Quote]) -> str:
    """Resolve a remembered filter, falling back to ALL if it no longer exists."""
    if not selected or selected == ALL:
        return ALL
    if selected in category_index(quotes):
        return selected
    return ALL
