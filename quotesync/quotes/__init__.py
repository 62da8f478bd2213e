"""Quote records, the in-memory collection and its derived views."""

from .categories import category_index, resolve_filter
from .collection import QuoteCollection, serialize_quotes
from .models import ALL, DEFAULT_QUOTES, Quote
from .transfer import export_json, import_json

__all__ = [
    "ALL",
    "DEFAULT_QUOTES",
    "Quote",
    "QuoteCollection",
    "category_index",
    "export_json",
    "import_json",
    "resolve_filter",
    "serialize_quotes",
]
