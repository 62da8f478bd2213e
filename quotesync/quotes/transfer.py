"""JSON import and export of the quote collection."""

import json
import logging

from ..exceptions import FormatError
from .collection import QuoteCollection

logger = logging.getLogger(__name__)


def export_json(collection: QuoteCollection) -> str:
    """Serialize the collection as a pretty-printed JSON array."""
    return json.dumps(
        [q.to_dict() for q in collection.quotes],
        indent=2,
        ensure_ascii=False,
    )


def import_json(collection: QuoteCollection, document: str, strict: bool = True) -> int:
    """Parse a JSON document and merge its quotes into the collection.

    Args:
        collection: Collection to merge into.
        document: JSON text whose top-level value must be an array.
        strict: Passed through to QuoteCollection.merge_in.

    Returns:
        Number of quotes merged.

    Raises:
        FormatError: If the document is not valid JSON or not an array.
        ValidationError: If strict and an element is not a quote record.
    """
    try:
        data = json.loads(document)
    except json.JSONDecodeError as e:
        raise FormatError(f"Import file is not valid JSON: {e}") from e

    if not isinstance(data, list):
        raise FormatError(
            f"Import file must contain a JSON array, got {type(data).__name__}"
        )

    count = collection.merge_in(data, strict=strict)
    logger.info(f"Imported {count} quotes")
    return count
