"""Tests for quote records, the collection and the category index."""

import pytest
from unittest.mock import MagicMock

from quotesync.exceptions import ValidationError
from quotesync.quotes import (
    ALL,
    DEFAULT_QUOTES,
    Quote,
    QuoteCollection,
    category_index,
    resolve_filter,
)


@pytest.fixture
def collection():
    """Collection seeded with the default quotes."""
    return QuoteCollection(DEFAULT_QUOTES)


class TestQuote:
    """Tests for the Quote record."""

    def test_create_trims_whitespace(self):
        quote = Quote.create("  Stay hungry.  ", " Life ")

        assert quote == Quote("Stay hungry.", "Life")

    @pytest.mark.parametrize(
        "text,category",
        [("", "Life"), ("Text", ""), ("   ", "Life"), ("Text", "\t\n"), (None, "Life")],
    )
    def test_create_rejects_empty_fields(self, text, category):
        with pytest.raises(ValidationError):
            Quote.create(text, category)

    def test_from_dict(self):
        quote = Quote.from_dict({"text": "Foo", "category": "Bar"})

        assert quote.text == "Foo"
        assert quote.category == "Bar"

    def test_from_dict_rejects_non_mapping(self):
        with pytest.raises(ValidationError):
            Quote.from_dict(["Foo", "Bar"])

    def test_structural_identity(self):
        assert Quote("a", "b") == Quote("a", "b")
        assert Quote("a", "b").to_dict() == {"text": "a", "category": "b"}


class TestQuoteCollectionAdd:
    """Tests for adding quotes."""

    def test_add_appends(self, collection):
        before = len(collection)

        added = collection.add(Quote("New quote", "Wisdom"))

        assert len(collection) == before + 1
        assert collection.quotes[-1] == added

    def test_add_accepts_mapping(self, collection):
        added = collection.add({"text": " Foo ", "category": " Bar "})

        assert added == Quote("Foo", "Bar")

    @pytest.mark.parametrize("text,category", [("", "Life"), ("Foo", "  ")])
    def test_add_invalid_leaves_collection_unchanged(self, collection, text, category):
        before = collection.quotes

        with pytest.raises(ValidationError):
            collection.add({"text": text, "category": category})

        assert collection.quotes == before

    def test_add_then_filter_includes_quote_once_more(self, collection):
        before = collection.filter_by_category("Life").count(Quote("Carpe diem", "Life"))

        collection.add(Quote("Carpe diem", "Life"))

        after = collection.filter_by_category("Life").count(Quote("Carpe diem", "Life"))
        assert after == before + 1

    def test_add_persists(self):
        store = MagicMock()
        collection = QuoteCollection(store=store)

        collection.add(Quote("Foo", "Bar"))

        store.save_quotes.assert_called_once_with([Quote("Foo", "Bar")])

    def test_invalid_add_does_not_persist(self):
        store = MagicMock()
        collection = QuoteCollection(store=store)

        with pytest.raises(ValidationError):
            collection.add(Quote("", "Bar"))

        store.save_quotes.assert_not_called()


class TestQuoteCollectionFilter:
    """Tests for filtering by category."""

    def test_filter_all(self, collection):
        assert collection.filter_by_category(ALL) == list(DEFAULT_QUOTES)

    def test_filter_category(self, collection):
        result = collection.filter_by_category("Life")

        assert len(result) == 2
        assert all(q.category == "Life" for q in result)

    def test_filter_unknown_category(self, collection):
        assert collection.filter_by_category("Unknown") == []

    def test_filter_does_not_mutate(self, collection):
        result = collection.filter_by_category(ALL)
        result.clear()

        assert len(collection) == len(DEFAULT_QUOTES)


class TestQuoteCollectionReplaceAndMerge:
    """Tests for whole-collection replacement and imports."""

    def test_replace_all(self, collection):
        store = MagicMock()
        collection = QuoteCollection(DEFAULT_QUOTES, store=store)

        collection.replace_all([Quote("Foo", "ServerSync")])

        assert collection.quotes == [Quote("Foo", "ServerSync")]
        store.save_quotes.assert_called_once()

    def test_replace_all_with_empty(self, collection):
        collection.replace_all([])

        assert len(collection) == 0

    def test_merge_in_keeps_duplicates(self, collection):
        existing = collection.quotes[0]

        added = collection.merge_in([existing.to_dict(), existing])

        assert added == 2
        assert collection.quotes.count(existing) == 3

    def test_merge_in_rejects_non_sequence(self, collection):
        before = collection.quotes

        with pytest.raises(ValidationError):
            collection.merge_in({"text": "Foo", "category": "Bar"})

        assert collection.quotes == before

    def test_merge_in_strict_rejects_whole_batch(self, collection):
        before = collection.quotes

        with pytest.raises(ValidationError):
            collection.merge_in([{"text": "Ok", "category": "Fine"}, {"text": "No category"}])

        assert collection.quotes == before

    def test_merge_in_lax_skips_malformed(self, collection):
        before = len(collection)

        added = collection.merge_in(
            [{"text": "Ok", "category": "Fine"}, {"text": "No category"}, 42],
            strict=False,
        )

        assert added == 1
        assert len(collection) == before + 1
        assert collection.quotes[-1] == Quote("Ok", "Fine")

    def test_serialize_is_order_sensitive(self):
        a = QuoteCollection([Quote("1", "x"), Quote("2", "x")])
        b = QuoteCollection([Quote("2", "x"), Quote("1", "x")])

        assert a.serialize() != b.serialize()


class TestCategoryIndex:
    """Tests for the derived category list."""

    def test_first_seen_order(self):
        quotes = [Quote("a", "Life"), Quote("b", "Motivation"), Quote("c", "Life")]

        assert category_index(quotes) == ["Life", "Motivation"]

    def test_recomputed_after_mutation(self, collection):
        assert "Wisdom" not in category_index(collection)

        collection.add(Quote("Know thyself", "Wisdom"))

        assert category_index(collection)[-1] == "Wisdom"

    def test_empty(self):
        assert category_index([]) == []

    def test_resolve_filter_known(self, collection):
        assert resolve_filter("Life", collection) == "Life"

    def test_resolve_filter_falls_back_to_all(self, collection):
        assert resolve_filter("Removed", collection) == ALL
        assert resolve_filter(None, collection) == ALL
        assert resolve_filter(ALL, collection) == ALL
