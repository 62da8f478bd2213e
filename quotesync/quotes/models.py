"""Quote record and category filter values."""

from dataclasses import dataclass
from typing import Any

from ..exceptions import ValidationError

# Filter value meaning "every category"
ALL = "all"


@dataclass(frozen=True)
class Quote:
    """A single quote. Two quotes with equal fields are the same quote."""

    text: str
    category: str

    def to_dict(self) -> dict[str, str]:
        """Convert to dictionary for serialization."""
        return {"text": self.text, "category": self.category}

    @classmethod
    def create(cls, text: Any, category: Any) -> "Quote":
        """Create a quote from raw input, trimming whitespace.

        Raises:
            ValidationError: If text or category is empty after trimming.
        """
        if not isinstance(text, str) or not isinstance(category, str):
            raise ValidationError("Quote text and category must be strings")

        text = text.strip()
        category = category.strip()
        if not text or not category:
            raise ValidationError("Please enter both quote text and category.")

        return cls(text=text, category=category)

    @classmethod
    def from_dict(cls, data: Any) -> "Quote":
        """Create from a {text, category} mapping.

        Raises:
            ValidationError: If data is not a well-formed quote record.
        """
        if isinstance(data, Quote):
            return data
        if not isinstance(data, dict):
            raise ValidationError(f"Expected a quote record, got {type(data).__name__}")
        return cls.create(data.get("text"), data.get("category"))


DEFAULT_QUOTES: tuple[Quote, ...] = (
    Quote(
        "The best way to get started is to quit talking and begin doing.",
        "Motivation",
    ),
    Quote("Life is what happens when you're busy making other plans.", "Life"),
    Quote("Get busy living or get busy dying.", "Life"),
    Quote(
        "Success is not final, failure is not fatal: "
        "It is the courage to continue that counts.",
        "Motivation",
    ),
)
