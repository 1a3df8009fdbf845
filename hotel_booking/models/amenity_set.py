"""Room amenities as a first-class set of tags.

Tags are normalized (stripped, lower-cased, blanks dropped). The stored form is a JSON array
of unique tags sorted ascending, e.g. ``'["tv","wifi"]'``; NULL and ``'[]'`` both mean the
empty set.
"""
import json
from typing import Iterable

from sqlalchemy import Text
from sqlalchemy.types import TypeDecorator


class AmenitySet(frozenset):

    def __new__(cls, tags: Iterable[str] = ()):
        return super().__new__(cls, (t.strip().lower() for t in tags if t and t.strip()))

    @classmethod
    def parse(cls, value) -> "AmenitySet":
        """Accept an AmenitySet, a list of tags, a JSON array string or a comma list."""
        if value is None:
            return cls()
        if isinstance(value, AmenitySet):
            return value
        if isinstance(value, str):
            text = value.strip()
            if not text:
                return cls()
            if text.startswith("["):
                try:
                    decoded = json.loads(text)
                except json.JSONDecodeError:
                    raise ValueError("amenities must be a JSON array of strings")
                if not isinstance(decoded, list):
                    raise ValueError("amenities must be a JSON array of strings")
                return cls.parse(decoded)
            return cls(text.split(","))
        if isinstance(value, (list, tuple, set, frozenset)):
            tags: list[str] = []
            for item in value:
                if not isinstance(item, str):
                    raise ValueError("amenities must be strings")
                # repeated query values may each carry a JSON or comma list
                tags.extend(cls.parse(item))
            return cls(tags)
        raise ValueError("amenities must be a list of strings")

    def to_list(self) -> list[str]:
        return sorted(self)

    def to_json(self) -> str:
        return json.dumps(self.to_list(), separators=(",", ":"))

    def __repr__(self) -> str:
        return f"AmenitySet({self.to_list()!r})"


class AmenitySetType(TypeDecorator):
    """Persists an AmenitySet as its canonical JSON text."""

    impl = Text
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return AmenitySet.parse(value).to_json()

    def process_result_value(self, value, dialect):
        return AmenitySet.parse(value)
