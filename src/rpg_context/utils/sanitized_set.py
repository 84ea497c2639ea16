"""Case- and punctuation-insensitive string set.

Used for tag-like collections where "Fire-Resistant" and "fire resistant"
must be the same entry. Word characters are ASCII only, so accented
letters are treated like punctuation.

Example:
    >>> tags = SanitizedStringSet(["Hello, World!"])
    >>> tags.has("hello world")
    True
    >>> tags.add(123)
    >>> len(tags)
    1
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator, MutableSet
from typing import Any


_NON_WORD = re.compile(r"[^\w\s]|_", re.ASCII)
_WHITESPACE = re.compile(r"\s+", re.ASCII)


def sanitize(value: str) -> str:
    """Replace all but ASCII letters and digits with spaces, collapse, trim and lowercase.

    Example:
        >>> sanitize("Café-Noir")
        'caf noir'
    """
    return _WHITESPACE.sub(" ", _NON_WORD.sub(" ", value)).strip().lower()


class SanitizedStringSet(MutableSet[str]):
    """A set of strings stored in sanitized form.

    Non-string values are never stored: :meth:`add` ignores them and
    :meth:`has` / :meth:`delete` report False.
    """

    def __init__(self, values: Iterable[Any] | None = None) -> None:
        self._values: set[str] = set()
        for value in values or ():
            self.add(value)

    def __contains__(self, value: object) -> bool:
        return self.has(value)

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({sorted(self._values)!r})"

    def add(self, value: Any) -> None:
        if isinstance(value, str):
            self._values.add(sanitize(value))

    def discard(self, value: Any) -> None:
        self.delete(value)

    def has(self, value: Any) -> bool:
        return isinstance(value, str) and sanitize(value) in self._values

    def delete(self, value: Any) -> bool:
        """Remove ``value`` if present.

        Returns:
            True when an entry was removed.
        """
        if not isinstance(value, str):
            return False
        key = sanitize(value)
        if key not in self._values:
            return False
        self._values.remove(key)
        return True


__all__ = [
    "SanitizedStringSet",
    "sanitize",
]
