"""Uniform field access over world objects of any shape.

World state reaches the builder as domain objects, pydantic models, plain
dictionaries or nothing at all. All duck-typed access goes through the
helpers below so the normalizer can be written against one vocabulary:

- :func:`read_field` / :func:`first_present` / :func:`first_truthy` read
  attributes or mapping keys,
- :func:`has_capability` / :func:`call_capability` detect and invoke optional
  methods such as ``get_status()``,
- :func:`as_mapping` turns serializable objects into dictionaries.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from typing import Any, Final

from pydantic import BaseModel

from rpg_context.core.logging import get_logger


logger = get_logger(__name__)


class _Missing:
    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Final[Any] = _Missing()
"""Sentinel distinguishing an absent field from one explicitly set to None."""


def read_field(source: Any, name: str, default: Any = None) -> Any:
    """Read ``name`` from a mapping key or an object attribute.

    Args:
        source: Mapping, object or None.
        name: Key or attribute name.
        default: Returned when the field is absent.

    Returns:
        The field value, or ``default``.
    """
    if source is None:
        return default
    if isinstance(source, Mapping):
        return source.get(name, default)
    value = getattr(source, name, default)
    # Bound methods are capabilities, not fields
    if callable(value) and not isinstance(value, type) and hasattr(value, "__self__"):
        return default
    return value


def first_present(source: Any, *names: str) -> Any:
    """Return the first field among ``names`` that is not None."""
    for name in names:
        value = read_field(source, name)
        if value is not None:
            return value
    return None


def first_truthy(*values: Any) -> Any:
    """Return the first truthy value, or None."""
    for value in values:
        if value:
            return value
    return None


def coalesce(*values: Any) -> Any:
    """Return the first value that is not None, or None."""
    for value in values:
        if value is not None:
            return value
    return None


def has_capability(source: Any, method: str) -> bool:
    """Whether ``source`` exposes a callable named ``method``.

    Mappings never expose capabilities; their methods are container methods.
    """
    if source is None or isinstance(source, Mapping):
        return False
    return callable(getattr(source, method, None))


def call_capability(source: Any, method: str, *args: Any, **kwargs: Any) -> Any:
    """Invoke an optional capability, returning :data:`MISSING` when absent.

    Exceptions raised by the capability propagate; callers decide how to
    degrade.
    """
    if not has_capability(source, method):
        return MISSING
    return getattr(source, method)(*args, **kwargs)


def guarded(operation: str, default: Any, func: Any, *args: Any, **kwargs: Any) -> Any:
    """Call ``func`` and degrade to ``default`` on any failure.

    The failure is logged as a warning naming ``operation``.

    Args:
        operation: Name of the lookup, used in the log entry.
        default: Value returned when ``func`` raises.
        func: The lookup to run.
        *args: Positional arguments for ``func``.
        **kwargs: Keyword arguments for ``func``.

    Returns:
        The result of ``func`` or ``default``.
    """
    try:
        return func(*args, **kwargs)
    except Exception as exc:
        logger.warning(
            "Context lookup failed, using default",
            operation=operation,
            error=str(exc),
            error_type=type(exc).__name__,
        )
        return default


def as_mapping(value: Any) -> dict[str, Any] | None:
    """Best-effort conversion of a serializable object into a dictionary.

    Tries, in order: mappings, pydantic models, ``to_json()``/``to_dict()``
    capabilities, then instance ``__dict__``.
    """
    if value is None:
        return None
    if isinstance(value, Mapping):
        return dict(value)
    if isinstance(value, BaseModel):
        return value.model_dump()
    for method in ("to_json", "to_dict"):
        converted = call_capability(value, method)
        if isinstance(converted, Mapping):
            return dict(converted)
    if hasattr(value, "__dict__"):
        return {key: val for key, val in vars(value).items() if not key.startswith("_")}
    return None


def as_list(value: Any) -> list[Any] | None:
    """Return ``value`` as a list if it is a list/tuple, else None."""
    if isinstance(value, (list, tuple)):
        return list(value)
    return None


def iter_mapping_items(value: Any) -> Iterable[tuple[Any, Any]]:
    if isinstance(value, Mapping):
        return list(value.items())
    return []


def non_empty_str(value: Any) -> str | None:
    """Return the trimmed string, or None when not a non-empty string."""
    if not isinstance(value, str):
        return None
    trimmed = value.strip()
    return trimmed or None


def to_number(value: Any) -> int | float | None:
    """Parse a finite number from a number or numeric string.

    Booleans are not numbers here.
    """
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        return value if math.isfinite(value) else None
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            parsed = float(text)
        except ValueError:
            return None
        if not math.isfinite(parsed):
            return None
        return int(parsed) if parsed.is_integer() else parsed
    return None


__all__ = [
    "MISSING",
    "as_list",
    "as_mapping",
    "call_capability",
    "coalesce",
    "first_present",
    "first_truthy",
    "guarded",
    "has_capability",
    "iter_mapping_items",
    "non_empty_str",
    "read_field",
    "to_number",
]
