"""Auxiliary utilities."""

from __future__ import annotations

from rpg_context.utils.sanitized_set import SanitizedStringSet, sanitize


__all__ = [
    "SanitizedStringSet",
    "sanitize",
]
