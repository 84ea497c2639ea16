"""Tests for duck-typed field access helpers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import pytest
from pydantic import BaseModel

from rpg_context.context.adapters import (
    MISSING,
    as_list,
    as_mapping,
    call_capability,
    coalesce,
    first_present,
    first_truthy,
    guarded,
    has_capability,
    non_empty_str,
    read_field,
    to_number,
)


@dataclass
class Lantern:
    name: str = "Lantern"
    lit: bool | None = None

    def get_status(self) -> dict[str, Any]:
        return {"lit": self.lit}


class Coin(BaseModel):
    face: str = "heads"


class TestReadField:
    """Tests for reading attributes and mapping keys."""

    def test_mapping_and_object(self) -> None:
        assert read_field({"name": "Map"}, "name") == "Map"
        assert read_field(Lantern(), "name") == "Lantern"

    def test_missing_and_none_source(self) -> None:
        assert read_field(Lantern(), "weight", "light") == "light"
        assert read_field(None, "name", "x") == "x"

    def test_bound_methods_are_not_fields(self) -> None:
        assert read_field(Lantern(), "get_status") is None

    def test_first_present_skips_none(self) -> None:
        assert first_present({"a": None, "b": 0}, "a", "b") == 0
        assert first_present({}, "a") is None


class TestCapabilities:
    """Tests for optional-method detection and invocation."""

    def test_object_capability(self) -> None:
        lantern = Lantern(lit=True)
        assert has_capability(lantern, "get_status")
        assert call_capability(lantern, "get_status") == {"lit": True}

    def test_mapping_never_has_capabilities(self) -> None:
        assert not has_capability({"get_status": lambda: {}}, "get_status")
        assert not has_capability({}, "items")

    def test_absent_capability_is_missing(self) -> None:
        assert call_capability(Lantern(), "get_skills") is MISSING
        assert not MISSING

    def test_capability_errors_propagate(self) -> None:
        class Broken:
            def get_status(self) -> None:
                raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            call_capability(Broken(), "get_status")


class TestGuarded:
    def test_returns_result(self) -> None:
        assert guarded("add", 0, lambda a, b: a + b, 2, b=3) == 5

    def test_failure_yields_default(self) -> None:
        def fail() -> None:
            raise KeyError("nope")

        assert guarded("lookup", "fallback", fail) == "fallback"


class TestConversions:
    """Tests for mapping, list and number conversions."""

    def test_as_mapping(self) -> None:
        class Plain:
            def __init__(self) -> None:
                self.visible = 1
                self._hidden = 2

        class Serializable:
            def to_dict(self) -> dict[str, int]:
                return {"level": 3}

        assert as_mapping({"a": 1}) == {"a": 1}
        assert as_mapping(Coin()) == {"face": "heads"}
        assert as_mapping(Serializable()) == {"level": 3}
        assert as_mapping(Plain()) == {"visible": 1}
        assert as_mapping(None) is None
        assert as_mapping(5) is None

    def test_as_list(self) -> None:
        assert as_list((1, 2)) == [1, 2]
        assert as_list("ab") is None

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (3, 3),
            (2.5, 2.5),
            (" 4 ", 4),
            ("1.25", 1.25),
            ("nan", None),
            (float("inf"), None),
            ("", None),
            ("ten", None),
            (True, None),
            (None, None),
        ],
    )
    def test_to_number(self, value: Any, expected: Any) -> None:
        assert to_number(value) == expected

    def test_text_helpers(self) -> None:
        assert non_empty_str("  hi ") == "hi"
        assert non_empty_str("   ") is None
        assert non_empty_str(7) is None
        assert first_truthy(None, "", "x") == "x"
        assert coalesce(None, 0, 1) == 0
