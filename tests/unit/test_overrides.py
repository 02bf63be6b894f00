"""Tests for core/overrides.py."""
from __future__ import annotations

import pytest

from openshift_build_sdk.core.overrides import get_override, prune_key


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("${COMMIT}", "COMMIT"),
        ("$COMMIT", "COMMIT"),
        ("COMMIT", "COMMIT"),
        ("  ${COMMIT}  ", "COMMIT"),
    ],
)
def test_prune_key(value: str, expected: str) -> None:
    assert prune_key(value) == expected


def test_override_replaces_braced_reference() -> None:
    assert get_override("${TAG}", {"TAG": "v2"}) == "v2"


def test_override_replaces_dollar_reference() -> None:
    assert get_override("$TAG", {"TAG": "v2"}) == "v2"


def test_override_replaces_bare_key() -> None:
    assert get_override("TAG", {"TAG": "v2"}) == "v2"


def test_missing_key_falls_back_to_field_value() -> None:
    assert get_override("${TAG}", {"OTHER": "x"}) == "${TAG}"


def test_empty_override_falls_back_to_field_value() -> None:
    assert get_override("latest", {"latest": ""}) == "latest"


def test_none_value_passes_through() -> None:
    assert get_override(None, {"TAG": "v2"}) is None


def test_no_overrides_returns_value() -> None:
    assert get_override("frontend", None) == "frontend"
    assert get_override("frontend", {}) == "frontend"
