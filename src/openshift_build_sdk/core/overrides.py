"""Per-invocation override resolution for step fields.

A step is configured once but may run many times with different pipeline
parameters. Any field may hold a parameter reference such as ``${COMMIT}``
or ``$COMMIT``; at call time the reference is looked up in the run's
override mapping.
"""

from __future__ import annotations

from collections.abc import Mapping


def prune_key(value: str) -> str:
    """Strip ``${...}`` / ``$`` decoration from a parameter reference."""
    key = value.strip()
    if key.startswith("${") and key.endswith("}"):
        return key[2:-1]
    if key.startswith("$"):
        return key[1:]
    return key


def get_override(value: str | None, overrides: Mapping[str, str] | None) -> str | None:
    """Resolve *value* against *overrides*.

    Returns the override when the pruned key is present with a non-empty
    value, otherwise *value* unchanged.

    Example::

        get_override("${TAG}", {"TAG": "v2"})   # "v2"
        get_override("latest", {"TAG": "v2"})   # "latest"
        get_override("$TAG", {})                # "$TAG"
    """
    if value is None or not overrides:
        return value
    override = overrides.get(prune_key(value))
    if override:
        return override
    return value
