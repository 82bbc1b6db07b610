"""Masking of sensitive-looking variable values for every display surface."""

from __future__ import annotations

from typing import Any, Mapping

MASK = "••••••••"
SENSITIVE_FRAGMENTS = ("pass", "key", "secret", "token")


def is_sensitive(name: str) -> bool:
    lowered = name.lower()
    return any(fragment in lowered for fragment in SENSITIVE_FRAGMENTS)


def mask_variables(variables: Mapping[str, Any] | None) -> dict[str, Any]:
    if not variables:
        return {}
    return {
        name: MASK if is_sensitive(name) and value is not None else value for name, value in variables.items()
    }


def format_variables(variables: Mapping[str, Any] | None) -> str:
    """Render ``name=value`` pairs for log lines, masked."""
    return ", ".join(f"{name}={value}" for name, value in mask_variables(variables).items())
