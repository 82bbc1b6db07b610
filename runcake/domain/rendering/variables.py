"""Descriptions of the variables a script expects, derived from their names."""

from __future__ import annotations

from dataclasses import dataclass

from .masking import MASK, is_sensitive
from .renderer import SCRIPT_MARKER_NAME, extract_variables

# (name fragments, example, description); first match wins
_HINTS: tuple[tuple[tuple[str, ...], str, str], ...] = (
    (("port",), "8080", "Port number for the service"),
    (("host", "server"), "localhost", "Hostname or server address"),
    (("user",), "admin", "Username for authentication"),
    (("pass",), MASK, "Password for authentication"),
    (("path", "dir"), "/var/app", "File or directory path"),
    (("env",), "production", "Environment name"),
    (("db", "database"), "myapp_production", "Database name"),
    (("email",), "admin@example.com", "Email address"),
    (("url",), "https://example.com", "URL endpoint"),
    (("version",), "1.0.0", "Version number"),
    (("count", "num"), "5", "Numeric value"),
)


@dataclass(slots=True)
class VariableInfo:
    name: str
    required: bool
    type: str
    example: str
    description: str
    sensitive: bool


def _hint(name: str) -> tuple[str, str]:
    lowered = name.lower()
    for fragments, example, description in _HINTS:
        if any(fragment in lowered for fragment in fragments):
            return example, description
    return "example_value", f"Value for {name}"


def describe_variables(content: str | None) -> list[VariableInfo]:
    infos: list[VariableInfo] = []
    for name in extract_variables(content):
        if name == SCRIPT_MARKER_NAME:
            continue
        example, description = _hint(name)
        sensitive = is_sensitive(name)
        infos.append(
            VariableInfo(
                name=name,
                required=True,
                type="string",
                example=MASK if sensitive else example,
                description=description,
                sensitive=sensitive,
            )
        )
    return infos
