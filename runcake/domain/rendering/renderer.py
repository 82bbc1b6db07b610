"""Two-pass command rendering: runner marker embedding, then variable interpolation.

Placeholders use the ``{{ name }}`` grammar where ``name`` matches
``[A-Za-z_][A-Za-z0-9_]*`` and whitespace inside the braces is ignored.
Every substituted value is emitted as a single-quoted shell word.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from runcake.domain.executions.exceptions import ExecutionValidationError

SCRIPT_MARKER_NAME = "SCRIPT_CONTENT"
SCRIPT_MARKER = "{{" + SCRIPT_MARKER_NAME + "}}"

VARIABLE_NAME_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
PLACEHOLDER_PATTERN = re.compile(r"\{\{\s*([A-Za-z_][A-Za-z0-9_]*)\s*\}\}")
MARKER_PATTERN = re.compile(r"\{\{\s*" + SCRIPT_MARKER_NAME + r"\s*\}\}")


@dataclass(slots=True)
class RenderResult:
    text: str
    missing: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.missing


def extract_variables(content: Optional[str]) -> list[str]:
    """Return the distinct placeholder names found in ``content``, sorted."""
    if not content:
        return []
    return sorted({match.group(1) for match in PLACEHOLDER_PATTERN.finditer(content)})


def validate_variable_names(variables: Mapping[str, Any]) -> list[str]:
    return [name for name in variables if not VARIABLE_NAME_PATTERN.match(str(name))]


def reserved_variable_names(variables: Mapping[str, Any]) -> list[str]:
    return [name for name in variables if name == SCRIPT_MARKER_NAME]


def count_markers(wrapper: str) -> int:
    """Count marker placeholders, including whitespace-padded spellings."""
    return sum(1 for match in PLACEHOLDER_PATTERN.finditer(wrapper) if match.group(1) == SCRIPT_MARKER_NAME)


def is_valid_runner_wrapper(wrapper: Optional[str]) -> bool:
    return bool(wrapper) and count_markers(wrapper) == 1


def embed_script(wrapper: Optional[str], script: str) -> str:
    """Replace the runner marker with the raw script body.

    A missing runner means the script runs as-is. Marker validity is a
    definition-time property of the runner and is not re-checked here.
    """
    if wrapper is None:
        return script
    return MARKER_PATTERN.sub(lambda _: script, wrapper, count=1)


def to_text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def escape_shell_value(value: Any) -> str:
    """Quote ``value`` as one shell word.

    Embedded single quotes close the quote, emit a double-quoted literal
    quote, then reopen: ``O'Brien`` becomes ``'O'"'"'Brien'``.
    """
    return "'" + to_text(value).replace("'", "'\"'\"'") + "'"


def substitute_variables(content: str, variables: Mapping[str, Any]) -> RenderResult:
    required = extract_variables(content)
    missing = [name for name in required if variables.get(name) is None]
    if missing:
        return RenderResult(text=content, missing=missing)

    escaped = {name: escape_shell_value(variables[name]) for name in required}
    # single pass so substituted values are never rescanned for placeholders
    text = PLACEHOLDER_PATTERN.sub(lambda match: escaped[match.group(1)], content)
    return RenderResult(text=text)


def render_command(wrapper: Optional[str], script: str, variables: Mapping[str, Any]) -> RenderResult:
    return substitute_variables(embed_script(wrapper, script), variables)


def prepare_command(wrapper: Optional[str], script: str, variables: Mapping[str, Any]) -> str:
    """Validate ``variables`` and render the final command text.

    Raises :class:`ExecutionValidationError` for malformed names, names that
    collide with the runner marker, a script body that itself contains the
    marker, or required variables that were not supplied.
    """
    invalid = validate_variable_names(variables)
    if invalid:
        raise ExecutionValidationError(
            f"Invalid variable names: {', '.join(map(str, invalid))}. Variable names must start "
            "with a letter or underscore and contain only letters, numbers, and underscores.",
            invalid_names=invalid,
        )
    reserved = reserved_variable_names(variables)
    if reserved or SCRIPT_MARKER_NAME in extract_variables(script):
        raise ExecutionValidationError(
            f"{SCRIPT_MARKER_NAME} is reserved for the runner and cannot be used as a script variable",
            reserved=[SCRIPT_MARKER_NAME],
        )

    result = render_command(wrapper, script, variables)
    if not result.ok:
        raise ExecutionValidationError(
            f"Missing required template variables: {', '.join(result.missing)}",
            missing=result.missing,
        )
    return result.text
