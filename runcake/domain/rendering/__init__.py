"""Command rendering and variable masking."""

from .masking import MASK, format_variables, is_sensitive, mask_variables
from .renderer import (
    SCRIPT_MARKER,
    SCRIPT_MARKER_NAME,
    RenderResult,
    embed_script,
    escape_shell_value,
    extract_variables,
    is_valid_runner_wrapper,
    prepare_command,
    render_command,
    substitute_variables,
    validate_variable_names,
)
from .variables import VariableInfo, describe_variables

__all__ = [
    "MASK",
    "SCRIPT_MARKER",
    "SCRIPT_MARKER_NAME",
    "RenderResult",
    "VariableInfo",
    "describe_variables",
    "embed_script",
    "escape_shell_value",
    "extract_variables",
    "format_variables",
    "is_sensitive",
    "is_valid_runner_wrapper",
    "mask_variables",
    "prepare_command",
    "render_command",
    "substitute_variables",
    "validate_variable_names",
]
