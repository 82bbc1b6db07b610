"""Tests for runcake/domain/rendering/renderer.py"""

from __future__ import annotations

import shlex

import pytest

from runcake.domain.executions import ExecutionValidationError
from runcake.domain.rendering import (
    SCRIPT_MARKER,
    embed_script,
    escape_shell_value,
    extract_variables,
    is_valid_runner_wrapper,
    prepare_command,
    render_command,
    substitute_variables,
    validate_variable_names,
)
from runcake.domain.rendering.renderer import PLACEHOLDER_PATTERN, count_markers

WRAPPER = f"#!/bin/bash\nset -e\n{SCRIPT_MARKER}\n"


def test_quote_in_value_is_escaped_as_single_shell_word() -> None:
    text = prepare_command(WRAPPER, "echo {{name}}", {"name": "O'Brien"})

    assert "echo 'O'\"'\"'Brien'" in text


@pytest.mark.parametrize(
    "value",
    ["O'Brien", "''", "a'b'c", "$(rm -rf /)", "`id`; echo hi", "spaces  and\ttabs", "new\nline", ""],
)
def test_escaping_round_trips_through_shell_parsing(value: str) -> None:
    assert shlex.split(escape_shell_value(value)) == [value]


def test_placeholders_tolerate_whitespace_and_repeat() -> None:
    result = substitute_variables("{{ a }}-{{a}}-{{  b\t}}", {"a": 1, "b": "x"})

    assert result.ok
    assert result.text == "'1'-'1'-'x'"


def test_rendering_with_all_variables_leaves_no_placeholders() -> None:
    script = "deploy {{app}} --port {{ port }} --env {{env}} {{ app }}"
    text = prepare_command(WRAPPER, script, {"app": "api", "port": 8080, "env": "prod"})

    assert PLACEHOLDER_PATTERN.search(text) is None
    assert "deploy 'api' --port '8080' --env 'prod' 'api'" in text


def test_substituted_values_are_not_rescanned() -> None:
    result = substitute_variables("{{a}} {{b}}", {"a": "{{b}}", "b": "x"})

    assert result.text == "'{{b}}' 'x'"


def test_missing_variables_skip_substitution() -> None:
    result = substitute_variables("{{a}} {{b}} {{c}}", {"a": "1", "b": None})

    assert not result.ok
    assert result.missing == ["b", "c"]
    assert result.text == "{{a}} {{b}} {{c}}"


def test_bool_and_numbers_render_as_text() -> None:
    result = substitute_variables("{{flag}} {{n}} {{f}}", {"flag": False, "n": 3, "f": 1.5})

    assert result.text == "'false' '3' '1.5'"


def test_extract_variables_is_sorted_and_distinct() -> None:
    assert extract_variables("{{ b }} {{a}} {{b}} {{ 9bad }}") == ["a", "b"]
    assert extract_variables(None) == []


def test_embed_script_without_runner_runs_script_as_is() -> None:
    assert embed_script(None, "uptime") == "uptime"
    assert embed_script(WRAPPER, "uptime") == "#!/bin/bash\nset -e\nuptime\n"


def test_runner_placeholders_are_rendered_too() -> None:
    result = render_command("cd {{ workdir }}\n" + SCRIPT_MARKER, "ls", {"workdir": "/srv"})

    assert result.text == "cd '/srv'\nls"


def test_invalid_names_are_reported_not_dropped() -> None:
    assert validate_variable_names({"ok": 1, "9lives": 2, "has-dash": 3}) == ["9lives", "has-dash"]

    with pytest.raises(ExecutionValidationError) as excinfo:
        prepare_command(WRAPPER, "echo {{ok}}", {"ok": 1, "9lives": 2, "has-dash": 3})

    assert excinfo.value.invalid_names == ["9lives", "has-dash"]


def test_missing_variables_raise_validation_error() -> None:
    with pytest.raises(ExecutionValidationError) as excinfo:
        prepare_command(WRAPPER, "echo {{name}} {{port}}", {"name": "x"})

    assert excinfo.value.missing == ["port"]
    assert "port" in str(excinfo.value)


def test_variable_named_like_marker_is_rejected() -> None:
    with pytest.raises(ExecutionValidationError) as excinfo:
        prepare_command(WRAPPER, "echo hi", {"SCRIPT_CONTENT": "rm -rf /"})

    assert excinfo.value.reserved == ["SCRIPT_CONTENT"]


def test_script_body_using_marker_is_rejected() -> None:
    with pytest.raises(ExecutionValidationError):
        prepare_command(WRAPPER, "echo {{ SCRIPT_CONTENT }}", {})


def test_padded_marker_counts_as_marker() -> None:
    assert count_markers("{{ SCRIPT_CONTENT }}") == 1
    assert count_markers("{{SCRIPT_CONTENT}}\n{{  SCRIPT_CONTENT }}") == 2
    assert not is_valid_runner_wrapper("{{SCRIPT_CONTENT}}\n{{ SCRIPT_CONTENT }}")
    assert embed_script("set -e\n{{ SCRIPT_CONTENT }}\n", "echo \\1") == "set -e\necho \\1\n"
