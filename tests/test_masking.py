"""Tests for runcake/domain/rendering/masking.py and variables.py"""

from __future__ import annotations

import pytest

from runcake.domain.rendering import MASK, describe_variables, format_variables, is_sensitive, mask_variables


@pytest.mark.parametrize(
    "name",
    ["password", "DB_PASS", "api_key", "KeyName", "client_secret", "GITHUB_TOKEN", "passphrase"],
)
def test_sensitive_names(name: str) -> None:
    assert is_sensitive(name)


@pytest.mark.parametrize("name", ["user", "host", "port", "environment", "region"])
def test_plain_names(name: str) -> None:
    assert not is_sensitive(name)


def test_mask_variables_keeps_plain_values() -> None:
    masked = mask_variables({"user": "deploy", "db_password": "hunter2", "port": 5432})

    assert masked == {"user": "deploy", "db_password": MASK, "port": 5432}


def test_mask_variables_accepts_none() -> None:
    assert mask_variables(None) == {}


def test_format_variables_never_contains_secret() -> None:
    line = format_variables({"user": "deploy", "API_TOKEN": "abc123"})

    assert line == f"user=deploy, API_TOKEN={MASK}"
    assert "abc123" not in line


def test_describe_variables_hints() -> None:
    infos = {info.name: info for info in describe_variables("{{db_password}} {{ app_port }} {{SCRIPT_CONTENT}} {{x}}")}

    assert sorted(infos) == ["app_port", "db_password", "x"]
    assert infos["app_port"].example == "8080"
    assert infos["db_password"].sensitive
    assert infos["db_password"].example == MASK
    assert infos["x"].example == "example_value"
    assert infos["x"].description == "Value for x"
    assert all(info.required for info in infos.values())


def test_null_sensitive_value_stays_null() -> None:
    assert mask_variables({"db_password": None, "api_key": ""}) == {"db_password": None, "api_key": MASK}
