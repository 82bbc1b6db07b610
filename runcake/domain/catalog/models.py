"""Read models for the definitions an execution is built from."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(slots=True)
class Credential:
    id: str
    name: str
    access_key_id: str
    secret_access_key: str
    region: str

    def __repr__(self) -> str:
        return f"Credential(id={self.id!r}, name={self.name!r}, region={self.region!r})"


@dataclass(slots=True)
class RunnerDefinition:
    id: str
    name: str
    description: Optional[str]
    wrapper: str


@dataclass(slots=True)
class ScriptDefinition:
    id: str
    name: str
    content: str
    runner_id: Optional[str]
    permission_level: str


@dataclass(slots=True)
class TargetGroupSpec:
    id: str
    name: str
    credential: Credential
    region: str
    tag_key: str
    tag_value: str
