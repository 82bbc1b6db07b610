"""Aggregation of per-instance command results into one execution report."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Mapping, Sequence

from runcake.domain.rendering import mask_variables
from runcake.domain.targets.models import CommandInvocation

DEFAULT_FAILURE_MESSAGE = "Script execution failed on one or more instances"


@dataclass(slots=True)
class ExecutionReport:
    total: int
    successful: int
    combined_output: str
    combined_errors: str
    summary: str

    @property
    def failed(self) -> int:
        return self.total - self.successful

    @property
    def succeeded(self) -> bool:
        return self.total > 0 and self.successful == self.total

    @property
    def error_message(self) -> str | None:
        if self.succeeded:
            return None
        return self.combined_errors.strip() or DEFAULT_FAILURE_MESSAGE


def combine_streams(invocations: Sequence[CommandInvocation]) -> tuple[str, str]:
    output = ""
    errors = ""
    for invocation in invocations:
        if invocation.stdout:
            output += f"\n=== Instance {invocation.instance_id} Output ===\n{invocation.stdout}\n"
        if invocation.stderr:
            errors += f"\n=== Instance {invocation.instance_id} Errors ===\n{invocation.stderr}\n"
    return output, errors


def build_report(
    invocations: Sequence[CommandInvocation],
    *,
    script_name: str,
    runner_name: str,
    variables: Mapping[str, Any] | None = None,
    generated_at: datetime | None = None,
) -> ExecutionReport:
    generated_at = generated_at or datetime.now(timezone.utc)
    total = len(invocations)
    successful = sum(1 for invocation in invocations if invocation.succeeded)
    combined_output, combined_errors = combine_streams(invocations)

    lines = [
        f"Script execution completed on {total} instance(s).",
        "",
        "=== Execution Summary ===",
        f"Script: {script_name}",
        f"Runner: {runner_name}",
        f"Total Instances: {total}",
        f"Successful: {successful}",
        f"Failed: {total - successful}",
        f"Execution Time: {generated_at.isoformat()}",
    ]

    masked = mask_variables(variables)
    if masked:
        lines += ["", "=== Template Variables ==="]
        lines += [f"{name}: {value}" for name, value in masked.items()]

    lines += ["", "=== Instance Results ==="]
    for invocation in invocations:
        icon = "✅" if invocation.succeeded else "❌"
        duration = invocation.duration_seconds
        suffix = f" ({duration}s)" if duration is not None else ""
        lines.append(f"{icon} {invocation.instance_id}: {invocation.status}{suffix}")

    if combined_output.strip():
        lines += ["", "=== Combined Output ===", combined_output.strip()]
    if combined_errors.strip():
        lines += ["", "=== Combined Errors ===", combined_errors.strip()]

    return ExecutionReport(
        total=total,
        successful=successful,
        combined_output=combined_output,
        combined_errors=combined_errors,
        summary="\n".join(lines),
    )
