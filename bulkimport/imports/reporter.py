from __future__ import annotations

import json
from typing import Iterable

from bulkimport.imports.executor import CommandOutcome, describe_command
from bulkimport.imports.models import ERROR_DELIMITER, ExecutionError, ImportIssue


def build_error_report(
    issues: Iterable[ImportIssue], outcomes: Iterable[CommandOutcome]
) -> list[str]:
    report = [issue.message for issue in issues]
    for outcome in outcomes:
        if outcome.error is not None:
            messages = split_execution_error(outcome.error)
            # A failed command always leaves at least one descriptor.
            report.extend(messages or [f"Command {describe_command(outcome.command)} failed."])
    return report


def split_execution_error(error: Exception) -> list[str]:
    if isinstance(error, ExecutionError):
        return [message for message in error.errors if message]
    return [message for message in str(error).split(ERROR_DELIMITER) if message]


def report_json(report: list[str]) -> str:
    return json.dumps(report)
