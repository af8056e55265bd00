from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional, Protocol, Sequence, Union

from bulkimport.imports.models import BatchedCreate, BatchedListPush, BatchedRelationRows

logger = logging.getLogger(__name__)

MutationCommand = Union[BatchedCreate, BatchedRelationRows, BatchedListPush]


class MutationExecutor(Protocol):
    async def execute(self, command: MutationCommand, *, transactional: bool) -> None:
        ...


@dataclass
class CommandOutcome:
    command: MutationCommand
    error: Optional[Exception] = None

    @property
    def succeeded(self) -> bool:
        return self.error is None


async def execute_commands(
    executor: MutationExecutor, commands: Sequence[MutationCommand]
) -> list[CommandOutcome]:
    """Run every command at once, without a shared transaction.

    A failing command is recorded in its outcome and never stops the others.
    """
    return list(await asyncio.gather(*(_execute_one(executor, command) for command in commands)))


async def _execute_one(executor: MutationExecutor, command: MutationCommand) -> CommandOutcome:
    try:
        await executor.execute(command, transactional=False)
    except Exception as exc:
        logger.warning("Import command %s failed: %s", describe_command(command), exc)
        return CommandOutcome(command=command, error=exc)
    return CommandOutcome(command=command)


def describe_command(command: MutationCommand) -> str:
    if isinstance(command, BatchedCreate):
        return f"create {command.model.name} x{len(command.arg_sets)}"
    if isinstance(command, BatchedRelationRows):
        return f"relate {command.relation.name} x{len(command.pairs)}"
    return f"push {command.table} x{len(command.entries)}"
