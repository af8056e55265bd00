from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Optional

from sqlalchemy import Table, func, insert, select
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError

from bulkimport.imports.executor import MutationCommand, describe_command
from bulkimport.imports.models import (
    BatchedCreate,
    BatchedListPush,
    BatchedRelationRows,
    ExecutionError,
)
from bulkimport.models import Schema
from bulkimport.storage import StorageLayout, build_layout


@dataclass
class _WriteUnit:
    label: str
    rows: list[dict[str, Any]]


class SqlMutationExecutor:
    """Writes batched import commands into the tables laid out for a schema.

    A non-transactional command first tries a single multi-row insert. If the
    database rejects it, every record is retried on its own so that one bad
    row only costs that row, and the failures come back as one ExecutionError.
    """

    def __init__(self, engine: Engine, schema: Schema, layout: Optional[StorageLayout] = None) -> None:
        self.engine = engine
        self.schema = schema
        self.layout = layout or build_layout(schema)

    async def execute(self, command: MutationCommand, *, transactional: bool) -> None:
        await asyncio.to_thread(self.execute_sync, command, transactional)

    def execute_sync(self, command: MutationCommand, transactional: bool = False) -> None:
        table = self._table_for(command)
        with self.engine.connect() as connection:
            units = self._units_for(connection, table, command)
        if not units:
            return

        try:
            self._insert(table, [row for unit in units for row in unit.rows])
            return
        except SQLAlchemyError as exc:
            if transactional:
                message = f"Failure executing {describe_command(command)}. Cause: {_cause(exc)}"
                raise ExecutionError([message]) from exc

        errors: list[str] = []
        for unit in units:
            try:
                self._insert(table, unit.rows)
            except SQLAlchemyError as exc:
                errors.append(f"{unit.label} Cause: {_cause(exc)}")
        if errors:
            raise ExecutionError(errors)

    def _insert(self, table: Table, rows: list[dict[str, Any]]) -> None:
        if not rows:
            return
        with self.engine.begin() as connection:
            connection.execute(insert(table), rows)

    def _table_for(self, command: MutationCommand) -> Table:
        if isinstance(command, BatchedCreate):
            table = self.layout.model_tables.get(command.model.name)
            name = command.model.name
        elif isinstance(command, BatchedRelationRows):
            table = self.layout.relation_tables.get(command.relation.name)
            name = command.relation.name
        else:
            table = self.layout.list_tables.get(command.table)
            name = command.table
        if table is None:
            raise ExecutionError([f"No table is laid out for {name}."])
        return table

    def _units_for(
        self, connection: Connection, table: Table, command: MutationCommand
    ) -> list[_WriteUnit]:
        if isinstance(command, BatchedCreate):
            return _create_units(table, command)
        if isinstance(command, BatchedRelationRows):
            return [
                _WriteUnit(
                    label=(
                        f"Failure inserting into relationtable {table.name} with ids "
                        f"{a_id} and {b_id}."
                    ),
                    rows=[{"A": a_id, "B": b_id}],
                )
                for a_id, b_id in command.pairs
            ]
        return _list_units(connection, table, command)


def _create_units(table: Table, command: BatchedCreate) -> list[_WriteUnit]:
    # executemany needs every row to bind the same columns
    columns = [column.name for column in table.columns]
    used = {key for args in command.arg_sets for key in args if key in columns}
    units: list[_WriteUnit] = []
    for args in command.arg_sets:
        row = {name: args.get(name) for name in columns if name in used}
        units.append(
            _WriteUnit(
                label=f"Failure inserting {command.model.name} with Id '{args.get('id')}'.",
                rows=[row],
            )
        )
    return units


def _list_units(connection: Connection, table: Table, command: BatchedListPush) -> list[_WriteUnit]:
    node_ids = {node_id for node_id, _ in command.entries}
    next_position: dict[str, int] = {node_id: 0 for node_id in node_ids}
    query = (
        select(table.c.nodeId, func.max(table.c.position))
        .where(table.c.nodeId.in_(sorted(node_ids)))
        .group_by(table.c.nodeId)
    )
    for node_id, position in connection.execute(query):
        next_position[node_id] = int(position) + 1

    units: list[_WriteUnit] = []
    for node_id, values in command.entries:
        rows = []
        for value in values:
            rows.append({"nodeId": node_id, "position": next_position[node_id], "value": value})
            next_position[node_id] += 1
        units.append(
            _WriteUnit(
                label=f"Failure inserting into listTable {command.table} for the id {node_id}.",
                rows=rows,
            )
        )
    return units


def _cause(exc: SQLAlchemyError) -> str:
    orig = getattr(exc, "orig", None)
    return str(orig) if orig else str(exc)
