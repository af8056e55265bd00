from __future__ import annotations

import logging
from dataclasses import dataclass, field

from bulkimport.imports.batcher import batch_lists, batch_nodes, batch_relations
from bulkimport.imports.decoder import decode_bundle, decode_records
from bulkimport.imports.executor import (
    CommandOutcome,
    MutationCommand,
    MutationExecutor,
    execute_commands,
)
from bulkimport.imports.models import ImportBundle, ImportIssue, ValueType
from bulkimport.imports.reporter import build_error_report
from bulkimport.imports.validator import validate_nodes
from bulkimport.models import Schema

logger = logging.getLogger(__name__)


@dataclass
class ImportPlan:
    commands: list[MutationCommand] = field(default_factory=list)
    issues: list[ImportIssue] = field(default_factory=list)


def plan_import(schema: Schema, bundle: ImportBundle) -> ImportPlan:
    records = decode_records(bundle)
    if bundle.value_type == ValueType.NODES:
        valid, issues = validate_nodes(schema, records)
        return ImportPlan(commands=list(batch_nodes(valid)), issues=issues)
    if bundle.value_type == ValueType.RELATIONS:
        rows, issues = batch_relations(schema, records)
        return ImportPlan(commands=list(rows), issues=issues)
    pushes, issues = batch_lists(schema, records)
    return ImportPlan(commands=list(pushes), issues=issues)


async def run_import(
    schema: Schema,
    executor: MutationExecutor,
    payload: object,
    *,
    dry_run: bool = False,
) -> list[str]:
    """Import one bundle and return the failure messages.

    A malformed bundle raises ImportParseError before anything is written.
    Every other failure lands in the returned list; an empty list means no
    failure was observed.
    """
    bundle = payload if isinstance(payload, ImportBundle) else decode_bundle(payload)
    plan = plan_import(schema, bundle)

    outcomes: list[CommandOutcome] = []
    if not dry_run:
        outcomes = await execute_commands(executor, plan.commands)

    report = build_error_report(plan.issues, outcomes)
    logger.info(
        "Import %s: records=%d commands=%d errors=%d dry_run=%s",
        bundle.value_type.value,
        len(bundle.values),
        len(plan.commands),
        len(report),
        dry_run,
    )
    return report
