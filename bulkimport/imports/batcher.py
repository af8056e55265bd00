from __future__ import annotations

from typing import Any, Iterable

from bulkimport.imports.coercion import coerce_list_value
from bulkimport.imports.models import (
    BatchedCreate,
    BatchedListPush,
    BatchedRelationRows,
    ImportIssue,
    ImportList,
    ImportRelation,
    ImportRelationSide,
    ValidNode,
)
from bulkimport.models import Model, Relation, RelationSide, Schema
from bulkimport.storage import list_table_name


def batch_nodes(nodes: Iterable[ValidNode]) -> list[BatchedCreate]:
    grouped: dict[Model, BatchedCreate] = {}
    for node in nodes:
        batch = grouped.setdefault(node.model, BatchedCreate(model=node.model))
        batch.arg_sets.append(node.values)
    return list(grouped.values())


def batch_relations(
    schema: Schema, relations: Iterable[ImportRelation]
) -> tuple[list[BatchedRelationRows], list[ImportIssue]]:
    grouped: dict[Relation, BatchedRelationRows] = {}
    issues: list[ImportIssue] = []
    for element in relations:
        resolved = _resolve_relation_row(schema, element)
        if isinstance(resolved, ImportIssue):
            issues.append(resolved)
            continue
        relation, pair = resolved
        grouped.setdefault(relation, BatchedRelationRows(relation=relation)).pairs.append(pair)
    return list(grouped.values()), issues


def _resolve_relation_row(
    schema: Schema, element: ImportRelation
) -> tuple[Relation, tuple[str, str]] | ImportIssue:
    owning, other = _owning_side(element.left, element.right)
    if owning is None:
        left, right = element.left.identifier, element.right.identifier
        return ImportIssue(
            location=element.location,
            message=(
                f"Invalid relation between {left.type_name} with id {left.id} and "
                f"{right.type_name} with id {right.id}: exactly one side needs a fieldName."
            ),
        )

    identifier = owning.identifier
    model = schema.get_model_by_name(identifier.type_name)
    if model is None:
        return ImportIssue(
            location=element.location,
            message=f"The model {identifier.type_name} with id {identifier.id} does not exist.",
        )
    field = model.get_field_by_name(owning.field_name)
    if field is None or field.relation is None or field.relation_side is None:
        return ImportIssue(
            location=element.location,
            message=(
                f"The model {model.name} with id {identifier.id} has no relation field "
                f"'{owning.field_name}'."
            ),
        )

    if field.relation_side == RelationSide.A:
        pair = (identifier.id, other.identifier.id)
    else:
        pair = (other.identifier.id, identifier.id)
    return field.relation, pair


def _owning_side(
    left: ImportRelationSide, right: ImportRelationSide
) -> tuple[ImportRelationSide | None, ImportRelationSide | None]:
    if left.field_name is not None and right.field_name is None:
        return left, right
    if right.field_name is not None and left.field_name is None:
        return right, left
    return None, None


def batch_lists(
    schema: Schema, lists: Iterable[ImportList]
) -> tuple[list[BatchedListPush], list[ImportIssue]]:
    grouped: dict[str, BatchedListPush] = {}
    issues: list[ImportIssue] = []
    for element in lists:
        identifier = element.identifier
        model = schema.get_model_by_name(identifier.type_name)
        if model is None:
            issues.append(
                ImportIssue(
                    location=element.location,
                    message=f"The model {identifier.type_name} with id {identifier.id} does not exist.",
                )
            )
            continue

        pushes: list[tuple[str, list[Any]]] = []
        for field_name, values in element.values_by_field.items():
            field = model.get_field_by_name(field_name)
            if field is None or not field.is_scalar or not field.is_list:
                issues.append(
                    ImportIssue(
                        location=f"{element.location}.{field_name}",
                        message=(
                            f"The model {model.name} with id {identifier.id} has no scalar "
                            f"list field '{field_name}'."
                        ),
                    )
                )
                continue
            try:
                coerced = [coerce_list_value(field, value) for value in values]
            except ValueError as exc:
                issues.append(
                    ImportIssue(
                        location=f"{element.location}.{field_name}",
                        message=(
                            f"The model {model.name} with id {identifier.id} has an invalid "
                            f"value in list field '{field_name}': {exc}."
                        ),
                    )
                )
                continue
            pushes.append((list_table_name(model.name, field_name), coerced))

        for table, values in pushes:
            batch = grouped.setdefault(table, BatchedListPush(table=table))
            batch.entries.append((identifier.id, values))
    return list(grouped.values()), issues
