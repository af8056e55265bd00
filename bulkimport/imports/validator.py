from __future__ import annotations

from typing import Any, Iterable, Optional

from bulkimport.imports.coercion import coerce_node_value
from bulkimport.imports.models import ImportIssue, ImportNode, ValidNode
from bulkimport.models import Model, Schema


def validate_nodes(
    schema: Schema, nodes: Iterable[ImportNode]
) -> tuple[list[ValidNode], list[ImportIssue]]:
    valid: list[ValidNode] = []
    issues: list[ImportIssue] = []
    for node in nodes:
        checked = validate_node(schema, node)
        if isinstance(checked, ImportIssue):
            issues.append(checked)
        else:
            valid.append(checked)
    return valid, issues


def validate_node(schema: Schema, node: ImportNode) -> ValidNode | ImportIssue:
    type_name = node.identifier.type_name
    model = schema.get_model_by_name(type_name)
    if model is None:
        return _issue(node, f"The model {type_name} with id {node.identifier.id} does not exist.")

    unknown = _first_unknown_field(model, node.values)
    if unknown is not None:
        return _issue(
            node,
            f"The model {model.name} with id {node.identifier.id} has an unknown field "
            f"'{unknown}' in field list.",
        )

    values: dict[str, Any] = {}
    for key, raw in node.values.items():
        field = model.get_field_by_name(key)
        if not field.is_scalar or field.is_list:
            return _issue(
                node,
                f"The model {model.name} with id {node.identifier.id} cannot set the "
                f"{'relation' if not field.is_scalar else 'list'} field '{key}' in a node record.",
            )
        try:
            values[key] = coerce_node_value(field, raw)
        except ValueError as exc:
            return _issue(
                node,
                f"The model {model.name} with id {node.identifier.id} has an invalid value "
                f"for field '{key}': {exc}.",
            )
    return ValidNode(id=node.identifier.id, model=model, values=values)


def _first_unknown_field(model: Model, values: dict[str, Any]) -> Optional[str]:
    for key in values:
        if model.get_field_by_name(key) is None:
            return key
    return None


def _issue(node: ImportNode, message: str) -> ImportIssue:
    return ImportIssue(location=node.location, message=message)
