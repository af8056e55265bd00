from __future__ import annotations

import json
from typing import Any, Optional, Union

from bulkimport.imports.models import (
    EntityIdentifier,
    ImportBundle,
    ImportList,
    ImportNode,
    ImportParseError,
    ImportRelation,
    ImportRelationSide,
    ValueType,
)

DecodedRecord = Union[ImportNode, ImportRelation, ImportList]

_RESERVED_KEYS = {"_typeName", "id"}


def parse_bundle_bytes(data: bytes) -> ImportBundle:
    try:
        payload = json.loads(data.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ImportParseError("Invalid JSON payload.") from exc
    return decode_bundle(payload)


def decode_bundle(payload: object) -> ImportBundle:
    if not isinstance(payload, dict):
        raise ImportParseError("Expected a JSON object.")
    raw_type = payload.get("valueType")
    if raw_type is None:
        raise ImportParseError("Missing valueType.", location="valueType")
    try:
        value_type = ValueType(raw_type)
    except ValueError as exc:
        raise ImportParseError(
            "Unsupported valueType (expected nodes, relations or lists).",
            location="valueType",
        ) from exc

    values = payload.get("values")
    if isinstance(values, dict):
        values = values.get("elements")
    if not isinstance(values, list):
        raise ImportParseError("Missing values.elements list.", location="values")
    return ImportBundle(value_type=value_type, values=tuple(values))


def decode_records(bundle: ImportBundle) -> list[DecodedRecord]:
    if bundle.value_type == ValueType.NODES:
        decode = _decode_node
    elif bundle.value_type == ValueType.RELATIONS:
        decode = _decode_relation
    else:
        decode = _decode_list
    return [
        decode(entry, f"values[{index}]") for index, entry in enumerate(bundle.values)
    ]


def _decode_node(entry: object, location: str) -> ImportNode:
    record = _expect_object(entry, location)
    identifier = _identifier(record, location)
    values = {key: value for key, value in record.items() if key != "_typeName"}
    return ImportNode(identifier=identifier, values=values, location=location)


def _decode_relation(entry: object, location: str) -> ImportRelation:
    if not isinstance(entry, list) or len(entry) < 2:
        raise ImportParseError("Expected a two-element array.", location=location)
    left = _relation_side(entry[0], f"{location}[0]")
    right = _relation_side(entry[-1], f"{location}[{len(entry) - 1}]")
    return ImportRelation(left=left, right=right, location=location)


def _decode_list(entry: object, location: str) -> ImportList:
    record = _expect_object(entry, location)
    identifier = _identifier(record, location)
    values_by_field: dict[str, list[Any]] = {}
    for key, value in record.items():
        if key in _RESERVED_KEYS:
            continue
        if not isinstance(value, list):
            raise ImportParseError("Expected a list of values.", location=f"{location}.{key}")
        values_by_field[key] = list(value)
    return ImportList(identifier=identifier, values_by_field=values_by_field, location=location)


def _relation_side(entry: object, location: str) -> ImportRelationSide:
    record = _expect_object(entry, location)
    field_name = record.get("fieldName")
    if field_name is not None and not isinstance(field_name, str):
        raise ImportParseError("fieldName must be a string.", location=f"{location}.fieldName")
    return ImportRelationSide(
        identifier=_identifier(record, location),
        field_name=_normalize_optional_str(field_name),
    )


def _identifier(record: dict[str, Any], location: str) -> EntityIdentifier:
    type_name = record.get("_typeName")
    if not isinstance(type_name, str) or not type_name:
        raise ImportParseError("Missing _typeName.", location=f"{location}._typeName")
    record_id = record.get("id")
    if not isinstance(record_id, str) or not record_id:
        raise ImportParseError("Missing id.", location=f"{location}.id")
    return EntityIdentifier(type_name=type_name, id=record_id)


def _expect_object(entry: object, location: str) -> dict[str, Any]:
    if not isinstance(entry, dict):
        raise ImportParseError("Expected object entries.", location=location)
    return entry


def _normalize_optional_str(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    stripped = value.strip()
    return stripped if stripped else None
