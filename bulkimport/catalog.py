from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, ValidationError

from bulkimport import models


class SchemaDocumentError(ValueError):
    """Raised when a schema document cannot be turned into a Schema."""


class FieldDocument(BaseModel):
    name: str
    type: str
    is_list: bool = Field(default=False, alias="isList")
    is_required: bool = Field(default=False, alias="isRequired")
    is_unique: bool = Field(default=False, alias="isUnique")
    relation: Optional[str] = None
    relation_side: Optional[models.RelationSide] = Field(default=None, alias="relationSide")


class ModelDocument(BaseModel):
    name: str
    fields: list[FieldDocument] = Field(default_factory=list)


class RelationDocument(BaseModel):
    name: str
    side_a: str = Field(alias="modelA")
    side_b: str = Field(alias="modelB")


class SchemaDocument(BaseModel):
    models: list[ModelDocument] = Field(default_factory=list)
    relations: list[RelationDocument] = Field(default_factory=list)


def load_schema(path: str | Path) -> models.Schema:
    try:
        payload = json.loads(Path(path).read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise SchemaDocumentError(f"Schema file {path} is not valid JSON.") from exc
    return parse_schema(payload)


def parse_schema(payload: object) -> models.Schema:
    try:
        document = SchemaDocument.model_validate(payload)
    except ValidationError as exc:
        raise SchemaDocumentError(f"Invalid schema document: {exc}") from exc

    model_names = _unique_names([model.name for model in document.models], "model")
    relations: dict[str, models.Relation] = {}
    for entry in document.relations:
        if entry.name in relations:
            raise SchemaDocumentError(f"Duplicate relation name '{entry.name}'.")
        for side_model in (entry.side_a, entry.side_b):
            if side_model not in model_names:
                raise SchemaDocumentError(
                    f"Relation '{entry.name}' references unknown model '{side_model}'."
                )
        relations[entry.name] = models.Relation(
            name=entry.name, model_a=entry.side_a, model_b=entry.side_b
        )

    return models.Schema(
        models=[_build_model(entry, relations) for entry in document.models],
        relations=list(relations.values()),
    )


def _build_model(
    entry: ModelDocument, relations: dict[str, models.Relation]
) -> models.Model:
    _unique_names([item.name for item in entry.fields], f"field on model '{entry.name}'")
    fields: list[models.Field] = []
    for item in entry.fields:
        location = f"{entry.name}.{item.name}"
        try:
            type_identifier = models.TypeIdentifier.normalize(item.type)
        except ValueError as exc:
            raise SchemaDocumentError(f"Unknown type '{item.type}' on {location}.") from exc

        relation = None
        if type_identifier == models.TypeIdentifier.RELATION:
            if item.relation is None or item.relation not in relations:
                raise SchemaDocumentError(f"Relation field {location} needs a known relation.")
            if item.relation_side is None:
                raise SchemaDocumentError(f"Relation field {location} needs a relationSide.")
            relation = relations[item.relation]
        elif item.relation is not None:
            raise SchemaDocumentError(f"Scalar field {location} cannot declare a relation.")

        fields.append(
            models.Field(
                name=item.name,
                type_identifier=type_identifier,
                is_list=item.is_list,
                is_required=item.is_required,
                is_unique=item.is_unique,
                relation=relation,
                relation_side=item.relation_side if relation else None,
            )
        )
    return models.Model(name=entry.name, fields=fields)


def _unique_names(names: list[str], label: str) -> set[str]:
    seen: set[str] = set()
    for name in names:
        if name in seen:
            raise SchemaDocumentError(f"Duplicate {label} name '{name}'.")
        seen.add(name)
    return seen
