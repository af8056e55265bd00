from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class TypeIdentifier(str, Enum):
    STRING = "String"
    INT = "Int"
    FLOAT = "Float"
    BOOLEAN = "Boolean"
    DATETIME = "DateTime"
    JSON = "Json"
    ENUM = "Enum"
    ID = "Id"
    RELATION = "Relation"

    @classmethod
    def normalize(cls, value: "TypeIdentifier | str") -> "TypeIdentifier":
        if isinstance(value, cls):
            return value
        if value in {"GraphQLID", "ID"}:
            return cls.ID
        return cls(value)


class RelationSide(str, Enum):
    A = "A"
    B = "B"


@dataclass(frozen=True)
class Relation:
    name: str
    model_a: str
    model_b: str


@dataclass(frozen=True)
class Field:
    name: str
    type_identifier: TypeIdentifier
    is_list: bool = False
    is_required: bool = False
    is_unique: bool = False
    relation: Optional[Relation] = None
    relation_side: Optional[RelationSide] = None

    @property
    def is_scalar(self) -> bool:
        return self.type_identifier != TypeIdentifier.RELATION


ID_FIELD = Field(name="id", type_identifier=TypeIdentifier.ID, is_required=True, is_unique=True)


@dataclass(eq=False)
class Model:
    """A schema entity type.

    Models compare by identity so they can key batching dicts; the schema
    never builds two models with the same name.
    """

    name: str
    fields: list[Field] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not any(item.name == "id" for item in self.fields):
            self.fields = [ID_FIELD, *self.fields]
        self._fields_by_name = {item.name: item for item in self.fields}

    def get_field_by_name(self, name: str) -> Optional[Field]:
        return self._fields_by_name.get(name)

    @property
    def scalar_fields(self) -> list[Field]:
        return [item for item in self.fields if item.is_scalar and not item.is_list]

    @property
    def scalar_list_fields(self) -> list[Field]:
        return [item for item in self.fields if item.is_scalar and item.is_list]

    def __repr__(self) -> str:
        return f"Model(name={self.name!r})"


@dataclass
class Schema:
    models: list[Model] = field(default_factory=list)
    relations: list[Relation] = field(default_factory=list)

    def __post_init__(self) -> None:
        self._models_by_name = {model.name: model for model in self.models}

    def get_model_by_name(self, name: str) -> Optional[Model]:
        return self._models_by_name.get(name)

    def get_relation_by_name(self, name: str) -> Optional[Relation]:
        for relation in self.relations:
            if relation.name == name:
                return relation
        return None
