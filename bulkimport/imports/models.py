from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from bulkimport.models import Model, Relation

# Separator used by executors that report several failures in one message.
ERROR_DELIMITER = "-@-"


class ValueType(str, Enum):
    NODES = "nodes"
    RELATIONS = "relations"
    LISTS = "lists"


@dataclass(frozen=True)
class ImportBundle:
    value_type: ValueType
    values: tuple[Any, ...] = ()


@dataclass(frozen=True)
class EntityIdentifier:
    type_name: str
    id: str


@dataclass
class ImportNode:
    identifier: EntityIdentifier
    values: dict[str, Any]
    location: str = "import"


@dataclass
class ValidNode:
    id: str
    model: Model
    values: dict[str, Any]


@dataclass(frozen=True)
class ImportRelationSide:
    identifier: EntityIdentifier
    field_name: Optional[str] = None


@dataclass
class ImportRelation:
    left: ImportRelationSide
    right: ImportRelationSide
    location: str = "import"


@dataclass
class ImportList:
    identifier: EntityIdentifier
    values_by_field: dict[str, list[Any]]
    location: str = "import"


@dataclass
class BatchedCreate:
    model: Model
    arg_sets: list[dict[str, Any]] = field(default_factory=list)


@dataclass
class BatchedRelationRows:
    relation: Relation
    pairs: list[tuple[str, str]] = field(default_factory=list)


@dataclass
class BatchedListPush:
    table: str
    entries: list[tuple[str, list[Any]]] = field(default_factory=list)


@dataclass
class ImportIssue:
    location: str
    message: str


class ImportParseError(Exception):
    def __init__(self, message: str, location: str = "import") -> None:
        super().__init__(message)
        self.location = location


class ExecutionError(Exception):
    """A rejected mutation command, holding one message per sub-error."""

    def __init__(self, errors: list[str]) -> None:
        super().__init__(ERROR_DELIMITER.join(errors))
        self.errors = list(errors)
