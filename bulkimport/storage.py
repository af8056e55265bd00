from __future__ import annotations

from dataclasses import dataclass, field

from sqlalchemy import (
    Boolean,
    Column,
    Float,
    ForeignKey,
    Integer,
    MetaData,
    Table,
    Text,
    UniqueConstraint,
)
from sqlalchemy.engine import Engine
from sqlalchemy.types import TypeEngine

from bulkimport.models import Field, Schema, TypeIdentifier


def relation_table_name(relation_name: str) -> str:
    return f"_{relation_name}"


def list_table_name(model_name: str, field_name: str) -> str:
    return f"{model_name}_{{{field_name}}}"


@dataclass
class StorageLayout:
    metadata: MetaData
    model_tables: dict[str, Table] = field(default_factory=dict)
    relation_tables: dict[str, Table] = field(default_factory=dict)
    list_tables: dict[str, Table] = field(default_factory=dict)


def build_layout(schema: Schema) -> StorageLayout:
    metadata = MetaData()
    layout = StorageLayout(metadata=metadata)

    for model in schema.models:
        columns = [Column("id", Text, primary_key=True)]
        for item in model.scalar_fields:
            if item.name == "id":
                continue
            columns.append(
                Column(
                    item.name,
                    _column_type(item),
                    nullable=not item.is_required,
                    unique=item.is_unique,
                )
            )
        layout.model_tables[model.name] = Table(model.name, metadata, *columns)

    for relation in schema.relations:
        name = relation_table_name(relation.name)
        layout.relation_tables[relation.name] = Table(
            name,
            metadata,
            Column("id", Integer, primary_key=True, autoincrement=True),
            Column("A", Text, ForeignKey(f"{relation.model_a}.id", ondelete="CASCADE"), nullable=False),
            Column("B", Text, ForeignKey(f"{relation.model_b}.id", ondelete="CASCADE"), nullable=False),
            UniqueConstraint("A", "B", name=f"uq{name}_A_B"),
        )

    for model in schema.models:
        for item in model.scalar_list_fields:
            name = list_table_name(model.name, item.name)
            layout.list_tables[name] = Table(
                name,
                metadata,
                Column(
                    "nodeId",
                    Text,
                    ForeignKey(f"{model.name}.id", ondelete="CASCADE"),
                    primary_key=True,
                ),
                Column("position", Integer, primary_key=True),
                Column("value", _column_type(item), nullable=False),
            )
    return layout


def create_tables(engine: Engine, layout: StorageLayout) -> None:
    layout.metadata.create_all(engine, checkfirst=True)


def _column_type(item: Field) -> TypeEngine | type[TypeEngine]:
    if item.type_identifier == TypeIdentifier.INT:
        return Integer
    if item.type_identifier == TypeIdentifier.FLOAT:
        return Float
    if item.type_identifier == TypeIdentifier.BOOLEAN:
        return Boolean
    return Text
