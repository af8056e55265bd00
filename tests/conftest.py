from __future__ import annotations

import asyncio
import json
from collections.abc import Callable, Generator

import pytest
from fastapi.testclient import TestClient as FastAPITestClient

from bulkimport import dependencies
from bulkimport.catalog import parse_schema
from bulkimport.imports import MutationCommand, SqlMutationExecutor
from bulkimport.main import app
from bulkimport.models import Schema
from bulkimport.storage import create_tables

SCHEMA_DOCUMENT = {
    "models": [
        {
            "name": "User",
            "fields": [
                {"name": "name", "type": "String", "isRequired": True},
                {"name": "email", "type": "String", "isUnique": True},
                {"name": "age", "type": "Int"},
                {"name": "score", "type": "Float"},
                {"name": "active", "type": "Boolean"},
                {"name": "birthday", "type": "DateTime"},
                {"name": "meta", "type": "Json"},
                {"name": "tags", "type": "String", "isList": True},
                {"name": "logins", "type": "DateTime", "isList": True},
                {"name": "settings", "type": "Json", "isList": True},
                {
                    "name": "posts",
                    "type": "Relation",
                    "isList": True,
                    "relation": "UserPosts",
                    "relationSide": "A",
                },
            ],
        },
        {
            "name": "Post",
            "fields": [
                {"name": "title", "type": "String"},
                {
                    "name": "author",
                    "type": "Relation",
                    "relation": "UserPosts",
                    "relationSide": "B",
                },
            ],
        },
    ],
    "relations": [{"name": "UserPosts", "modelA": "User", "modelB": "Post"}],
}


class RecordingExecutor:
    """In-memory executor that records commands and fails on request."""

    def __init__(
        self,
        failures: dict[str, Exception] | None = None,
        delays: dict[str, float] | None = None,
    ) -> None:
        self.failures = failures or {}
        self.delays = delays or {}
        self.calls: list[tuple[MutationCommand, bool]] = []
        self.completed: list[str] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def execute(self, command: MutationCommand, *, transactional: bool) -> None:
        key = command_key(command)
        self.calls.append((command, transactional))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delays.get(key, 0))
            if key in self.failures:
                raise self.failures[key]
            self.completed.append(key)
        finally:
            self.in_flight -= 1


def command_key(command: MutationCommand) -> str:
    if hasattr(command, "model"):
        return command.model.name
    if hasattr(command, "relation"):
        return command.relation.name
    return command.table


@pytest.fixture
def schema() -> Schema:
    return parse_schema(SCHEMA_DOCUMENT)


@pytest.fixture
def recording_executor() -> Callable[..., RecordingExecutor]:
    def _factory(**kwargs) -> RecordingExecutor:
        return RecordingExecutor(**kwargs)

    return _factory


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "test.db"


@pytest.fixture
def schema_path(tmp_path):
    path = tmp_path / "schema.json"
    path.write_text(json.dumps(SCHEMA_DOCUMENT), encoding="utf-8")
    return path


@pytest.fixture
def sql_executor(db_path, schema) -> Generator[SqlMutationExecutor, None, None]:
    engine = dependencies.get_engine_for_path(str(db_path))
    executor = SqlMutationExecutor(engine, schema)
    create_tables(engine, executor.layout)
    yield executor
    engine.dispose()
    dependencies.clear_caches()


@pytest.fixture
def client(db_path, schema_path, monkeypatch) -> Generator[FastAPITestClient, None, None]:
    monkeypatch.setenv("BULKIMPORT_DB_PATH", str(db_path))
    monkeypatch.setenv("BULKIMPORT_SCHEMA_PATH", str(schema_path))
    monkeypatch.delenv("BULKIMPORT_MAX_BODY_BYTES", raising=False)
    dependencies.clear_caches()
    with FastAPITestClient(app) as test_client:
        yield test_client
    dependencies.get_engine().dispose()
    dependencies.clear_caches()
