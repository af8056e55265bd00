from __future__ import annotations

import asyncio
import json
import logging

import pytest
from sqlalchemy import select

from bulkimport.imports import ExecutionError, ImportParseError, decode_bundle, plan_import, run_import


def _nodes(*elements) -> dict:
    return {"valueType": "nodes", "values": {"elements": list(elements)}}


def test_valid_bundle_imports_with_empty_report(sql_executor, schema) -> None:
    payload = json.loads(
        json.dumps(
            _nodes(
                {"_typeName": "User", "id": "u1", "name": "Ada", "birthday": "2017-12-05T12:34:23.000Z"},
                {"_typeName": "Post", "id": "p1", "title": "Hello"},
            )
        )
    )

    report = asyncio.run(run_import(schema, sql_executor, payload))

    assert report == []
    users = sql_executor.layout.model_tables["User"]
    with sql_executor.engine.connect() as connection:
        row = connection.execute(select(users.c.id, users.c.birthday)).one()
    assert tuple(row) == ("u1", "2017-12-05 12:34:23.000 ")


def test_unknown_field_is_reported_and_siblings_still_import(sql_executor, schema) -> None:
    payload = _nodes(
        {"_typeName": "User", "id": "u1", "name": "Ada"},
        {"_typeName": "User", "id": "u2", "name": "Bob", "nickname": "b"},
    )

    report = asyncio.run(run_import(schema, sql_executor, payload))

    assert report == ["The model User with id u2 has an unknown field 'nickname' in field list."]
    users = sql_executor.layout.model_tables["User"]
    with sql_executor.engine.connect() as connection:
        assert [row[0] for row in connection.execute(select(users.c.id))] == ["u1"]


def test_relations_and_lists_round_trip(sql_executor, schema) -> None:
    asyncio.run(
        run_import(
            schema,
            sql_executor,
            _nodes({"_typeName": "User", "id": "u1", "name": "Ada"}, {"_typeName": "Post", "id": "p1"}),
        )
    )
    relations = {
        "valueType": "relations",
        "values": {
            "elements": [
                [{"_typeName": "Post", "id": "p1", "fieldName": "author"}, {"_typeName": "User", "id": "u1"}],
                [{"_typeName": "Post", "id": "p1"}, {"_typeName": "User", "id": "u1"}],
            ]
        },
    }
    lists = {
        "valueType": "lists",
        "values": {"elements": [{"_typeName": "User", "id": "u1", "tags": ["a"], "settings": [{"k": 1}]}]},
    }

    relation_report = asyncio.run(run_import(schema, sql_executor, relations))
    list_report = asyncio.run(run_import(schema, sql_executor, lists))

    assert len(relation_report) == 1
    assert "exactly one side needs a fieldName" in relation_report[0]
    assert list_report == []
    with sql_executor.engine.connect() as connection:
        relation_rows = connection.execute(select(sql_executor.layout.relation_tables["UserPosts"])).all()
        settings = connection.execute(select(sql_executor.layout.list_tables["User_{settings}"])).all()
    assert [(row[1], row[2]) for row in relation_rows] == [("u1", "p1")]
    assert [tuple(row) for row in settings] == [("u1", 0, '{"k":1}')]


def test_malformed_bundle_raises_before_writing(sql_executor, schema) -> None:
    payload = _nodes({"_typeName": "User", "id": "u1", "name": "Ada"}, {"_typeName": "User"})

    with pytest.raises(ImportParseError):
        asyncio.run(run_import(schema, sql_executor, payload))

    users = sql_executor.layout.model_tables["User"]
    with sql_executor.engine.connect() as connection:
        assert connection.execute(select(users)).all() == []


def test_dry_run_reports_record_issues_without_executing(schema, recording_executor) -> None:
    executor = recording_executor()
    payload = _nodes({"_typeName": "User", "id": "u1", "name": "Ada"}, {"_typeName": "Ghost", "id": "g1"})

    report = asyncio.run(run_import(schema, executor, payload, dry_run=True))

    assert report == ["The model Ghost with id g1 does not exist."]
    assert executor.calls == []


def test_only_failing_batches_are_reported(schema, recording_executor) -> None:
    executor = recording_executor(
        failures={"User_{tags}": ExecutionError(["tags failed"]), "User_{settings}": RuntimeError("a-@-b")},
        delays={"User_{tags}": 0.03, "User_{logins}": 0.01},
    )
    payload = {
        "valueType": "lists",
        "values": {
            "elements": [
                {"_typeName": "User", "id": "u1", "tags": ["x"], "logins": [], "settings": [1]},
            ]
        },
    }

    report = asyncio.run(run_import(schema, executor, payload))

    assert sorted(report) == ["a", "b", "tags failed"]
    assert executor.completed == ["User_{logins}"]


def test_plan_groups_nodes_by_model(schema) -> None:
    bundle = decode_bundle(_nodes(*({"_typeName": "User", "id": f"u{i}"} for i in range(4))))

    plan = plan_import(schema, bundle)

    assert len(plan.commands) == 1
    assert len(plan.commands[0].arg_sets) == 4
    assert plan.issues == []


def test_import_logs_summary(schema, recording_executor, caplog) -> None:
    caplog.set_level(logging.INFO, logger="bulkimport.imports.pipeline")

    asyncio.run(run_import(schema, recording_executor(), _nodes({"_typeName": "User", "id": "u1"})))

    assert "Import nodes: records=1 commands=1 errors=0" in caplog.text
