from __future__ import annotations

import os
from functools import lru_cache

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine

from bulkimport.catalog import load_schema
from bulkimport.imports.sql_executor import SqlMutationExecutor
from bulkimport.models import Schema

DEFAULT_MAX_BODY_BYTES = 10 * 1024 * 1024


def get_db_path() -> str:
    return os.getenv("BULKIMPORT_DB_PATH", "bulkimport.db")


def get_schema_path() -> str:
    return os.getenv("BULKIMPORT_SCHEMA_PATH", "schema.json")


def get_max_body_bytes() -> int:
    raw = os.getenv("BULKIMPORT_MAX_BODY_BYTES")
    if not raw:
        return DEFAULT_MAX_BODY_BYTES
    try:
        value = int(raw)
    except ValueError:
        return DEFAULT_MAX_BODY_BYTES
    return value if value > 0 else DEFAULT_MAX_BODY_BYTES


@lru_cache(maxsize=8)
def get_engine_for_path(db_path: str) -> Engine:
    engine = create_engine(
        f"sqlite:///{db_path}",
        connect_args={"check_same_thread": False},
        future=True,
    )

    @event.listens_for(engine, "connect")
    def _configure_sqlite(dbapi_connection, _connection_record) -> None:
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA journal_mode=WAL;")
        cursor.execute("PRAGMA busy_timeout=5000;")
        cursor.execute("PRAGMA foreign_keys = ON")
        cursor.close()

    return engine


@lru_cache(maxsize=8)
def get_schema_for_path(schema_path: str) -> Schema:
    return load_schema(schema_path)


def get_engine() -> Engine:
    return get_engine_for_path(get_db_path())


def get_schema() -> Schema:
    return get_schema_for_path(get_schema_path())


@lru_cache(maxsize=8)
def get_executor_for_paths(db_path: str, schema_path: str) -> SqlMutationExecutor:
    return SqlMutationExecutor(get_engine_for_path(db_path), get_schema_for_path(schema_path))


def get_executor() -> SqlMutationExecutor:
    return get_executor_for_paths(get_db_path(), get_schema_path())


def clear_caches() -> None:
    get_executor_for_paths.cache_clear()
    get_engine_for_path.cache_clear()
    get_schema_for_path.cache_clear()
