from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Optional, Sequence

from bulkimport.catalog import SchemaDocumentError, load_schema
from bulkimport.dependencies import get_engine_for_path
from bulkimport.imports import (
    ImportParseError,
    SqlMutationExecutor,
    parse_bundle_bytes,
    report_json,
    run_import,
)
from bulkimport.startup import configure_logging
from bulkimport.storage import create_tables


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bulkimport",
        description="Import a nodes, relations or lists bundle into a local database.",
    )
    parser.add_argument("bundle", help="Path to the bundle JSON file.")
    parser.add_argument("--schema", required=True, help="Path to the schema JSON file.")
    parser.add_argument("--db-path", required=True, help="Path to the SQLite database.")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Validate and batch the bundle without writing anything.",
    )
    parser.add_argument(
        "--init-db",
        action="store_true",
        help="Create missing tables for the schema before importing.",
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    configure_logging()

    try:
        schema = load_schema(args.schema)
    except (OSError, SchemaDocumentError) as exc:
        parser.exit(status=2, message=f"error: {exc}\n")

    executor = SqlMutationExecutor(get_engine_for_path(args.db_path), schema)
    if args.init_db:
        create_tables(executor.engine, executor.layout)

    try:
        bundle = parse_bundle_bytes(Path(args.bundle).read_bytes())
        report = asyncio.run(run_import(schema, executor, bundle, dry_run=args.dry_run))
    except OSError as exc:
        parser.exit(status=2, message=f"error: {exc}\n")
    except ImportParseError as exc:
        parser.exit(status=2, message=f"error: {exc.location}: {exc}\n")

    sys.stdout.write(report_json(report) + "\n")
    return 1 if report else 0


if __name__ == "__main__":
    raise SystemExit(main())
