from bulkimport.imports.batcher import batch_lists, batch_nodes, batch_relations
from bulkimport.imports.decoder import decode_bundle, decode_records, parse_bundle_bytes
from bulkimport.imports.executor import (
    CommandOutcome,
    MutationCommand,
    MutationExecutor,
    execute_commands,
)
from bulkimport.imports.models import (
    BatchedCreate,
    BatchedListPush,
    BatchedRelationRows,
    EntityIdentifier,
    ExecutionError,
    ImportBundle,
    ImportIssue,
    ImportList,
    ImportNode,
    ImportParseError,
    ImportRelation,
    ImportRelationSide,
    ValidNode,
    ValueType,
)
from bulkimport.imports.pipeline import ImportPlan, plan_import, run_import
from bulkimport.imports.reporter import build_error_report, report_json
from bulkimport.imports.sql_executor import SqlMutationExecutor
from bulkimport.imports.validator import validate_nodes

__all__ = [
    "ImportBundle",
    "ValueType",
    "EntityIdentifier",
    "ImportNode",
    "ValidNode",
    "ImportRelation",
    "ImportRelationSide",
    "ImportList",
    "BatchedCreate",
    "BatchedRelationRows",
    "BatchedListPush",
    "ImportIssue",
    "ImportParseError",
    "ExecutionError",
    "MutationCommand",
    "MutationExecutor",
    "CommandOutcome",
    "SqlMutationExecutor",
    "decode_bundle",
    "decode_records",
    "parse_bundle_bytes",
    "validate_nodes",
    "batch_nodes",
    "batch_relations",
    "batch_lists",
    "execute_commands",
    "build_error_report",
    "report_json",
    "ImportPlan",
    "plan_import",
    "run_import",
]
