from __future__ import annotations

import logging
import os

from bulkimport.dependencies import get_engine, get_executor
from bulkimport.storage import create_tables

logger = logging.getLogger(__name__)


def init_database() -> None:
    executor = get_executor()
    create_tables(get_engine(), executor.layout)
    logger.info(
        "Storage ready: models=%d relations=%d lists=%d",
        len(executor.layout.model_tables),
        len(executor.layout.relation_tables),
        len(executor.layout.list_tables),
    )


def configure_logging() -> None:
    log_level = os.getenv("BULKIMPORT_LOG_LEVEL", "INFO").upper()
    level = getattr(logging, log_level, logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(levelname)s [%(name)s] %(message)s",
        force=True,
    )
