"""Runtime infrastructure for kassa.

This package provides process/runtime services including:
- Logging setup via get_logger()
- Path resolution via get_paths(), ProjectPaths
- Category vocabulary loading via load_category_vocabulary()
- OCR backends via create_ocr_oracle()
- SQLite storage via create_session_factory() and the Sql* stores

Usage:
    from kassa.runtime import get_logger, get_paths

    logger = get_logger(__name__)
    paths = get_paths()
    print(paths.root, paths.database)
"""

from kassa.runtime.category_rules import load_category_vocabulary
from kassa.runtime.logging import (
    DEFAULT_LOG_LEVEL,
    LOG_FORMAT,
    LOG_FORMAT_DEBUG,
    configure_logging,
    get_logger,
    set_log_level,
)
from kassa.runtime.ocr_oracle import HttpOcrOracle, OcrOracle, VisionOcrOracle, create_ocr_oracle
from kassa.runtime.paths import ProjectPaths, get_paths, reset_paths
from kassa.runtime.storage import (
    SqlCategoryLearningStore,
    SqlTransactionRecorder,
    create_db_engine,
    create_session_factory,
)

__all__ = [
    # Logging
    "get_logger",
    "configure_logging",
    "set_log_level",
    "DEFAULT_LOG_LEVEL",
    "LOG_FORMAT",
    "LOG_FORMAT_DEBUG",
    # Rules
    "load_category_vocabulary",
    # OCR
    "OcrOracle",
    "HttpOcrOracle",
    "VisionOcrOracle",
    "create_ocr_oracle",
    # Storage
    "SqlCategoryLearningStore",
    "SqlTransactionRecorder",
    "create_db_engine",
    "create_session_factory",
    # Paths
    "get_paths",
    "reset_paths",
    "ProjectPaths",
]
