"""SQLAlchemy adapter package for identity stores."""

from __future__ import annotations

from .mappings import TABLES_BY_NAME, create_all_tables, metadata
from .repositories import SqlAlchemyAffiliationRepository, SqlAlchemySnapshotRepository
from .unit_of_work import (
    SqlAlchemyStoreUnitOfWork,
    StartupError,
    StoreRepositories,
    build_engine,
    check_connection,
    configured_engine,
    is_started,
    shutdown,
    startup,
)

__all__ = [
    "TABLES_BY_NAME",
    "SqlAlchemyAffiliationRepository",
    "SqlAlchemySnapshotRepository",
    "SqlAlchemyStoreUnitOfWork",
    "StartupError",
    "StoreRepositories",
    "build_engine",
    "check_connection",
    "configured_engine",
    "create_all_tables",
    "is_started",
    "metadata",
    "shutdown",
    "startup",
]
