from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine  # noqa: TC002
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from shreconcile.adapters.sqlalchemy import create_all_tables, shutdown

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator


def _memory_engine() -> Engine:
    # one shared connection, otherwise every session sees a fresh empty database
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        future=True,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    create_all_tables(engine)
    return engine


@pytest.fixture
def make_sqlite_engine() -> Iterator[Callable[[], Engine]]:
    engines: list[Engine] = []

    def factory() -> Engine:
        engine = _memory_engine()
        engines.append(engine)
        return engine

    try:
        yield factory
    finally:
        for engine in engines:
            engine.dispose()


@pytest.fixture
def sqlite_engine(make_sqlite_engine: Callable[[], Engine]) -> Engine:
    return make_sqlite_engine()


@pytest.fixture
def sqlite_session(sqlite_engine: Engine) -> Iterator[Session]:
    session_factory = sessionmaker(bind=sqlite_engine, future=True, expire_on_commit=False)
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(autouse=True)
def reset_adapter_state() -> Iterator[None]:
    shutdown()
    yield
    shutdown()
