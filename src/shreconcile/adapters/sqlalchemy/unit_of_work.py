"""SQLAlchemy engine lifecycle and the identity store unit of work."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, Literal

from sqlalchemy import create_engine, text
from sqlalchemy.orm import Session, sessionmaker

from shreconcile.config.storage import get_database_config

from .mappings import create_all_tables
from .repositories import SqlAlchemyAffiliationRepository, SqlAlchemySnapshotRepository

if TYPE_CHECKING:
    from types import TracebackType

    from sqlalchemy.engine import Engine

    from shreconcile.config.storage import DatabaseConfig

log = getLogger(__name__)


class StartupError(RuntimeError):
    """A store unit of work was requested without a configured engine or session."""


@dataclass(slots=True)
class _AdapterState:
    _engine: Engine | None = None
    _session_factory: sessionmaker[Session] | None = None

    @property
    def engine(self) -> Engine | None:
        return self._engine

    @engine.setter
    def engine(self, value: Engine | None) -> None:
        self._session_factory = None
        self._engine = value

    @property
    def session_factory(self) -> sessionmaker[Session]:
        if self._engine is None:
            raise StartupError(
                "SQLAlchemy adapter not initialised. Call shreconcile.adapters.sqlalchemy."
                "unit_of_work.startup() or pass an engine to the unit of work."
            )
        if self._session_factory is None:
            self._session_factory = sessionmaker(bind=self._engine, expire_on_commit=False)
        return self._session_factory


_STATE = _AdapterState()


def build_engine(config: DatabaseConfig) -> Engine:
    """Create an engine for one identity store."""

    log.debug("Creating engine for %s", config.redacted())
    return create_engine(config.uri, future=True, pool_pre_ping=True)


def check_connection(engine: Engine) -> None:
    """Open a connection and run a trivial query; errors propagate."""

    with engine.connect() as connection:
        connection.execute(text("SELECT 1"))
    log.info("Connected to %s", engine.url.render_as_string(hide_password=True))


def startup(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    create_schema: bool = False,
    force: bool = False,
) -> Engine:
    """Initialise the engine of the default (``SH``) store and its session factory."""

    if _STATE.engine is not None and not force:
        raise StartupError(
            "SQLAlchemy adapter already initialised. Pass force=True to reconfigure."
        )

    resolved_engine = engine or create_engine(
        database_uri or get_database_config().uri, future=True, pool_pre_ping=True
    )
    if create_schema:
        create_all_tables(resolved_engine)

    _STATE.engine = resolved_engine
    return resolved_engine


def configured_engine() -> Engine | None:
    """Engine of the default store, ``None`` before :func:`startup`."""

    return _STATE.engine


def is_started() -> bool:
    """Whether :func:`startup` has configured the default store."""

    return _STATE.engine is not None


def shutdown() -> None:
    """Dispose the default store engine; tests call this between cases."""

    if _STATE.engine is not None:
        _STATE.engine.dispose()
    _STATE.engine = None


@dataclass(slots=True)
class StoreRepositories:
    snapshots: SqlAlchemySnapshotRepository
    affiliations: SqlAlchemyAffiliationRepository


class SqlAlchemyStoreUnitOfWork:
    """Session scope over one identity store.

    Without an explicit engine the store configured by :func:`startup` is used,
    so two sources and a destination can be open side by side.
    """

    def __init__(self, engine: Engine | None = None, *, store: str = "store") -> None:
        if engine is None:
            self.session_factory: sessionmaker[Session] = _STATE.session_factory
        else:
            self.session_factory = sessionmaker(bind=engine, expire_on_commit=False)
        self.store = store
        self._session: Session | None = None
        self._repositories: StoreRepositories | None = None

    def _build_repositories(self, session: Session) -> StoreRepositories:
        return StoreRepositories(
            snapshots=SqlAlchemySnapshotRepository(session, store=self.store),
            affiliations=SqlAlchemyAffiliationRepository(session),
        )

    def __enter__(self) -> SqlAlchemyStoreUnitOfWork:
        self.session = self.session_factory()
        self._repositories = self._build_repositories(self.session)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        if exc_type is not None:
            self.rollback()
        self.session.close()
        self.session = None
        self._repositories = None
        return False

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()

    @property
    def repositories(self) -> StoreRepositories:
        if self._repositories is None:
            raise StartupError("Unit of work session not initialised")
        return self._repositories

    @property
    def session(self) -> Session:
        if self._session is None:
            raise StartupError("Unit of work session not initialised")
        return self._session

    @session.setter
    def session(self, session: Session | None) -> None:
        if self._session is not None and session is not None:
            raise StartupError("Unit of work session already initialised")
        self._session = session
