"""Application orchestration entry points."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from shreconcile.adapters.feeds import load_acquisition_rules, load_affiliation_records
from shreconcile.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyStoreUnitOfWork,
    StartupError,
    build_engine,
    check_connection,
    configured_engine,
    is_started,
    startup,
)
from shreconcile.config import (
    FIRST_SOURCE_PREFIX,
    SECOND_SOURCE_PREFIX,
    get_database_config,
    get_feed_config,
    get_run_config,
)
from shreconcile.domain.affiliations import CompanyNameMapper, import_affiliations
from shreconcile.domain.reconciliation import ReconciliationEngine

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy.engine import Engine

    from shreconcile.config import FeedConfig, RunConfig
    from shreconcile.domain.affiliations import AffiliationImportResult
    from shreconcile.domain.model import AcquisitionRule, AffiliationRecord
    from shreconcile.domain.reconciliation import ReconciliationResult

log = getLogger(__name__)


def _default_store_engine(engine: Engine | None) -> Engine:
    if engine is not None:
        return engine
    if not is_started():
        startup()
    resolved = configured_engine()
    if resolved is None:
        raise StartupError("No engine configured for the default store")
    return resolved


def merge_stores(
    *,
    run_config: RunConfig | None = None,
    first_engine: Engine | None = None,
    second_engine: Engine | None = None,
    destination_engine: Engine | None = None,
) -> ReconciliationResult | None:
    """Merge the ``SH1`` and ``SH2`` stores into the ``SH`` store.

    Returns ``None`` when only the connectivity check was requested.
    """

    config = run_config or get_run_config()
    owned: list[Engine] = []
    if first_engine is None:
        first_engine = build_engine(get_database_config(FIRST_SOURCE_PREFIX))
        owned.append(first_engine)
    if second_engine is None:
        second_engine = build_engine(get_database_config(SECOND_SOURCE_PREFIX))
        owned.append(second_engine)
    try:
        return _merge(config, first_engine, second_engine, destination_engine)
    finally:
        for engine in owned:
            engine.dispose()


def _merge(
    config: RunConfig,
    first: Engine,
    second: Engine,
    destination_engine: Engine | None,
) -> ReconciliationResult | None:
    destination = _default_store_engine(destination_engine)

    if config.test_connect:
        for engine in (first, second, destination):
            check_connection(engine)
        log.info("Connection test finished, nothing merged")
        return None

    log.info("Starting merge of two identity stores")
    with (
        SqlAlchemyStoreUnitOfWork(first, store="first source") as first_uow,
        SqlAlchemyStoreUnitOfWork(second, store="second source") as second_uow,
        SqlAlchemyStoreUnitOfWork(destination, store="destination") as destination_uow,
    ):
        engine = ReconciliationEngine(
            first=first_uow.repositories.snapshots,
            second=second_uow.repositories.snapshots,
            destination=destination_uow.repositories.snapshots,
            commit=destination_uow.commit,
        )
        result = engine.run()

    log.info(
        "Finished merge: %s",
        ", ".join(f"{outcome.table}={outcome.written}" for outcome in result.tables),
    )
    return result


def import_github_affiliations(
    *,
    run_config: RunConfig | None = None,
    feed_config: FeedConfig | None = None,
    engine: Engine | None = None,
    records: Sequence[AffiliationRecord] | None = None,
    rules: Sequence[AcquisitionRule] | None = None,
) -> AffiliationImportResult | None:
    """Import the GitHub affiliation feed into the ``SH`` store.

    Returns ``None`` when only the connectivity check was requested.
    """

    config = run_config or get_run_config()
    store_engine = _default_store_engine(engine)

    if config.test_connect:
        check_connection(store_engine)
        log.info("Connection test finished, nothing imported")
        return None

    feeds = feed_config or get_feed_config()
    if rules is None:
        rules = load_acquisition_rules(feeds.acquisitions)
    mapper = CompanyNameMapper.from_rules(rules)
    if records is None:
        records = load_affiliation_records(feeds.affiliations)

    log.info("Starting affiliation import: records=%d, cleanup=%s", len(records), config.cleanup)
    with SqlAlchemyStoreUnitOfWork(store_engine, store="affiliations") as uow:
        return import_affiliations(
            records,
            store=uow.repositories.affiliations,
            mapper=mapper,
            commit=uow.commit,
            cleanup=config.cleanup,
            batch_size=config.touch_batch_size,
        )
