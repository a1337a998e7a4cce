"""SQLAlchemy table metadata for the identity store schema.

The schema follows the Sorting Hat layout. Datetimes are stored naive and read
back as UTC-aware values.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Dialect,
    ForeignKey,
    Integer,
    MetaData,
    String,
    Table,
    TypeDecorator,
    UniqueConstraint,
)

from shreconcile.domain.model import Table as TableName

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=False)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            return value
        return value.astimezone(UTC).replace(tzinfo=None)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


metadata = MetaData(
    naming_convention={
        "ix": "ix_%(column_0_label)s",
        "uq": "uq_%(table_name)s_%(column_0_label)s",
        "ck": "ck_%(table_name)s_%(constraint_name)s",
        "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
        "pk": "pk_%(table_name)s",
    }
)

countries_table = Table(
    TableName.COUNTRIES.value,
    metadata,
    Column("code", String(2), primary_key=True),
    Column("name", String(191), nullable=False),
    Column("alpha3", String(3), nullable=False),
)

organizations_table = Table(
    TableName.ORGANIZATIONS.value,
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(191), nullable=False, unique=True),
)

domains_table = Table(
    TableName.DOMAINS.value,
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("domain", String(128), nullable=False, unique=True),
    Column("is_top_domain", Boolean, nullable=True),
    Column(
        "organization_id",
        Integer,
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=False,
    ),
)

blacklist_table = Table(
    TableName.BLACKLIST.value,
    metadata,
    Column("excluded", String(128), primary_key=True),
)

unique_identities_table = Table(
    TableName.UNIQUE_IDENTITIES.value,
    metadata,
    Column("uuid", String(128), primary_key=True),
    Column("last_modified", UTCDateTime(), nullable=True),
)

profiles_table = Table(
    TableName.PROFILES.value,
    metadata,
    Column(
        "uuid",
        String(128),
        ForeignKey("uidentities.uuid", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column("name", String(128), nullable=True),
    Column("email", String(128), nullable=True),
    Column("gender", String(32), nullable=True),
    Column("gender_acc", Integer, nullable=True),
    Column("is_bot", Boolean, nullable=True),
    Column(
        "country_code",
        String(2),
        ForeignKey("countries.code", ondelete="SET NULL"),
        nullable=True,
    ),
)

identities_table = Table(
    TableName.IDENTITIES.value,
    metadata,
    Column("id", String(128), primary_key=True),
    Column("name", String(128), nullable=True),
    Column("email", String(128), nullable=True),
    Column("username", String(128), nullable=True),
    Column("source", String(32), nullable=False),
    Column("uuid", String(128), ForeignKey("uidentities.uuid", ondelete="CASCADE")),
    Column("last_modified", UTCDateTime(), nullable=True),
)

enrollments_table = Table(
    TableName.ENROLLMENTS.value,
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("start", UTCDateTime(), nullable=False),
    Column("end", UTCDateTime(), nullable=False),
    Column(
        "uuid",
        String(128),
        ForeignKey("uidentities.uuid", ondelete="CASCADE"),
        nullable=False,
    ),
    Column(
        "organization_id",
        Integer,
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=False,
    ),
    UniqueConstraint("uuid", "organization_id", "start", "end"),
)

TABLES_BY_NAME: dict[TableName, Table] = {
    TableName.COUNTRIES: countries_table,
    TableName.ORGANIZATIONS: organizations_table,
    TableName.DOMAINS: domains_table,
    TableName.BLACKLIST: blacklist_table,
    TableName.UNIQUE_IDENTITIES: unique_identities_table,
    TableName.PROFILES: profiles_table,
    TableName.IDENTITIES: identities_table,
    TableName.ENROLLMENTS: enrollments_table,
}


def create_all_tables(engine: Engine) -> None:
    """Create any missing identity store tables (used for fresh and test stores)."""

    metadata.create_all(engine, checkfirst=True)
