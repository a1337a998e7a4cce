"""Identity store connection configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Final

from sqlalchemy.engine import URL, make_url

from .env import env_or_default, require_env_var
from .errors import InvalidConfigurationError

DEFAULT_DRIVER: Final[str] = "mysql+mysqlconnector"
DEFAULT_USER: Final[str] = "shuser"
DEFAULT_PROTO: Final[str] = "tcp"
DEFAULT_HOST: Final[str] = "localhost"
DEFAULT_PORT: Final[str] = "3306"
DEFAULT_DB: Final[str] = "shdb"
DEFAULT_PARAMS: Final[str] = "?charset=utf8"
PROTOCOLS: Final[frozenset[str]] = frozenset({"tcp", "unix"})

DESTINATION_PREFIX: Final[str] = "SH"
FIRST_SOURCE_PREFIX: Final[str] = "SH1"
SECOND_SOURCE_PREFIX: Final[str] = "SH2"


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    uri: str

    def redacted(self) -> str:
        return make_url(self.uri).render_as_string(hide_password=True)


def _parse_params(params: str) -> dict[str, str]:
    if params == "-":
        return {}
    query: dict[str, str] = {}
    for pair in params.lstrip("?").split("&"):
        if not pair:
            continue
        key, _, value = pair.partition("=")
        query[key] = value
    return query


def _parse_port(name: str) -> int:
    value = env_or_default(name, DEFAULT_PORT)
    try:
        return int(value)
    except ValueError:
        raise InvalidConfigurationError(name, value, "a port number") from None


def get_database_config(prefix: str = DESTINATION_PREFIX) -> DatabaseConfig:
    """Build a connection URI from ``<prefix>_*`` environment variables.

    ``<prefix>_DSN`` wins when set. Otherwise the URI is assembled from the
    individual parts, where only ``<prefix>_PASS`` is required.
    """

    dsn = os.getenv(f"{prefix}_DSN")
    if dsn:
        return DatabaseConfig(uri=dsn)

    password = require_env_var(f"{prefix}_PASS")
    proto = env_or_default(f"{prefix}_PROTO", DEFAULT_PROTO)
    if proto not in PROTOCOLS:
        raise InvalidConfigurationError(f"{prefix}_PROTO", proto, "tcp or unix")
    host = env_or_default(f"{prefix}_HOST", DEFAULT_HOST)
    query = _parse_params(env_or_default(f"{prefix}_PARAMS", DEFAULT_PARAMS))

    url_host: str | None = host
    url_port: int | None = _parse_port(f"{prefix}_PORT")
    if proto == "unix":
        query["unix_socket"] = host
        url_host = None
        url_port = None

    url = URL.create(
        DEFAULT_DRIVER,
        username=env_or_default(f"{prefix}_USER", DEFAULT_USER),
        password=password,
        host=url_host,
        port=url_port,
        database=env_or_default(f"{prefix}_DB", DEFAULT_DB),
        query=query,
    )
    return DatabaseConfig(uri=url.render_as_string(hide_password=False))
