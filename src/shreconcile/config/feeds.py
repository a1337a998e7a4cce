"""Locations of the external affiliation and company-mapping feeds."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

from .env import env_or_default

DEFAULT_LOCAL_JSON_PATH: Final[str] = "github_users.json"
DEFAULT_REMOTE_JSON_PATH: Final[str] = (
    "https://raw.githubusercontent.com/cncf/devstats/master/github_users.json"
)
DEFAULT_LOCAL_YAML_PATH: Final[str] = "companies.yaml"
DEFAULT_REMOTE_YAML_PATH: Final[str] = (
    "https://raw.githubusercontent.com/cncf/devstats/master/companies.yaml"
)
DEFAULT_FEED_TIMEOUT_SECONDS: Final[float] = 60.0


@dataclass(frozen=True, slots=True)
class FeedSource:
    """A local file, with a remote URL used when the file does not exist."""

    local_path: str
    remote_url: str
    timeout_seconds: float = DEFAULT_FEED_TIMEOUT_SECONDS


@dataclass(frozen=True, slots=True)
class FeedConfig:
    affiliations: FeedSource
    acquisitions: FeedSource


def get_feed_config() -> FeedConfig:
    return FeedConfig(
        affiliations=FeedSource(
            local_path=env_or_default("SH_LOCAL_JSON_PATH", DEFAULT_LOCAL_JSON_PATH),
            remote_url=env_or_default("SH_REMOTE_JSON_PATH", DEFAULT_REMOTE_JSON_PATH),
        ),
        acquisitions=FeedSource(
            local_path=env_or_default("SH_LOCAL_YAML_PATH", DEFAULT_LOCAL_YAML_PATH),
            remote_url=env_or_default("SH_REMOTE_YAML_PATH", DEFAULT_REMOTE_YAML_PATH),
        ),
    )
