"""Read feed documents from disk, or over HTTP when the local copy is missing."""

from __future__ import annotations

from logging import getLogger
from pathlib import Path
from typing import TYPE_CHECKING

import httpx
import yaml
from pydantic import ValidationError

from .schema import AcquisitionsPayload, GitHubUsersAdapter
from .translator import translate_acquisitions, translate_github_users

if TYPE_CHECKING:
    from collections.abc import Callable

    from shreconcile.config.feeds import FeedSource
    from shreconcile.domain.model import AcquisitionRule, AffiliationRecord

log = getLogger(__name__)

type HttpGet = Callable[..., httpx.Response]


class FeedLoadError(RuntimeError):
    """Raised when a feed cannot be fetched or does not match its schema."""

    def __init__(self, message: str, *, location: str) -> None:
        super().__init__(f"{location}: {message}")
        self.location = location


def read_feed_body(source: FeedSource, *, http_get: HttpGet = httpx.get) -> bytes:
    """Return the raw document, preferring the local file over the remote URL."""

    path = Path(source.local_path)
    try:
        body = path.read_bytes()
    except FileNotFoundError:
        log.info("%s not found, fetching %s", path, source.remote_url)
    else:
        log.info("Read %d bytes from %s", len(body), path)
        return body

    try:
        response = http_get(
            source.remote_url, timeout=source.timeout_seconds, follow_redirects=True
        )
        response.raise_for_status()
    except httpx.HTTPError as exc:
        raise FeedLoadError(str(exc), location=source.remote_url) from exc
    log.info("Fetched %d bytes from %s", len(response.content), source.remote_url)
    return response.content


def load_affiliation_records(
    source: FeedSource, *, http_get: HttpGet = httpx.get
) -> list[AffiliationRecord]:
    body = read_feed_body(source, http_get=http_get)
    try:
        payloads = GitHubUsersAdapter.validate_json(body)
    except ValidationError as exc:
        raise FeedLoadError(str(exc), location=source.local_path) from exc
    records = translate_github_users(payloads)
    log.info("Loaded %d affiliation records", len(records))
    return records


def load_acquisition_rules(
    source: FeedSource, *, http_get: HttpGet = httpx.get
) -> list[AcquisitionRule]:
    body = read_feed_body(source, http_get=http_get)
    try:
        document = yaml.safe_load(body)
        payload = AcquisitionsPayload.model_validate(document or {})
    except (yaml.YAMLError, ValidationError) as exc:
        raise FeedLoadError(str(exc), location=source.local_path) from exc
    rules = translate_acquisitions(payload)
    log.info("Loaded %d acquisition rules", len(rules))
    return rules
