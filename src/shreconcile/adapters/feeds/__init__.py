"""Public interface for the affiliation and company-mapping feeds."""

from __future__ import annotations

from .loader import (
    FeedLoadError,
    load_acquisition_rules,
    load_affiliation_records,
    read_feed_body,
)
from .schema import AcquisitionsPayload, GitHubUserPayload
from .translator import translate_acquisitions, translate_github_user, translate_github_users

__all__ = [
    "AcquisitionsPayload",
    "FeedLoadError",
    "GitHubUserPayload",
    "load_acquisition_rules",
    "load_affiliation_records",
    "read_feed_body",
    "translate_acquisitions",
    "translate_github_user",
    "translate_github_users",
]
