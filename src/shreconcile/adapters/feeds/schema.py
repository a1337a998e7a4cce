"""Pydantic models describing the affiliation and company-mapping feeds."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, TypeAdapter, field_validator


def _none_to_blank(value: object) -> object:
    return "" if value is None else value


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


class FeedBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class GitHubUserPayload(FeedBaseModel):
    """One entry of ``github_users.json``."""

    login: str = ""
    email: str = ""
    affiliation: str = ""
    name: str = ""
    country_id: str | None = None
    sex: str | None = None
    tz: str | None = None
    sex_prob: float | None = None

    _normalize_text = field_validator("login", "email", "affiliation", "name", mode="before")(
        _none_to_blank
    )
    _normalize_optional = field_validator("country_id", "sex", "tz", mode="before")(
        _blank_to_none
    )


class AcquisitionsPayload(FeedBaseModel):
    """``companies.yaml``: ordered ``[pattern, result]`` pairs."""

    acquisitions: list[tuple[str, str]] = []

    @field_validator("acquisitions", mode="before")
    @classmethod
    def _null_to_empty(cls, value: object) -> object:
        return [] if value is None else value


GitHubUsersAdapter: TypeAdapter[list[GitHubUserPayload]] = TypeAdapter(list[GitHubUserPayload])
