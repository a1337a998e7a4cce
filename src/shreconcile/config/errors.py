"""Errors raised while reading configuration from the environment."""

from __future__ import annotations


class ConfigurationError(RuntimeError):
    """Base class for unusable configuration; aborts the run."""


class MissingConfigurationError(ConfigurationError):
    """One or more required environment variables are unset or blank."""


class InvalidConfigurationError(ConfigurationError):
    """An environment variable is set to a value that cannot be used."""

    def __init__(self, name: str, value: str, expected: str) -> None:
        super().__init__(f"{name}={value!r} is invalid, expected {expected}")
        self.name = name
        self.value = value
