"""Environment variable readers used by the configuration modules."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

from .errors import MissingConfigurationError

if TYPE_CHECKING:
    from collections.abc import Iterable


def _present(name: str) -> str | None:
    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    return value


def require_env_vars(names: Iterable[str]) -> dict[str, str]:
    """Values of all ``names``; blank counts as missing and every gap is reported at once."""

    found = {name: _present(name) for name in names}
    missing = sorted(name for name, value in found.items() if value is None)
    if missing:
        raise MissingConfigurationError(f"Missing configuration for: {', '.join(missing)}")
    return {name: value for name, value in found.items() if value is not None}


def require_env_var(name: str) -> str:
    return require_env_vars([name])[name]


def env_or_default(name: str, default: str) -> str:
    value = os.getenv(name)
    return default if not value else value


def env_flag(name: str) -> bool:
    """Flags are switched on by any non-empty value."""

    return bool(os.getenv(name))
