"""Domain primitives: scalar aliases + small value objects."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Final

type Uuid = str
type CountryCode = str
type OrganizationId = int
type EnrollmentKey = tuple[Uuid, datetime, datetime]

BEGINNING_OF_TIME: Final[datetime] = datetime(1970, 1, 1, tzinfo=UTC)
END_OF_TIME: Final[datetime] = datetime(2099, 1, 1, tzinfo=UTC)
