"""Organization cross-references.

Surrogate organization ids are local to one store, so rows are translated to
organization names on the way in and back to destination ids on the way out.
Both lookups fail hard: an unresolved reference means inconsistent data.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from shreconcile.domain.errors import UnresolvedOrganizationError

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from shreconcile.domain.model import OrganizationId


@dataclass(frozen=True, slots=True)
class OrganizationNames:
    """Surrogate id to name, within a single source store."""

    names_by_id: Mapping[OrganizationId, str]
    store: str = "source"

    def name_for(self, organization_id: OrganizationId, *, context: str) -> str:
        name = self.names_by_id.get(organization_id)
        if name is None:
            raise UnresolvedOrganizationError(
                organization=organization_id,
                context=f"{self.store}: {context}",
            )
        return name


@dataclass(frozen=True, slots=True)
class OrganizationIndex:
    """Lower-cased name to surrogate id in the destination store."""

    ids_by_name: Mapping[str, OrganizationId]

    @classmethod
    def from_rows(cls, rows: Iterable[tuple[OrganizationId, str]]) -> OrganizationIndex:
        return cls(ids_by_name={name.lower(): organization_id for organization_id, name in rows})

    def id_for(self, name: str, *, context: str) -> OrganizationId:
        organization_id = self.ids_by_name.get(name.lower())
        if organization_id is None:
            raise UnresolvedOrganizationError(organization=name, context=context)
        return organization_id

    def __len__(self) -> int:
        return len(self.ids_by_name)
