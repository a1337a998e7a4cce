"""Fatal domain errors.

Anything raised from here aborts the whole run; advisory conditions are only
logged by the services that detect them.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from shreconcile.domain.model import OrganizationId


class ReconciliationError(RuntimeError):
    """Base class for errors that abort a reconciliation or import run."""


class UnresolvedOrganizationError(ReconciliationError):
    """Raised when an organization reference cannot be resolved."""

    def __init__(
        self,
        *,
        organization: str | OrganizationId,
        context: str,
    ) -> None:
        self.organization = organization
        self.context = context
        super().__init__(f"Organization {organization!r} cannot be resolved ({context})")


class AcquisitionRuleError(ReconciliationError):
    """Raised when the company acquisition rule set is inconsistent."""


class AffiliationFormatError(ReconciliationError):
    """Raised when an affiliation history cannot be parsed."""
