"""Domain entities (business concepts independent of persistence)."""

from gatekeeper.domain.entities.tenant import TenantEntity

__all__ = ["TenantEntity"]
