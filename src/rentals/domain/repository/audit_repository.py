"""Abstract repository for the audit trail.  Entries are append-only."""

from __future__ import annotations

from abc import ABC, abstractmethod

from rentals.domain.model.audit import AuditEntry


class AuditRepository(ABC):

    @abstractmethod
    def add(self, entry: AuditEntry) -> AuditEntry:
        """Persist a new entry and return it with its ID assigned."""

    @abstractmethod
    def list_for_entity(self, entity: str, entity_id: int) -> list[AuditEntry]:
        """Return the entries about one entity, oldest first."""
