"""Document-store implementation of AuditRepository."""

from __future__ import annotations

from dataclasses import replace

from rentals.domain.model.audit import AuditAction, AuditEntry
from rentals.domain.repository.audit_repository import AuditRepository
from rentals.infrastructure.persistence.document_store import StagedCollection
from rentals.infrastructure.persistence.serialization import datetime_from_raw, datetime_to_raw


class JsonAuditRepository(StagedCollection, AuditRepository):

    collection = "audit_log"

    def add(self, entry: AuditEntry) -> AuditEntry:
        stored = replace(entry, id=self._store.next_sequence(self.collection))
        self._put_raw(str(stored.id), self._to_raw(stored))
        return stored

    def list_for_entity(self, entity: str, entity_id: int) -> list[AuditEntry]:
        return [
            self._to_domain(raw)
            for raw in self._scan_raw()
            if raw["entity"] == entity and raw["entity_id"] == entity_id
        ]

    @staticmethod
    def _to_raw(entry: AuditEntry) -> dict:
        return {
            "id": entry.id,
            "actor": entry.actor,
            "action": entry.action.value,
            "entity": entry.entity,
            "entity_id": entry.entity_id,
            "metadata": dict(entry.metadata),
            "created_at": datetime_to_raw(entry.created_at),
        }

    @staticmethod
    def _to_domain(raw: dict) -> AuditEntry:
        return AuditEntry(
            id=raw["id"],
            actor=raw["actor"],
            action=AuditAction(raw["action"]),
            entity=raw["entity"],
            entity_id=raw["entity_id"],
            metadata=raw.get("metadata", {}),
            created_at=datetime_from_raw(raw["created_at"]),
        )
