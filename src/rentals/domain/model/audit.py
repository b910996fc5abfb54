"""Audit trail of booking transitions.

Every lifecycle change writes one entry in the same unit of work as the
change itself, so the trail never records something that did not happen.
``metadata`` holds JSON-friendly values only.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from rentals.domain.model.principal import Principal
from rentals.domain.model.value_objects import as_utc


class AuditAction(Enum):
    ORDER_CREATED = "ORDER_CREATED"
    ORDER_SENT = "ORDER_SENT"
    ORDER_CONFIRMED = "ORDER_CONFIRMED"
    ORDER_PICKED_UP = "ORDER_PICKED_UP"
    ORDER_RETURNED = "ORDER_RETURNED"
    ORDER_CANCELLED = "ORDER_CANCELLED"
    INVOICE_CREATED = "INVOICE_CREATED"
    INVOICE_POSTED = "INVOICE_POSTED"


ORDER = "Order"
INVOICE = "Invoice"


@dataclass(frozen=True)
class AuditEntry:

    id: int | None
    actor: str
    action: AuditAction
    entity: str
    entity_id: int
    metadata: dict[str, Any] = field(default_factory=dict)
    created_at: datetime | None = None

    @staticmethod
    def record(
        principal: Principal,
        action: AuditAction,
        entity: str,
        entity_id: int,
        at: datetime,
        **metadata: Any,
    ) -> AuditEntry:
        return AuditEntry(
            id=None,
            actor=str(principal),
            action=action,
            entity=entity,
            entity_id=entity_id,
            metadata=metadata,
            created_at=as_utc(at),
        )
