"""Best-effort audit trail for payroll actions."""

from __future__ import annotations

import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from caregiver_payroll.models import PayrollAuditEvent

logger = logging.getLogger(__name__)


def _jsonable(value: Any) -> Any:
    if isinstance(value, (Decimal, UUID)):
        return str(value)
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return value


class AuditTrail:
    """Writes audit events inside a savepoint.

    A failed write is logged and dropped: the savepoint rolls back alone and
    the surrounding payroll transaction carries on.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def record(
        self,
        action: str,
        entity_id: UUID,
        actor_id: UUID | None,
        details: dict[str, Any] | None = None,
        entity_type: str = "payroll_record",
    ) -> bool:
        """Write one audit event. Returns False if the write failed."""
        event = PayrollAuditEvent(
            actor_id=actor_id,
            entity_type=entity_type,
            entity_id=entity_id,
            action=action,
            details_json={k: _jsonable(v) for k, v in (details or {}).items()},
        )
        try:
            async with self.session.begin_nested():
                self.session.add(event)
        except SQLAlchemyError:
            logger.exception("Failed to write audit event %s for %s %s", action, entity_type, entity_id)
            return False
        return True
