from datetime import datetime
from typing import List

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from campus_identity.app.repositories.audit_event_repository import IAuditEventRepository
from campus_identity.domain.entities import AuditEvent


class AuditEventRepository(IAuditEventRepository):
    """AuditEvent repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, audit_event: AuditEvent) -> AuditEvent:
        """Create a new audit event (immutable)"""
        self.session.add(audit_event)
        await self.session.flush()
        await self.session.refresh(audit_event)
        return audit_event

    async def list_recent(
        self, subject: str, action: str, since: datetime
    ) -> List[AuditEvent]:
        """Get events of one action for a subject since a point in time, oldest first"""
        stmt = (
            select(AuditEvent)
            .where(
                AuditEvent.subject == subject,
                AuditEvent.action == action,
                AuditEvent.created_at >= since,
            )
            .order_by(AuditEvent.created_at.asc())
        )
        result = await self.session.exec(stmt)
        return list(result.all())
