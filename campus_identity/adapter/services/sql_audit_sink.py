"""
Audit sink writing AuditEvent rows in a session of its own, so a failed
audit write can never roll back the caller's work.
"""

from typing import Any, Callable, Dict, Optional
from uuid import UUID

from sqlmodel.ext.asyncio.session import AsyncSession

from campus_identity.adapter.repositories.audit_event_repository import AuditEventRepository
from campus_identity.app.services.audit_sink import AuditSink
from campus_identity.app.services.clock import Clock
from campus_identity.domain.entities import AuditEvent


class SqlAuditSink(AuditSink):
    def __init__(self, session_factory: Callable[[], AsyncSession], clock: Clock):
        self.session_factory = session_factory
        self.clock = clock

    async def record(
        self,
        action: str,
        account_id: Optional[UUID] = None,
        subject: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        async with self.session_factory() as session:
            await AuditEventRepository(session).create(
                AuditEvent(
                    account_id=account_id,
                    subject=subject,
                    action=action,
                    event_metadata=metadata or {},
                    created_at=self.clock.now(),
                )
            )
            await session.commit()
