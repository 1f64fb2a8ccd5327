from abc import ABC, abstractmethod
from datetime import datetime
from typing import List

from campus_identity.domain.entities import AuditEvent


class IAuditEventRepository(ABC):
    """AuditEvent repository interface - application layer"""

    @abstractmethod
    async def create(self, audit_event: AuditEvent) -> AuditEvent:
        """Create a new audit event (immutable)"""
        pass

    @abstractmethod
    async def list_recent(
        self, subject: str, action: str, since: datetime
    ) -> List[AuditEvent]:
        """
        Get events of one action for a subject created at or after `since`.

        Returns:
            Events ordered by created_at ASC (oldest first)
        """
        pass
