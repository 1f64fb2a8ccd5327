import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional
from uuid import UUID

logger = logging.getLogger(__name__)


class AuditSink(ABC):
    """Append-only audit port, written outside the caller's transaction"""

    @abstractmethod
    async def record(
        self,
        action: str,
        account_id: Optional[UUID] = None,
        subject: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Append an audit event; raises if the write failed"""
        pass


async def record_safely(
    sink: AuditSink,
    action: str,
    account_id: Optional[UUID] = None,
    subject: Optional[str] = None,
    metadata: Optional[Dict[str, Any]] = None,
) -> bool:
    """Best-effort audit write: failures are logged and never reach the caller"""
    try:
        await sink.record(action, account_id=account_id, subject=subject, metadata=metadata)
        return True
    except Exception:
        logger.exception("Audit event %s for account %s was not recorded", action, account_id)
        return False
