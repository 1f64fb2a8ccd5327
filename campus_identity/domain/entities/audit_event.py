"""
AuditEvent Entity

Immutable log of registration, verification and reset actions.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, JSON, SQLModel

from ..base import utc_now


class AuditEvent(SQLModel, table=True):
    """
    AuditEvent entity - immutable append-only log.

    Business Rules:
    - Immutable (never updated or deleted)
    - subject is the identifier the event concerns (e.g. contact email),
      used to count resend requests per identifier
    - Metadata stores structured detail of the action
    """

    __tablename__ = "audit_events"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    account_id: Optional[UUID] = Field(default=None, index=True)
    subject: Optional[str] = Field(default=None, max_length=255)

    action: str = Field(max_length=100)  # e.g., "EMAIL_VERIFIED"
    event_metadata: Optional[dict] = Field(default=None, sa_column=Column(JSON))

    # Timestamps
    created_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime))

    __table_args__ = (
        Index("idx_audit_created_at", "created_at"),
        Index("idx_audit_subject_action", "subject", "action"),
    )
