"""
VerificationToken Entity

Single-use email verification tokens.
"""

from datetime import datetime
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from ..base import utc_now


class VerificationToken(SQLModel, table=True):
    """
    VerificationToken entity - proves control of an email address.

    Business Rules:
    - At most one live token per identifier (unique identifier column)
    - Expires after 24 hours by default
    - Deleted on redemption, on dispatch failure, or by the expiry sweep
    """

    __tablename__ = "verification_tokens"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    identifier: str = Field(unique=True, index=True, max_length=255)
    token: str = Field(unique=True, index=True, max_length=64)

    # Timestamps
    created_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime))
    expires_at: datetime = Field(sa_column=Column(DateTime))

    __table_args__ = (Index("idx_verification_expires_at", "expires_at"),)
