"""
Account Entity

Login identity of a portal user.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from ..base import utc_now
from .enums import AccountRole


class Account(SQLModel, table=True):
    """
    Account entity - login identity of a portal user.

    Business Rules:
    - Email must be unique across all accounts (normalized lowercase)
    - Created inactive; activated only by email verification
    - Password stored as bcrypt hash
    - Never deleted by the registration pipeline
    """

    __tablename__ = "accounts"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    email: str = Field(unique=True, index=True, max_length=255)
    name: str = Field(default="", max_length=255)
    role: AccountRole = Field(default=AccountRole.student)

    active: bool = Field(default=False)
    password_hash: str = Field(max_length=60)  # Bcrypt output is 60 chars

    # Timestamps
    email_verified_at: Optional[datetime] = Field(
        default=None, sa_column=Column(DateTime)
    )
    password_changed_at: Optional[datetime] = Field(
        default=None, sa_column=Column(DateTime)
    )
    created_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime))

    __table_args__ = (Index("idx_account_active", "active"),)
