"""
CredentialBinding Entity

Binds an account to the credentials sign-in provider.
"""

from datetime import datetime
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from ..base import utc_now


class CredentialBinding(SQLModel, table=True):
    """
    CredentialBinding entity - authentication-binding record.

    Created in the same transaction as the Account it belongs to.
    """

    __tablename__ = "credential_bindings"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    account_id: UUID = Field(foreign_key="accounts.id", nullable=False, index=True)
    type: str = Field(default="credentials", max_length=50)
    provider: str = Field(default="credentials", max_length=50)
    provider_account_id: str = Field(max_length=255)

    created_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime))

    __table_args__ = (
        Index(
            "idx_credential_provider_account",
            "provider",
            "provider_account_id",
            unique=True,
        ),
    )
