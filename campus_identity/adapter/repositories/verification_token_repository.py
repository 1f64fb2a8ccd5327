from datetime import datetime
from typing import Optional

from sqlmodel import delete, select
from sqlmodel.ext.asyncio.session import AsyncSession

from campus_identity.app.repositories.verification_token_repository import (
    IVerificationTokenRepository,
)
from campus_identity.domain.entities import VerificationToken


class VerificationTokenRepository(IVerificationTokenRepository):
    """VerificationToken repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_token(self, token: str) -> Optional[VerificationToken]:
        """Get verification token by its secret value"""
        stmt = select(VerificationToken).where(VerificationToken.token == token)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def get_by_identifier(self, identifier: str) -> Optional[VerificationToken]:
        """Get the live token of an identifier"""
        stmt = select(VerificationToken).where(VerificationToken.identifier == identifier)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def create(self, token: VerificationToken) -> VerificationToken:
        """Create a new verification token"""
        self.session.add(token)
        await self.session.flush()
        await self.session.refresh(token)
        return token

    async def delete(self, token: VerificationToken) -> None:
        """Delete a redeemed token"""
        await self.session.delete(token)
        await self.session.flush()

    async def delete_by_identifier(self, identifier: str) -> int:
        """Delete every token of an identifier"""
        stmt = delete(VerificationToken).where(VerificationToken.identifier == identifier)
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount

    async def delete_expired(self, now: datetime) -> int:
        """Delete tokens whose expiry has passed"""
        stmt = delete(VerificationToken).where(VerificationToken.expires_at <= now)
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount
