from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional
from uuid import UUID

from campus_identity.domain.entities import PasswordResetToken


class IPasswordResetTokenRepository(ABC):
    """PasswordResetToken repository interface - application layer"""

    @abstractmethod
    async def create(self, token: PasswordResetToken) -> PasswordResetToken:
        """Create a new password reset token"""
        pass

    @abstractmethod
    async def get_by_token_hash(self, token_hash: str) -> Optional[PasswordResetToken]:
        """Get password reset token by token hash"""
        pass

    @abstractmethod
    async def delete_by_account_id(self, account_id: UUID) -> int:
        """Delete every reset token of an account, returns number deleted"""
        pass

    @abstractmethod
    async def delete_expired(self, now: datetime) -> int:
        """Delete tokens whose expiry has passed, returns number deleted"""
        pass
