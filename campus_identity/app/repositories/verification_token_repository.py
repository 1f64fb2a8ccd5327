from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from campus_identity.domain.entities import VerificationToken


class IVerificationTokenRepository(ABC):
    """VerificationToken repository interface - application layer"""

    @abstractmethod
    async def get_by_token(self, token: str) -> Optional[VerificationToken]:
        """Get verification token by its secret"""
        pass

    @abstractmethod
    async def get_by_identifier(self, identifier: str) -> Optional[VerificationToken]:
        """Get the token currently held by an identifier"""
        pass

    @abstractmethod
    async def create(self, token: VerificationToken) -> VerificationToken:
        """Create a new verification token"""
        pass

    @abstractmethod
    async def delete(self, token: VerificationToken) -> None:
        """Delete a single token"""
        pass

    @abstractmethod
    async def delete_by_identifier(self, identifier: str) -> int:
        """Delete every token of an identifier, returns number deleted"""
        pass

    @abstractmethod
    async def delete_expired(self, now: datetime) -> int:
        """Delete tokens whose expiry has passed, returns number deleted"""
        pass
