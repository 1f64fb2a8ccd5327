from sqlmodel.ext.asyncio.session import AsyncSession

from campus_identity.app.repositories.credential_binding_repository import (
    ICredentialBindingRepository,
)
from campus_identity.domain.entities import CredentialBinding


class CredentialBindingRepository(ICredentialBindingRepository):
    """CredentialBinding repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, binding: CredentialBinding) -> CredentialBinding:
        """Create a new credential binding"""
        self.session.add(binding)
        await self.session.flush()
        await self.session.refresh(binding)
        return binding
