from abc import ABC, abstractmethod

from campus_identity.domain.entities import CredentialBinding


class ICredentialBindingRepository(ABC):
    """CredentialBinding repository interface - application layer"""

    @abstractmethod
    async def create(self, binding: CredentialBinding) -> CredentialBinding:
        """Create a new credential binding"""
        pass
