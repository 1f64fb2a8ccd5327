from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional
from uuid import UUID

from campus_identity.domain.entities import StudentProfile


class IStudentProfileRepository(ABC):
    """StudentProfile repository interface - application layer"""

    @abstractmethod
    async def find_matching(
        self,
        matric_number: str,
        jamb_reg_search_hash: Optional[str],
        email_search_hash: Optional[str],
        phone_search_hash: Optional[str],
    ) -> List[StudentProfile]:
        """Get every profile matching ANY of the identifying attributes"""
        pass

    @abstractmethod
    async def get_by_identifier(
        self, matric_number: str, jamb_reg_search_hash: Optional[str]
    ) -> Optional[StudentProfile]:
        """Get profile by matric number or JAMB registration search hash"""
        pass

    @abstractmethod
    async def create(self, profile: StudentProfile) -> StudentProfile:
        """Create a new student profile"""
        pass

    @abstractmethod
    async def claim_unbound(
        self, profile_id: UUID, account_id: UUID, values: Dict[str, Any]
    ) -> Optional[StudentProfile]:
        """
        Bind a pre-seeded profile to an account and overwrite its fields.

        Only succeeds while the profile has no account; returns None when
        another registration bound it first.
        """
        pass
