from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlmodel import or_, select, update
from sqlmodel.ext.asyncio.session import AsyncSession

from campus_identity.app.repositories.student_profile_repository import (
    IStudentProfileRepository,
)
from campus_identity.domain.entities import StudentProfile


class StudentProfileRepository(IStudentProfileRepository):
    """StudentProfile repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_matching(
        self,
        matric_number: str,
        jamb_reg_search_hash: Optional[str],
        email_search_hash: Optional[str],
        phone_search_hash: Optional[str],
    ) -> List[StudentProfile]:
        """Get every profile matching ANY of the identifying attributes"""
        conditions = [StudentProfile.matric_number == matric_number]
        if jamb_reg_search_hash:
            conditions.append(StudentProfile.jamb_reg_search_hash == jamb_reg_search_hash)
        if email_search_hash:
            conditions.append(StudentProfile.email_search_hash == email_search_hash)
        if phone_search_hash:
            conditions.append(StudentProfile.phone_search_hash == phone_search_hash)

        stmt = select(StudentProfile).where(or_(*conditions))
        result = await self.session.exec(stmt)
        return list(result.all())

    async def get_by_identifier(
        self, matric_number: str, jamb_reg_search_hash: Optional[str]
    ) -> Optional[StudentProfile]:
        """Get profile by matric number or JAMB registration search hash"""
        conditions = [StudentProfile.matric_number == matric_number]
        if jamb_reg_search_hash:
            conditions.append(StudentProfile.jamb_reg_search_hash == jamb_reg_search_hash)

        stmt = select(StudentProfile).where(or_(*conditions))
        result = await self.session.exec(stmt)
        return result.first()

    async def create(self, profile: StudentProfile) -> StudentProfile:
        """Create a new student profile"""
        self.session.add(profile)
        await self.session.flush()
        await self.session.refresh(profile)
        return profile

    async def claim_unbound(
        self, profile_id: UUID, account_id: UUID, values: Dict[str, Any]
    ) -> Optional[StudentProfile]:
        """
        Bind a pre-seeded profile to an account and overwrite its fields.

        The account_id IS NULL condition makes the claim a compare-and-set:
        of two concurrent claims only one updates a row.
        """
        stmt = (
            update(StudentProfile)
            .where(StudentProfile.id == profile_id, StudentProfile.account_id.is_(None))
            .values(account_id=account_id, **values)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        if result.rowcount != 1:
            return None

        await self.session.flush()
        profile = await self.session.get(StudentProfile, profile_id)
        await self.session.refresh(profile)
        return profile
