from sqlmodel.ext.asyncio.session import AsyncSession

from campus_identity.adapter.repositories.account_repository import AccountRepository
from campus_identity.adapter.repositories.audit_event_repository import AuditEventRepository
from campus_identity.adapter.repositories.credential_binding_repository import (
    CredentialBindingRepository,
)
from campus_identity.adapter.repositories.password_reset_token_repository import (
    PasswordResetTokenRepository,
)
from campus_identity.adapter.repositories.student_profile_repository import (
    StudentProfileRepository,
)
from campus_identity.adapter.repositories.verification_token_repository import (
    VerificationTokenRepository,
)
from campus_identity.app.services.unit_of_work import UnitOfWork


class SqlAlchemyUnitOfWork(UnitOfWork):
    """SQLAlchemy implementation of UnitOfWork pattern"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def __aenter__(self):
        # Initialize all repositories with the session
        self.accounts = AccountRepository(self.session)
        self.student_profiles = StudentProfileRepository(self.session)
        self.credential_bindings = CredentialBindingRepository(self.session)
        self.verification_tokens = VerificationTokenRepository(self.session)
        self.password_reset_tokens = PasswordResetTokenRepository(self.session)
        self.audit_events = AuditEventRepository(self.session)
        return self

    async def __aexit__(self, *args):
        # Anything not committed inside the block is discarded
        await self.rollback()

    async def commit(self):
        await self.session.commit()

    async def rollback(self):
        await self.session.rollback()
