from abc import ABC, abstractmethod

from campus_identity.app.repositories.account_repository import IAccountRepository
from campus_identity.app.repositories.audit_event_repository import IAuditEventRepository
from campus_identity.app.repositories.credential_binding_repository import (
    ICredentialBindingRepository,
)
from campus_identity.app.repositories.password_reset_token_repository import (
    IPasswordResetTokenRepository,
)
from campus_identity.app.repositories.student_profile_repository import (
    IStudentProfileRepository,
)
from campus_identity.app.repositories.verification_token_repository import (
    IVerificationTokenRepository,
)


class UnitOfWork(ABC):
    """Abstract UnitOfWork - defines repository access and transaction management"""

    # Repository properties (initialized in __aenter__)
    accounts: IAccountRepository
    student_profiles: IStudentProfileRepository
    credential_bindings: ICredentialBindingRepository
    verification_tokens: IVerificationTokenRepository
    password_reset_tokens: IPasswordResetTokenRepository
    audit_events: IAuditEventRepository

    @abstractmethod
    async def __aenter__(self):
        pass

    @abstractmethod
    async def __aexit__(self, *args):
        pass

    @abstractmethod
    async def commit(self):
        pass

    @abstractmethod
    async def rollback(self):
        pass
