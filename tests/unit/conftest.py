import pytest
from unittest.mock import AsyncMock, MagicMock

from campus_identity.app.services.data_protection import DataProtector
from campus_identity.app.services.link_codec import LinkCodec
from campus_identity.app.services.password_policy import PasswordHasher, PasswordPolicy
from campus_identity.app.settings import RegistrationSettings
from tests.fixtures.fakes import FrozenClock, RecordingAuditSink, RecordingNotificationGateway

SECRET = "unit-test-data-protection-secret"


@pytest.fixture
def mock_uow():
    """Mock UnitOfWork with all repositories"""
    uow = MagicMock()
    uow.__aenter__ = AsyncMock(return_value=uow)
    uow.__aexit__ = AsyncMock(return_value=False)  # Must return False to not suppress exceptions
    uow.commit = AsyncMock()
    uow.rollback = AsyncMock()

    uow.accounts = MagicMock()
    uow.accounts.get_by_email = AsyncMock(return_value=None)
    uow.accounts.get_by_id = AsyncMock(return_value=None)
    uow.accounts.create = AsyncMock(side_effect=lambda account: account)
    uow.accounts.update = AsyncMock(side_effect=lambda account: account)

    uow.student_profiles = MagicMock()
    uow.student_profiles.find_matching = AsyncMock(return_value=[])
    uow.student_profiles.get_by_identifier = AsyncMock(return_value=None)
    uow.student_profiles.create = AsyncMock(side_effect=lambda profile: profile)
    uow.student_profiles.claim_unbound = AsyncMock()

    uow.credential_bindings = MagicMock()
    uow.credential_bindings.create = AsyncMock(side_effect=lambda binding: binding)

    uow.verification_tokens = MagicMock()
    uow.verification_tokens.get_by_token = AsyncMock(return_value=None)
    uow.verification_tokens.get_by_identifier = AsyncMock(return_value=None)
    uow.verification_tokens.create = AsyncMock(side_effect=lambda token: token)
    uow.verification_tokens.delete = AsyncMock()
    uow.verification_tokens.delete_by_identifier = AsyncMock(return_value=0)
    uow.verification_tokens.delete_expired = AsyncMock(return_value=0)

    uow.password_reset_tokens = MagicMock()
    uow.password_reset_tokens.create = AsyncMock(side_effect=lambda token: token)
    uow.password_reset_tokens.get_by_token_hash = AsyncMock(return_value=None)
    uow.password_reset_tokens.delete_by_account_id = AsyncMock(return_value=0)
    uow.password_reset_tokens.delete_expired = AsyncMock(return_value=0)

    uow.audit_events = MagicMock()
    uow.audit_events.create = AsyncMock(side_effect=lambda event: event)
    uow.audit_events.list_recent = AsyncMock(return_value=[])
    return uow


@pytest.fixture
def clock():
    return FrozenClock()


@pytest.fixture
def protector():
    return DataProtector(SECRET)


@pytest.fixture
def codec(clock):
    return LinkCodec(SECRET, clock)


@pytest.fixture
def hasher():
    # Lowest bcrypt cost keeps the suite fast
    return PasswordHasher(rounds=4)


@pytest.fixture
def policy():
    return PasswordPolicy.default()


@pytest.fixture
def settings():
    return RegistrationSettings(base_url="https://portal.example.edu")


@pytest.fixture
def gateway():
    return RecordingNotificationGateway()


@pytest.fixture
def audit_sink():
    return RecordingAuditSink()
