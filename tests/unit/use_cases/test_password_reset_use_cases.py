"""
Unit tests for the password reset use cases
"""
from datetime import timedelta
from urllib.parse import urlparse

import pytest
from sqlalchemy.exc import IntegrityError

from campus_identity.app.services.link_codec import LinkCodec
from campus_identity.app.services.password_reset_token_manager import (
    PasswordResetTokenManager,
    hash_token,
)
from campus_identity.app.use_cases.password import (
    ConfirmPasswordResetCommand,
    ConfirmPasswordResetUseCase,
    RequestPasswordResetUseCase,
    VerifyPasswordResetLinkUseCase,
)
from campus_identity.domain.entities import Account, AuditAction, PasswordResetToken
from tests.fixtures.fakes import RecordingNotificationGateway, link_params

EMAIL = "a@example.com"


@pytest.fixture
def manager(codec, clock):
    return PasswordResetTokenManager(codec, clock)


@pytest.fixture
def account(mock_uow, hasher):
    account = Account(
        email=EMAIL, name="Adeyemi Tolu", password_hash=hasher.hash("Abcd1234"), active=True
    )
    mock_uow.accounts.get_by_email.return_value = account
    mock_uow.accounts.get_by_id.return_value = account
    return account


@pytest.fixture
def live_reset_token(mock_uow, clock, account):
    mock_uow.password_reset_tokens.get_by_token_hash.return_value = PasswordResetToken(
        account_id=account.id,
        token_hash=hash_token("reset-token"),
        created_at=clock.now(),
        expires_at=clock.now() + timedelta(hours=1),
    )


def confirm_command(password="Newpass123", confirm_password=None, identifier=EMAIL):
    return ConfirmPasswordResetCommand(
        token="reset-token",
        encoded_identifier=LinkCodec.encode_identifier(identifier),
        password=password,
        confirm_password=password if confirm_password is None else confirm_password,
    )


@pytest.fixture
def confirm_use_case(mock_uow, manager, hasher, policy, gateway, clock, settings):
    return ConfirmPasswordResetUseCase(mock_uow, manager, hasher, policy, gateway, clock, settings)


@pytest.mark.asyncio
async def test_request_sends_reset_link(mock_uow, manager, gateway, clock, settings, account):
    use_case = RequestPasswordResetUseCase(mock_uow, manager, gateway, clock, settings)

    result = await use_case.execute("A@Example.com")

    assert result.is_ok()
    stored = mock_uow.password_reset_tokens.create.call_args[0][0]
    link = gateway.last("password-reset")["context"]["reset_link"]
    assert urlparse(link).path == "/auth/reset-password"
    params = link_params(link)
    assert hash_token(params["t"]) == stored.token_hash
    assert LinkCodec.decode_identifier(params["e"]) == EMAIL

    audit = mock_uow.audit_events.create.call_args[0][0]
    assert audit.action == AuditAction.PASSWORD_RESET_REQUESTED.value
    mock_uow.commit.assert_called_once()


@pytest.mark.asyncio
async def test_request_for_unknown_email(mock_uow, manager, gateway, clock, settings):
    use_case = RequestPasswordResetUseCase(mock_uow, manager, gateway, clock, settings)

    result = await use_case.execute("nobody@example.com")

    assert result.is_ok()
    assert result.value.status == "sent"
    mock_uow.password_reset_tokens.create.assert_not_called()
    assert gateway.sent == []


@pytest.mark.asyncio
async def test_request_for_inactive_account(mock_uow, manager, gateway, clock, settings, account):
    account.active = False
    use_case = RequestPasswordResetUseCase(mock_uow, manager, gateway, clock, settings)

    result = await use_case.execute(EMAIL)

    assert result.error.code == "ACCOUNT_INACTIVE"
    mock_uow.password_reset_tokens.create.assert_not_called()


@pytest.mark.asyncio
async def test_request_with_undelivered_email(mock_uow, manager, clock, settings, account):
    gateway = RecordingNotificationGateway(succeed=False)
    use_case = RequestPasswordResetUseCase(mock_uow, manager, gateway, clock, settings)

    result = await use_case.execute(EMAIL)

    assert result.error.code == "NOTIFICATION_FAILED"
    assert mock_uow.password_reset_tokens.delete_by_account_id.call_count == 2


@pytest.mark.asyncio
async def test_concurrent_request_is_rate_limited(
    mock_uow, manager, gateway, clock, settings, account
):
    mock_uow.password_reset_tokens.create.side_effect = IntegrityError(
        "INSERT INTO password_reset_tokens", {}, Exception("UNIQUE constraint failed")
    )
    use_case = RequestPasswordResetUseCase(mock_uow, manager, gateway, clock, settings)

    result = await use_case.execute(EMAIL)

    assert result.error.code == "RATE_LIMITED"
    assert result.error.details["retry_after_seconds"] == 60
    mock_uow.commit.assert_not_called()
    assert gateway.sent == []

@pytest.mark.asyncio
async def test_verify_link(mock_uow, manager, live_reset_token):
    use_case = VerifyPasswordResetLinkUseCase(mock_uow, manager)

    result = await use_case.execute("reset-token", LinkCodec.encode_identifier(EMAIL))

    assert result.is_ok()
    assert result.value.valid is True
    assert result.value.email == EMAIL


@pytest.mark.asyncio
async def test_verify_unknown_link(mock_uow, manager):
    use_case = VerifyPasswordResetLinkUseCase(mock_uow, manager)

    result = await use_case.execute("missing", LinkCodec.encode_identifier(EMAIL))

    assert result.error.code == "EXPIRED_OR_INVALID"


@pytest.mark.asyncio
async def test_confirm_resets_password(
    mock_uow, confirm_use_case, hasher, clock, gateway, account, live_reset_token
):
    result = await confirm_use_case.execute(confirm_command())

    assert result.is_ok()
    assert hasher.verify("Newpass123", account.password_hash)
    assert account.password_changed_at == clock.now()
    mock_uow.password_reset_tokens.delete_by_account_id.assert_called_once_with(account.id)

    audit = mock_uow.audit_events.create.call_args[0][0]
    assert audit.action == AuditAction.PASSWORD_RESET_COMPLETED.value
    mock_uow.commit.assert_called_once()
    assert gateway.last("password-reset-confirmation")["to"] == EMAIL


@pytest.mark.asyncio
async def test_confirm_rejects_mismatched_confirmation(mock_uow, confirm_use_case):
    result = await confirm_use_case.execute(confirm_command(confirm_password="Newpass124"))

    assert result.error.code == "VALIDATION_ERROR"
    assert result.error.details["violations"] == [
        {"field": "confirm_password", "message": "Passwords do not match"}
    ]
    mock_uow.password_reset_tokens.get_by_token_hash.assert_not_called()


@pytest.mark.asyncio
async def test_confirm_rejects_weak_password(confirm_use_case):
    result = await confirm_use_case.execute(confirm_command(password="short"))

    assert result.error.code == "VALIDATION_ERROR"
    messages = [violation["message"] for violation in result.error.details["violations"]]
    assert "Password must be at least 8 characters long" in messages


@pytest.mark.asyncio
async def test_confirm_rejects_current_password(
    mock_uow, confirm_use_case, account, live_reset_token
):
    result = await confirm_use_case.execute(confirm_command(password="Abcd1234"))

    assert result.error.code == "VALIDATION_ERROR"
    mock_uow.accounts.update.assert_not_called()
    mock_uow.commit.assert_not_called()


@pytest.mark.asyncio
async def test_confirm_with_substituted_identifier(
    mock_uow, confirm_use_case, account, live_reset_token
):
    result = await confirm_use_case.execute(confirm_command(identifier="b@example.com"))

    assert result.error.code == "LINK_MISMATCH"
    mock_uow.accounts.update.assert_not_called()
