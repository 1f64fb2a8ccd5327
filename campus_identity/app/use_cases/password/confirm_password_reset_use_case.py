"""
Confirm Password Reset Use Case

Sets a new password through a valid reset link.
"""

import asyncio
import logging

from libs.result import Error, Result, Return
from campus_identity.app.services.clock import Clock
from campus_identity.app.services.data_protection import mask_email
from campus_identity.app.services.notification_gateway import NotificationGateway, deliver
from campus_identity.app.services.password_policy import PasswordHasher, PasswordPolicy
from campus_identity.app.services.password_reset_token_manager import PasswordResetTokenManager
from campus_identity.app.services.unit_of_work import UnitOfWork
from campus_identity.app.settings import RegistrationSettings
from campus_identity.domain.entities import AuditAction, AuditEvent
from .dtos import ConfirmPasswordResetCommand, ConfirmPasswordResetResponse

logger = logging.getLogger(__name__)

CONFIRMATION_TEMPLATE = "password-reset-confirmation"


class ConfirmPasswordResetUseCase:
    """
    Use case for confirming password reset.

    Business Rules:
    - New password must satisfy the password policy
    - password and confirm_password must match
    - New password must differ from the current one
    - Token and link identifier must resolve to a live reset token
    - Password hash and password_changed_at are rotated
    - All reset tokens of the account are deleted in the same transaction
    - Audit event recorded; confirmation email is best effort
    """

    def __init__(
        self,
        uow: UnitOfWork,
        token_manager: PasswordResetTokenManager,
        hasher: PasswordHasher,
        policy: PasswordPolicy,
        gateway: NotificationGateway,
        clock: Clock,
        settings: RegistrationSettings,
    ):
        self.uow = uow
        self.token_manager = token_manager
        self.hasher = hasher
        self.policy = policy
        self.gateway = gateway
        self.clock = clock
        self.settings = settings

    async def execute(
        self, command: ConfirmPasswordResetCommand
    ) -> Result[ConfirmPasswordResetResponse]:
        """
        Errors:
            - VALIDATION_ERROR: policy violations or confirmation mismatch
            - EXPIRED_OR_INVALID / LINK_MISMATCH: bad reset link
        """
        violations = [
            {"field": "password", "message": message}
            for message in self.policy.validate(command.password).violations
        ]
        if command.password != command.confirm_password:
            violations.append(
                {"field": "confirm_password", "message": "Passwords do not match"}
            )
        if violations:
            return Return.err(
                Error("VALIDATION_ERROR", "New password is invalid", {"violations": violations})
            )

        async with self.uow:
            resolved = await self.token_manager.resolve(
                self.uow, command.token, command.encoded_identifier
            )
            if resolved.is_err():
                return Return.err(resolved.error)
            account = resolved.value.account

            if await asyncio.to_thread(
                self.hasher.verify, command.password, account.password_hash
            ):
                return Return.err(
                    Error(
                        "VALIDATION_ERROR",
                        "New password must be different from your current password",
                        {
                            "violations": [
                                {
                                    "field": "password",
                                    "message": "New password must be different from your current password",
                                }
                            ]
                        },
                    )
                )

            now = self.clock.now()
            account.password_hash = await asyncio.to_thread(self.hasher.hash, command.password)
            account.password_changed_at = now
            await self.uow.accounts.update(account)

            await self.token_manager.invalidate(self.uow, account.id)

            await self.uow.audit_events.create(
                AuditEvent(
                    account_id=account.id,
                    subject=account.email,
                    action=AuditAction.PASSWORD_RESET_COMPLETED.value,
                    event_metadata={"email": account.email},
                    created_at=now,
                )
            )

            await self.uow.commit()

        logger.info("Password reset completed for %s", mask_email(account.email))
        await deliver(
            self.gateway,
            account.email,
            CONFIRMATION_TEMPLATE,
            {
                "name": account.name or "Student",
                "signin_link": f"{self.settings.base_url}{self.settings.signin_path}",
                "base_url": self.settings.base_url,
            },
            self.settings.notification_timeout_seconds,
        )

        return Return.ok(
            ConfirmPasswordResetResponse(
                status="success", message="Password has been reset successfully"
            )
        )
