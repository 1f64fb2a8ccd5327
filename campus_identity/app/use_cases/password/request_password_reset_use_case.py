"""
Request Password Reset Use Case

Handles generating and emailing password reset links.
"""

import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from libs.result import Error, Result, Return
from campus_identity.app.services.clock import Clock
from campus_identity.app.services.data_protection import mask_email, normalize_email
from campus_identity.app.services.notification_gateway import NotificationGateway, deliver
from campus_identity.app.services.password_reset_token_manager import PasswordResetTokenManager
from campus_identity.app.services.unit_of_work import UnitOfWork
from campus_identity.app.settings import RegistrationSettings
from campus_identity.domain.entities import AuditAction, AuditEvent
from .dtos import RequestPasswordResetResponse

logger = logging.getLogger(__name__)

RESET_TEMPLATE = "password-reset"
GENERIC_SENT_MESSAGE = "If the email exists, a password reset link has been sent"


class RequestPasswordResetUseCase:
    """
    Use case for requesting password reset.

    Business Rules:
    - No email enumeration (same response for unknown emails)
    - Inactive (unverified) accounts cannot reset: ACCOUNT_INACTIVE
    - A new token supersedes the account's previous reset token
    - Only the SHA-256 hash of the token is stored
    - Audit event recorded in the same transaction
    - Undelivered email discards the token: NOTIFICATION_FAILED
    - A concurrent request for the same account: RATE_LIMITED
    """

    def __init__(
        self,
        uow: UnitOfWork,
        token_manager: PasswordResetTokenManager,
        gateway: NotificationGateway,
        clock: Clock,
        settings: RegistrationSettings,
    ):
        self.uow = uow
        self.token_manager = token_manager
        self.gateway = gateway
        self.clock = clock
        self.settings = settings

    async def execute(self, email: str) -> Result[RequestPasswordResetResponse]:
        """
        Errors:
            - ACCOUNT_INACTIVE: email not verified yet
            - NOTIFICATION_FAILED: reset email could not be delivered
            - RATE_LIMITED: another reset for the account committed first
        """
        email = normalize_email(email)

        try:
            async with self.uow:
                account = await self.uow.accounts.get_by_email(email)
                if account is None:
                    return Return.ok(
                        RequestPasswordResetResponse(status="sent", message=GENERIC_SENT_MESSAGE)
                    )

                if not account.active:
                    return Return.err(
                        Error(
                            "ACCOUNT_INACTIVE",
                            "Please verify your email address before resetting your password",
                        )
                    )

                token = await self.token_manager.issue(self.uow, account.id)

                await self.uow.audit_events.create(
                    AuditEvent(
                        account_id=account.id,
                        subject=account.email,
                        action=AuditAction.PASSWORD_RESET_REQUESTED.value,
                        event_metadata={"email": account.email},
                        created_at=self.clock.now(),
                    )
                )

                await self.uow.commit()
        except IntegrityError:
            # Another reset for the same account committed first
            return Return.err(
                Error(
                    "RATE_LIMITED",
                    "A password reset was just requested. Please try again shortly.",
                    {"retry_after_seconds": 60},
                )
            )

        link = self.token_manager.build_link(
            self.settings.base_url, self.settings.password_reset_path, account.email, token
        )
        delivered = await deliver(
            self.gateway,
            account.email,
            RESET_TEMPLATE,
            {
                "name": account.name or "Student",
                "reset_link": link,
                "expires_in_minutes": int(
                    self.settings.password_reset_token_ttl.total_seconds() // 60
                ),
                "base_url": self.settings.base_url,
            },
            self.settings.notification_timeout_seconds,
        )
        if not delivered:
            await self._discard_token(account.id, account.email)
            return Return.err(
                Error(
                    "NOTIFICATION_FAILED",
                    "Password reset email could not be sent. Please try again later.",
                )
            )

        return Return.ok(
            RequestPasswordResetResponse(status="sent", message=GENERIC_SENT_MESSAGE)
        )

    async def _discard_token(self, account_id, email: str) -> None:
        try:
            async with self.uow:
                await self.token_manager.invalidate(self.uow, account_id)
                await self.uow.commit()
        except SQLAlchemyError:
            logger.exception("Could not discard reset token for %s", mask_email(email))
            return
        logger.warning("Reset email to %s not delivered, token discarded", mask_email(email))
