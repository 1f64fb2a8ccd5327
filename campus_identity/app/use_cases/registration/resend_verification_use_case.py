"""
Resend Verification Email Use Case

Issues a fresh verification link for an account that is still inactive,
limited to a few requests per identifier in a trailing window.
"""

import logging

from sqlalchemy.exc import IntegrityError

from libs.result import Error, Result, Return
from campus_identity.app.services.data_protection import mask_email, normalize_email
from campus_identity.app.services.notification_gateway import NotificationGateway
from campus_identity.app.services.unit_of_work import UnitOfWork
from campus_identity.app.services.verification_token_manager import VerificationTokenManager
from campus_identity.app.settings import RegistrationSettings
from .dtos import ResendVerificationResponse
from .verification_email import VerificationEmailSender

logger = logging.getLogger(__name__)

GENERIC_SENT_MESSAGE = "If the email exists, a verification link has been sent"


class ResendVerificationUseCase:
    """
    Use case for resending email verification.

    Business Rules:
    - Unknown email returns the generic "sent" response (no enumeration)
    - Active account returns ALREADY_VERIFIED
    - New token supersedes the previous one
    - At most resend_max_attempts per resend_window_minutes per identifier
    - Undelivered email discards the new token
    """

    def __init__(
        self,
        uow: UnitOfWork,
        token_manager: VerificationTokenManager,
        gateway: NotificationGateway,
        settings: RegistrationSettings,
    ):
        self.uow = uow
        self.token_manager = token_manager
        self.settings = settings
        self.emails = VerificationEmailSender(uow, token_manager, gateway, settings)

    async def execute(self, email: str) -> Result[ResendVerificationResponse]:
        """
        Errors:
            - ALREADY_VERIFIED: account is already active
            - RATE_LIMITED: details carry retry_after_seconds
            - NOTIFICATION_FAILED: email could not be delivered
        """
        email = normalize_email(email)

        try:
            async with self.uow:
                account = await self.uow.accounts.get_by_email(email)
                if account is None:
                    return Return.ok(
                        ResendVerificationResponse(status="sent", message=GENERIC_SENT_MESSAGE)
                    )

                if account.active:
                    return Return.err(
                        Error("ALREADY_VERIFIED", "Email is already verified")
                    )

                issued = await self.token_manager.resend_with_rate_limit(
                    self.uow,
                    account.email,
                    self.settings.resend_window_minutes,
                    self.settings.resend_max_attempts,
                    account_id=account.id,
                )
                if issued.is_err():
                    logger.warning("Resend rate limit reached for %s", mask_email(email))
                    return Return.err(issued.error)

                await self.uow.commit()
        except IntegrityError:
            # Another resend for the same identifier committed first
            return Return.err(
                Error(
                    "RATE_LIMITED",
                    "Too many verification requests. Please try again later.",
                    {"retry_after_seconds": 60},
                )
            )

        if not await self.emails.send(account.email, account.name, issued.value):
            return Return.err(
                Error(
                    "NOTIFICATION_FAILED",
                    "Verification email could not be sent. Please try again later.",
                )
            )

        return Return.ok(
            ResendVerificationResponse(status="sent", message=GENERIC_SENT_MESSAGE)
        )
