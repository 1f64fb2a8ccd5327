"""
Verify Email Use Case

Redeems a verification link and activates the account it was issued for.
"""

import logging

from libs.result import Result, Return
from campus_identity.app.services.clock import Clock
from campus_identity.app.services.data_protection import mask_email
from campus_identity.app.services.link_codec import LinkCodec
from campus_identity.app.services.notification_gateway import NotificationGateway, deliver
from campus_identity.app.services.unit_of_work import UnitOfWork
from campus_identity.app.services.verification_token_manager import (
    VerificationTokenManager,
    expired_or_invalid,
)
from campus_identity.app.settings import RegistrationSettings
from campus_identity.domain.entities import Account, AuditAction, AuditEvent
from .dtos import VerifyEmailCommand, VerifyEmailResponse

logger = logging.getLogger(__name__)

WELCOME_TEMPLATE = "welcome-student"


class VerifyEmailUseCase:
    """
    Use case for email verification.

    Business Rules:
    - Token must exist, be unexpired and belong to the identifier in the link
    - Token is single-use: redeeming deletes it
    - Sets active = True and email_verified_at
    - Records EMAIL_VERIFIED audit event in the same transaction
    - Welcome email afterwards is best effort
    """

    def __init__(
        self,
        uow: UnitOfWork,
        token_manager: VerificationTokenManager,
        codec: LinkCodec,
        gateway: NotificationGateway,
        clock: Clock,
        settings: RegistrationSettings,
    ):
        self.uow = uow
        self.token_manager = token_manager
        self.codec = codec
        self.gateway = gateway
        self.clock = clock
        self.settings = settings

    async def execute(self, command: VerifyEmailCommand) -> Result[VerifyEmailResponse]:
        """
        Errors:
            - EXPIRED_OR_INVALID: unknown, used or expired token
            - LINK_MISMATCH: link identifier does not match the token
        """
        if command.stamp is not None and not self.codec.stamp_is_fresh(command.stamp):
            logger.info("Verification link presented with a stale integrity stamp")

        async with self.uow:
            redeemed = await self.token_manager.redeem(
                self.uow, command.token, command.encoded_identifier
            )
            if redeemed.is_err():
                # Keeps the deletion of an expired token
                await self.uow.commit()
                return Return.err(redeemed.error)

            account = await self.uow.accounts.get_by_email(redeemed.value)
            if account is None:
                return Return.err(expired_or_invalid())

            if account.active:
                await self.uow.commit()
                return Return.ok(
                    VerifyEmailResponse(status="verified", message="Email is already verified")
                )

            now = self.clock.now()
            account.active = True
            account.email_verified_at = now
            await self.uow.accounts.update(account)

            await self.uow.audit_events.create(
                AuditEvent(
                    account_id=account.id,
                    subject=account.email,
                    action=AuditAction.EMAIL_VERIFIED.value,
                    event_metadata={"email": account.email},
                    created_at=now,
                )
            )

            await self.uow.commit()

        logger.info("Email verified for %s", mask_email(account.email))
        await self._send_welcome(account)

        return Return.ok(
            VerifyEmailResponse(status="verified", message="Email successfully verified")
        )

    async def _send_welcome(self, account: Account) -> None:
        base_url = self.settings.base_url
        await deliver(
            self.gateway,
            account.email,
            WELCOME_TEMPLATE,
            {
                "name": account.name or "Student",
                "signin_link": f"{base_url}{self.settings.signin_path}",
                "base_url": base_url,
            },
            self.settings.notification_timeout_seconds,
        )
