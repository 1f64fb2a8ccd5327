"""
Verification email dispatch.

Issuing the token and sending the email are separate steps: the token is
committed in its own transaction, then the email goes out with no
transaction open. A failed send deletes the token so no unusable token
lingers; the account itself is never touched here.
"""

import logging

from sqlalchemy.exc import SQLAlchemyError

from campus_identity.app.services.data_protection import mask_email
from campus_identity.app.services.notification_gateway import NotificationGateway, deliver
from campus_identity.app.services.unit_of_work import UnitOfWork
from campus_identity.app.services.verification_token_manager import VerificationTokenManager
from campus_identity.app.settings import RegistrationSettings

logger = logging.getLogger(__name__)

VERIFICATION_TEMPLATE = "email-verification"


class VerificationEmailSender:
    def __init__(
        self,
        uow: UnitOfWork,
        token_manager: VerificationTokenManager,
        gateway: NotificationGateway,
        settings: RegistrationSettings,
    ):
        self.uow = uow
        self.token_manager = token_manager
        self.gateway = gateway
        self.settings = settings

    async def issue_token(self, identifier: str) -> str:
        async with self.uow:
            token = await self.token_manager.issue(self.uow, identifier)
            await self.uow.commit()
        return token

    async def send(self, identifier: str, name: str, token: str) -> bool:
        link = self.token_manager.build_link(
            self.settings.base_url, self.settings.verification_path, identifier, token
        )
        delivered = await deliver(
            self.gateway,
            identifier,
            VERIFICATION_TEMPLATE,
            {
                "name": name.strip() or "Student",
                "verification_link": link,
                "base_url": self.settings.base_url,
            },
            self.settings.notification_timeout_seconds,
        )
        if not delivered:
            await self._discard_token(identifier)
        return delivered

    async def _discard_token(self, identifier: str) -> None:
        try:
            async with self.uow:
                await self.token_manager.invalidate(self.uow, identifier)
                await self.uow.commit()
        except SQLAlchemyError:
            logger.exception("Could not discard token for %s", mask_email(identifier))
            return
        logger.warning(
            "Verification email to %s not delivered, token discarded",
            mask_email(identifier),
        )
