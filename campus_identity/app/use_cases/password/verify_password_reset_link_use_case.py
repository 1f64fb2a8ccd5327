"""
Verify Password Reset Link Use Case

Checks a reset link before the new-password form is shown. The token is
not consumed.
"""

from typing import Optional

from libs.result import Result, Return
from campus_identity.app.services.password_reset_token_manager import PasswordResetTokenManager
from campus_identity.app.services.unit_of_work import UnitOfWork
from .dtos import PasswordResetLinkResponse


class VerifyPasswordResetLinkUseCase:
    def __init__(self, uow: UnitOfWork, token_manager: PasswordResetTokenManager):
        self.uow = uow
        self.token_manager = token_manager

    async def execute(
        self, token: str, encoded_identifier: Optional[str] = None
    ) -> Result[PasswordResetLinkResponse]:
        async with self.uow:
            resolved = await self.token_manager.resolve(self.uow, token, encoded_identifier)
            if resolved.is_err():
                return Return.err(resolved.error)

            return Return.ok(
                PasswordResetLinkResponse(valid=True, email=resolved.value.account.email)
            )
