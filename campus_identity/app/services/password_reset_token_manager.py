"""
Password Reset Token Manager

Reset tokens are keyed by account. Only the SHA-256 hash of the secret is
stored; the secret itself travels in the reset link.
"""

import hashlib
import hmac
import secrets
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional
from uuid import UUID

from libs.result import Error, Result, Return
from campus_identity.app.services.clock import Clock
from campus_identity.app.services.link_codec import LinkCodec
from campus_identity.app.services.unit_of_work import UnitOfWork
from campus_identity.domain.entities import Account, PasswordResetToken

INVALID_RESET_LINK_MESSAGE = "This password reset link is invalid or has expired"


def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


@dataclass
class ResolvedResetToken:
    token: PasswordResetToken
    account: Account


class PasswordResetTokenManager:
    def __init__(
        self,
        codec: LinkCodec,
        clock: Clock,
        ttl: timedelta = timedelta(hours=1),
        enforce_link_identifier: bool = True,
    ):
        self.codec = codec
        self.clock = clock
        self.ttl = ttl
        self.enforce_link_identifier = enforce_link_identifier

    async def issue(self, uow: UnitOfWork, account_id: UUID) -> str:
        """Supersede the account's previous reset token and issue a new one"""
        now = self.clock.now()
        await uow.password_reset_tokens.delete_by_account_id(account_id)

        token = secrets.token_urlsafe(32)
        await uow.password_reset_tokens.create(
            PasswordResetToken(
                account_id=account_id,
                token_hash=hash_token(token),
                created_at=now,
                expires_at=now + self.ttl,
            )
        )
        return token

    def build_link(self, base_url: str, path: str, identifier: str, token: str) -> str:
        return f"{base_url.rstrip('/')}{path}?{self.codec.build_params(identifier, token)}"

    async def resolve(
        self, uow: UnitOfWork, token: str, encoded_identifier: Optional[str] = None
    ) -> Result[ResolvedResetToken]:
        """
        Look up a live reset token and its account without consuming it.

        Errors:
            - EXPIRED_OR_INVALID: unknown or expired token, or missing account
            - LINK_MISMATCH: identifier missing (when enforced), undecodable,
              or not the account's email
        """
        invalid = Error("EXPIRED_OR_INVALID", INVALID_RESET_LINK_MESSAGE)

        record = await uow.password_reset_tokens.get_by_token_hash(hash_token(token))
        if record is None or record.expires_at <= self.clock.now():
            return Return.err(invalid)

        account = await uow.accounts.get_by_id(record.account_id)
        if account is None:
            return Return.err(invalid)

        mismatch = Error("LINK_MISMATCH", INVALID_RESET_LINK_MESSAGE)
        if encoded_identifier is None:
            if self.enforce_link_identifier:
                return Return.err(mismatch)
        else:
            try:
                claimed = self.codec.decode_identifier(encoded_identifier)
            except ValueError:
                return Return.err(mismatch)
            if not hmac.compare_digest(
                claimed.encode("utf-8"), account.email.encode("utf-8")
            ):
                return Return.err(mismatch)

        return Return.ok(ResolvedResetToken(token=record, account=account))

    async def invalidate(self, uow: UnitOfWork, account_id: UUID) -> int:
        return await uow.password_reset_tokens.delete_by_account_id(account_id)

    async def purge_expired(self, uow: UnitOfWork) -> int:
        """Expiry sweep"""
        return await uow.password_reset_tokens.delete_expired(self.clock.now())
