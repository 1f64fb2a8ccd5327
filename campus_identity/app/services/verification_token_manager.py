"""
Verification Token Manager

Token lifecycle per identifier:

    NoToken -> Issued -> Redeemed | Expired | Superseded

All methods run inside the caller's UnitOfWork transaction; the caller
commits. Deleting the identifier's tokens and inserting the new one in the
same transaction, together with the unique identifier column, keeps at most
one live token per identifier.
"""

import hmac
import math
import secrets
from datetime import timedelta
from typing import Optional
from uuid import UUID

from libs.result import Error, Result, Return
from campus_identity.app.services.clock import Clock
from campus_identity.app.services.link_codec import LinkCodec
from campus_identity.app.services.unit_of_work import UnitOfWork
from campus_identity.domain.entities import AuditAction, AuditEvent, VerificationToken

INVALID_LINK_MESSAGE = "This verification link is invalid or has expired"


def expired_or_invalid() -> Error:
    return Error("EXPIRED_OR_INVALID", INVALID_LINK_MESSAGE)


def link_mismatch() -> Error:
    return Error("LINK_MISMATCH", INVALID_LINK_MESSAGE)


class VerificationTokenManager:
    def __init__(
        self,
        codec: LinkCodec,
        clock: Clock,
        ttl: timedelta = timedelta(hours=24),
        reuse_cooldown: timedelta = timedelta(0),
        enforce_link_identifier: bool = True,
    ):
        self.codec = codec
        self.clock = clock
        self.ttl = ttl
        self.reuse_cooldown = reuse_cooldown
        self.enforce_link_identifier = enforce_link_identifier

    async def issue(self, uow: UnitOfWork, identifier: str) -> str:
        """
        Issue a fresh token for an identifier, superseding any previous one.

        With a reuse cooldown configured, a live token younger than the
        cooldown is returned unchanged instead.
        """
        now = self.clock.now()

        if self.reuse_cooldown > timedelta(0):
            existing = await uow.verification_tokens.get_by_identifier(identifier)
            if (
                existing is not None
                and existing.expires_at > now
                and now - existing.created_at < self.reuse_cooldown
            ):
                return existing.token

        await uow.verification_tokens.delete_by_identifier(identifier)

        token = secrets.token_urlsafe(32)
        await uow.verification_tokens.create(
            VerificationToken(
                identifier=identifier,
                token=token,
                created_at=now,
                expires_at=now + self.ttl,
            )
        )
        return token

    def build_link(self, base_url: str, path: str, identifier: str, token: str) -> str:
        return f"{base_url.rstrip('/')}{path}?{self.codec.build_params(identifier, token)}"

    async def redeem(
        self, uow: UnitOfWork, token: str, encoded_identifier: Optional[str] = None
    ) -> Result[str]:
        """
        Consume a token and return the identifier it belongs to.

        Errors:
            - EXPIRED_OR_INVALID: unknown, already used, or expired token
            - LINK_MISMATCH: identifier missing (when enforced), undecodable,
              or different from the token's owner
        """
        record = await uow.verification_tokens.get_by_token(token)
        if record is None:
            return Return.err(expired_or_invalid())

        if record.expires_at <= self.clock.now():
            await uow.verification_tokens.delete(record)
            return Return.err(expired_or_invalid())

        if encoded_identifier is None:
            if self.enforce_link_identifier:
                return Return.err(link_mismatch())
        else:
            try:
                claimed = self.codec.decode_identifier(encoded_identifier)
            except ValueError:
                return Return.err(link_mismatch())
            if not hmac.compare_digest(
                claimed.encode("utf-8"), record.identifier.encode("utf-8")
            ):
                return Return.err(link_mismatch())

        await uow.verification_tokens.delete(record)
        return Return.ok(record.identifier)

    async def invalidate(self, uow: UnitOfWork, identifier: str) -> int:
        return await uow.verification_tokens.delete_by_identifier(identifier)

    async def resend_with_rate_limit(
        self,
        uow: UnitOfWork,
        identifier: str,
        window_minutes: int,
        max_attempts: int,
        account_id: Optional[UUID] = None,
    ) -> Result[str]:
        """
        Issue a new token unless the identifier already used its resends.

        Prior resends are the RESEND_VERIFICATION_REQUESTED audit events for
        the identifier in the trailing window. A granted resend appends one.

        Errors:
            - RATE_LIMITED: details carry retry_after_seconds
        """
        now = self.clock.now()
        window = timedelta(minutes=window_minutes)

        recent = await uow.audit_events.list_recent(
            identifier, AuditAction.RESEND_VERIFICATION_REQUESTED.value, now - window
        )
        if len(recent) >= max_attempts:
            reopens_at = recent[0].created_at + window
            retry_after = max(1, math.ceil((reopens_at - now).total_seconds()))
            return Return.err(
                Error(
                    "RATE_LIMITED",
                    "Too many verification requests. Please try again later.",
                    {"retry_after_seconds": retry_after},
                )
            )

        await uow.audit_events.create(
            AuditEvent(
                account_id=account_id,
                subject=identifier,
                action=AuditAction.RESEND_VERIFICATION_REQUESTED.value,
                event_metadata={"attempt": len(recent) + 1},
                created_at=now,
            )
        )

        token = await self.issue(uow, identifier)
        return Return.ok(token)

    async def purge_expired(self, uow: UnitOfWork) -> int:
        """Expiry sweep"""
        return await uow.verification_tokens.delete_expired(self.clock.now())
