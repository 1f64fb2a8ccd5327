from fastapi import Depends
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from campus_identity.adapter.services.console_notification_gateway import (
    ConsoleNotificationGateway,
)
from campus_identity.adapter.services.smtp_notification_gateway import SmtpNotificationGateway
from campus_identity.adapter.services.sql_audit_sink import SqlAuditSink
from campus_identity.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from campus_identity.app.services.audit_sink import AuditSink
from campus_identity.app.services.clock import Clock
from campus_identity.app.services.data_protection import DataProtector
from campus_identity.app.services.link_codec import LinkCodec
from campus_identity.app.services.notification_gateway import NotificationGateway
from campus_identity.app.services.password_policy import PasswordHasher, PasswordPolicy
from campus_identity.app.services.password_reset_token_manager import PasswordResetTokenManager
from campus_identity.app.services.verification_token_manager import VerificationTokenManager
from campus_identity.app.settings import RegistrationSettings

engine = create_async_engine(ApplicationConfig.DB_URI, echo=False, future=True)

AsyncSessionLocal = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
)

settings = RegistrationSettings.from_config(ApplicationConfig)
clock = Clock()
protector = DataProtector(ApplicationConfig.DATA_PROTECTION_SECRET)
hasher = PasswordHasher(rounds=ApplicationConfig.BCRYPT_ROUNDS)
policy = PasswordPolicy.default(
    min_length=ApplicationConfig.PASSWORD_MIN_LENGTH,
    require_special=ApplicationConfig.PASSWORD_REQUIRE_SPECIAL,
    block_common=ApplicationConfig.PASSWORD_BLOCK_COMMON,
)


def build_notification_gateway(config) -> NotificationGateway:
    if config.NOTIFICATION_BACKEND == "smtp":
        return SmtpNotificationGateway(
            host=config.SMTP_HOST,
            port=config.SMTP_PORT,
            from_email=config.EMAIL_FROM,
            from_name=config.EMAIL_FROM_NAME,
            username=config.SMTP_USER,
            password=config.SMTP_PASSWORD,
            use_tls=config.SMTP_USE_TLS,
        )
    return ConsoleNotificationGateway(show_links=config.NOTIFICATION_CONSOLE_SHOW_LINKS)


notification_gateway = build_notification_gateway(ApplicationConfig)


async def init_models():
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)


async def get_unit_of_work():
    async with AsyncSessionLocal() as session:
        yield SqlAlchemyUnitOfWork(session)


def get_settings() -> RegistrationSettings:
    return settings


def get_clock() -> Clock:
    return clock


def get_data_protector() -> DataProtector:
    return protector


def get_password_hasher() -> PasswordHasher:
    return hasher


def get_password_policy() -> PasswordPolicy:
    return policy


def get_notification_gateway() -> NotificationGateway:
    return notification_gateway


def get_audit_sink(clock: Clock = Depends(get_clock)) -> AuditSink:
    return SqlAuditSink(AsyncSessionLocal, clock)


def get_link_codec(clock: Clock = Depends(get_clock)) -> LinkCodec:
    return LinkCodec(
        ApplicationConfig.DATA_PROTECTION_SECRET,
        clock,
        stamp_window_seconds=ApplicationConfig.LINK_STAMP_WINDOW_SECONDS,
    )


def get_verification_token_manager(
    codec: LinkCodec = Depends(get_link_codec),
    clock: Clock = Depends(get_clock),
    settings: RegistrationSettings = Depends(get_settings),
) -> VerificationTokenManager:
    return VerificationTokenManager(
        codec,
        clock,
        ttl=settings.verification_token_ttl,
        reuse_cooldown=settings.verification_reuse_cooldown,
        enforce_link_identifier=settings.enforce_link_identifier,
    )


def get_password_reset_token_manager(
    codec: LinkCodec = Depends(get_link_codec),
    clock: Clock = Depends(get_clock),
    settings: RegistrationSettings = Depends(get_settings),
) -> PasswordResetTokenManager:
    return PasswordResetTokenManager(
        codec,
        clock,
        ttl=settings.password_reset_token_ttl,
        enforce_link_identifier=settings.enforce_link_identifier,
    )
