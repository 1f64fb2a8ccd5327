from dataclasses import dataclass
from datetime import timedelta


@dataclass(frozen=True)
class RegistrationSettings:
    """Pipeline settings resolved once from ApplicationConfig at startup"""

    base_url: str = "http://localhost:3000"
    verification_path: str = "/auth/verify-email/verify"
    password_reset_path: str = "/auth/reset-password"
    signin_path: str = "/auth/signin"

    verification_token_ttl: timedelta = timedelta(hours=24)
    password_reset_token_ttl: timedelta = timedelta(hours=1)
    # 0 disables reuse: every issue() supersedes the previous token
    verification_reuse_cooldown: timedelta = timedelta(0)
    enforce_link_identifier: bool = True

    resend_window_minutes: int = 15
    resend_max_attempts: int = 3

    notification_timeout_seconds: float = 10.0

    matric_number_pattern: str = r"^[A-Z0-9][A-Z0-9/\-]{3,31}$"
    jamb_number_pattern: str = r"^[A-Z0-9]{8,16}$"

    @classmethod
    def from_config(cls, config) -> "RegistrationSettings":
        return cls(
            base_url=config.APP_BASE_URL.rstrip("/"),
            verification_token_ttl=timedelta(hours=config.VERIFICATION_TOKEN_TTL_HOURS),
            password_reset_token_ttl=timedelta(
                minutes=config.PASSWORD_RESET_TOKEN_TTL_MINUTES
            ),
            verification_reuse_cooldown=timedelta(
                minutes=config.VERIFICATION_REUSE_COOLDOWN_MINUTES
            ),
            enforce_link_identifier=config.ENFORCE_LINK_IDENTIFIER,
            resend_window_minutes=config.RESEND_WINDOW_MINUTES,
            resend_max_attempts=config.RESEND_MAX_ATTEMPTS,
            notification_timeout_seconds=config.NOTIFICATION_TIMEOUT_SECONDS,
            matric_number_pattern=config.MATRIC_NUMBER_PATTERN,
            jamb_number_pattern=config.JAMB_NUMBER_PATTERN,
        )
