import os
import yaml

ROOT_PATH = os.path.dirname(__file__)
CONFIG_FILE_PATH = os.path.join(ROOT_PATH, "env.yaml")

if os.path.exists(CONFIG_FILE_PATH):
    with open(CONFIG_FILE_PATH, "r") as r_file:
        data = yaml.safe_load(r_file) or dict()
else:
    data = dict()


class ApplicationConfig:
    DB_URI = data.get("DB_URI", "sqlite+aiosqlite:///./campus_identity.db")
    API_PREFIX = data.get("API_PREFIX", "/api")
    API_PORT = data.get("API_PORT", 8000)
    API_HOST = data.get("API_HOST", "0.0.0.0")
    CORS_ORIGINS = data.get("CORS_ORIGINS", [])
    CORS_ALLOW_CREDENTIALS = data.get("CORS_ALLOW_CREDENTIALS", True)
    LOG_LEVEL = data.get("LOG_LEVEL", "INFO")

    # Links in outgoing emails
    APP_BASE_URL = data.get("APP_BASE_URL", "http://localhost:3000")

    # Field encryption, search hashes and link stamps
    DATA_PROTECTION_SECRET = data.get(
        "DATA_PROTECTION_SECRET", "dev-data-protection-secret-change-in-production"
    )
    BCRYPT_ROUNDS = int(data.get("BCRYPT_ROUNDS", 12))

    VERIFICATION_TOKEN_TTL_HOURS = int(data.get("VERIFICATION_TOKEN_TTL_HOURS", 24))
    PASSWORD_RESET_TOKEN_TTL_MINUTES = int(data.get("PASSWORD_RESET_TOKEN_TTL_MINUTES", 60))
    VERIFICATION_REUSE_COOLDOWN_MINUTES = int(
        data.get("VERIFICATION_REUSE_COOLDOWN_MINUTES", 0)
    )
    ENFORCE_LINK_IDENTIFIER = bool(data.get("ENFORCE_LINK_IDENTIFIER", True))
    RESEND_WINDOW_MINUTES = int(data.get("RESEND_WINDOW_MINUTES", 15))
    RESEND_MAX_ATTEMPTS = int(data.get("RESEND_MAX_ATTEMPTS", 3))
    LINK_STAMP_WINDOW_SECONDS = int(data.get("LINK_STAMP_WINDOW_SECONDS", 3600))

    PASSWORD_MIN_LENGTH = int(data.get("PASSWORD_MIN_LENGTH", 8))
    PASSWORD_REQUIRE_SPECIAL = bool(data.get("PASSWORD_REQUIRE_SPECIAL", False))
    PASSWORD_BLOCK_COMMON = bool(data.get("PASSWORD_BLOCK_COMMON", True))

    MATRIC_NUMBER_PATTERN = data.get("MATRIC_NUMBER_PATTERN", r"^[A-Z0-9][A-Z0-9/\-]{3,31}$")
    JAMB_NUMBER_PATTERN = data.get("JAMB_NUMBER_PATTERN", r"^[A-Z0-9]{8,16}$")

    # Notifications: "console" logs messages, "smtp" delivers them
    NOTIFICATION_BACKEND = data.get("NOTIFICATION_BACKEND", "console")
    # Development only: console backend logs full links at DEBUG
    NOTIFICATION_CONSOLE_SHOW_LINKS = bool(data.get("NOTIFICATION_CONSOLE_SHOW_LINKS", False))
    NOTIFICATION_TIMEOUT_SECONDS = float(data.get("NOTIFICATION_TIMEOUT_SECONDS", 10))
    SMTP_HOST = data.get("SMTP_HOST", "localhost")
    SMTP_PORT = int(data.get("SMTP_PORT", 587))
    SMTP_USER = data.get("SMTP_USER", "")
    SMTP_PASSWORD = data.get("SMTP_PASSWORD", "")
    SMTP_USE_TLS = bool(data.get("SMTP_USE_TLS", True))
    EMAIL_FROM = data.get("EMAIL_FROM", "no-reply@localhost")
    EMAIL_FROM_NAME = data.get("EMAIL_FROM_NAME", "Student Portal")
