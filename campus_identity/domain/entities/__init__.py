"""
Campus Identity Domain Entities

All domain entities organized by model.
Each entity in its own file for better maintainability.
"""

# Export all enums
from .enums import (
    AccountRole,
    AuditAction,
    Gender,
    MaritalStatus,
)

# Export all entities
from .account import Account
from .student_profile import StudentProfile
from .credential_binding import CredentialBinding
from .verification_token import VerificationToken
from .password_reset_token import PasswordResetToken
from .audit_event import AuditEvent

__all__ = [
    # Enums
    "AccountRole",
    "AuditAction",
    "Gender",
    "MaritalStatus",
    # Entities
    "Account",
    "StudentProfile",
    "CredentialBinding",
    "VerificationToken",
    "PasswordResetToken",
    "AuditEvent",
]
