"""
Campus Identity Domain Enums

All enumeration types used across domain entities.
"""

from enum import Enum


class AccountRole(str, Enum):
    """Portal role of an account"""

    student = "student"
    teacher = "teacher"
    admin = "admin"


class Gender(str, Enum):
    """Fixed gender vocabulary; unknown input normalizes to OTHER"""

    MALE = "MALE"
    FEMALE = "FEMALE"
    OTHER = "OTHER"


class MaritalStatus(str, Enum):
    """Fixed marital status vocabulary; unknown input normalizes to SINGLE"""

    SINGLE = "SINGLE"
    MARRIED = "MARRIED"
    DIVORCED = "DIVORCED"
    WIDOWED = "WIDOWED"


class AuditAction(str, Enum):
    """Actions recorded in the audit log"""

    STUDENT_REGISTERED = "STUDENT_REGISTERED"
    VERIFICATION_EMAIL_SENT = "VERIFICATION_EMAIL_SENT"
    VERIFICATION_EMAIL_FAILED = "VERIFICATION_EMAIL_FAILED"
    RESEND_VERIFICATION_REQUESTED = "RESEND_VERIFICATION_REQUESTED"
    EMAIL_VERIFIED = "EMAIL_VERIFIED"
    PASSWORD_RESET_REQUESTED = "PASSWORD_RESET_REQUESTED"
    PASSWORD_RESET_COMPLETED = "PASSWORD_RESET_COMPLETED"
