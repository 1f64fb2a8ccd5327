"""
Registration Use Cases

Student registration, record lookup, email verification and resend.
"""

from .register_student_use_case import RegisterStudentUseCase
from .register_student_dto import (
    AccountInfo,
    RegisterStudentCommand,
    RegistrationResponse,
    StudentProfileInfo,
)
from .lookup_student_use_case import LookupStudentUseCase
from .verify_email_use_case import VerifyEmailUseCase
from .resend_verification_use_case import ResendVerificationUseCase
from .dtos import (
    ResendVerificationResponse,
    StudentVerificationData,
    VerificationResult,
    VerifyEmailCommand,
    VerifyEmailResponse,
)

__all__ = [
    # Use Cases
    "RegisterStudentUseCase",
    "LookupStudentUseCase",
    "VerifyEmailUseCase",
    "ResendVerificationUseCase",
    # DTOs - Commands
    "RegisterStudentCommand",
    "VerifyEmailCommand",
    # DTOs - Responses
    "RegistrationResponse",
    "VerificationResult",
    "VerifyEmailResponse",
    "ResendVerificationResponse",
    # DTOs - Nested Models
    "AccountInfo",
    "StudentProfileInfo",
    "StudentVerificationData",
]
