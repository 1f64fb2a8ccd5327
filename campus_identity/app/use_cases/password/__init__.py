"""
Password Reset Use Cases
"""

from .request_password_reset_use_case import RequestPasswordResetUseCase
from .verify_password_reset_link_use_case import VerifyPasswordResetLinkUseCase
from .confirm_password_reset_use_case import ConfirmPasswordResetUseCase
from .dtos import (
    ConfirmPasswordResetCommand,
    ConfirmPasswordResetResponse,
    PasswordResetLinkResponse,
    RequestPasswordResetResponse,
)

__all__ = [
    "RequestPasswordResetUseCase",
    "VerifyPasswordResetLinkUseCase",
    "ConfirmPasswordResetUseCase",
    "ConfirmPasswordResetCommand",
    "ConfirmPasswordResetResponse",
    "PasswordResetLinkResponse",
    "RequestPasswordResetResponse",
]
