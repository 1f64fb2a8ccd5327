"""
Password Reset Use Case DTOs (Data Transfer Objects)
"""

from typing import Optional

from pydantic import BaseModel


class ConfirmPasswordResetCommand(BaseModel):
    """New password submission carrying the reset link parameters"""

    token: str
    encoded_identifier: Optional[str] = None
    password: str
    confirm_password: str


class RequestPasswordResetResponse(BaseModel):
    """Response for request password reset use case"""

    status: str
    message: str


class PasswordResetLinkResponse(BaseModel):
    """Response for reset link verification use case"""

    valid: bool
    email: str


class ConfirmPasswordResetResponse(BaseModel):
    """Response for confirm password reset use case"""

    status: str
    message: str
