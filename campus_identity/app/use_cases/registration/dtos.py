"""
Registration Use Case DTOs (Data Transfer Objects)

Command and Response classes for lookup, verification and resend.
"""

from typing import Optional

from pydantic import BaseModel


class StudentVerificationData(BaseModel):
    """Decrypted profile subset used to pre-fill the registration form"""

    surname: str
    first_name: str
    other_name: Optional[str] = None
    gender: str
    jamb_reg_number: str
    photo: Optional[str] = None
    college: str
    department: str
    course: str
    state: str
    lga: str
    marital_status: str
    email: str
    phone: str


class VerificationResult(BaseModel):
    """Whether a student record exists for pre-fill or needs manual entry"""

    exists: bool
    data: Optional[StudentVerificationData] = None
    requires_manual_entry: Optional[bool] = None


class VerifyEmailCommand(BaseModel):
    """Parameters carried by a verification link"""

    token: str
    encoded_identifier: Optional[str] = None
    stamp: Optional[str] = None


class VerifyEmailResponse(BaseModel):
    """Response for email verification use case"""

    status: str
    message: str


class ResendVerificationResponse(BaseModel):
    """Response for resend verification email use case"""

    status: str
    message: str
