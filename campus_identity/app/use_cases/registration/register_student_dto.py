"""
Student Registration DTOs (Data Transfer Objects)

Command/Response pattern for clean architecture separation:
- RegisterStudentCommand: Input to use case (the applicant's identity claim)
- RegistrationResponse: Output from use case (structured result)
"""

from typing import Optional

from pydantic import BaseModel


class RegisterStudentCommand(BaseModel):
    """
    Registration command - the applicant's identity claim.

    Fields default to empty so the use case can report every missing
    field in one validation error instead of failing on the first.
    """

    matric_number: str = ""
    jamb_reg_number: Optional[str] = None
    nin: Optional[str] = None

    surname: str = ""
    first_name: str = ""
    other_name: Optional[str] = None
    gender: str = ""
    marital_status: str = ""

    college: str = ""
    department: str = ""
    course: str = ""
    state: str = ""
    lga: str = ""

    email: str = ""
    phone: str = ""
    passport_url: Optional[str] = None

    password: str = ""


class AccountInfo(BaseModel):
    """Account information in registration response"""

    id: str
    email: str
    role: str
    active: bool


class StudentProfileInfo(BaseModel):
    """Non-sensitive profile information in registration response"""

    id: str
    matric_number: str
    college: str
    department: str
    course: str


class RegistrationResponse(BaseModel):
    """
    Registration response - structured output from use case

    requires_verification is always True: the account stays inactive
    until the emailed link is redeemed.
    """

    account: AccountInfo
    student: StudentProfileInfo
    requires_verification: bool
    verification_email_sent: bool
