"""
StudentProfile Entity

Role-specific record of a registered (or pre-seeded) student.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from ..base import utc_now
from .enums import Gender, MaritalStatus


class StudentProfile(SQLModel, table=True):
    """
    StudentProfile entity - linked 1:1 to an Account.

    Business Rules:
    - Operational fields (college, department, course) are stored plain
    - Protected fields are stored as ciphertext plus a search hash computed
      with the same classification used for encryption
    - matric_number and the JAMB/email/phone search hashes are unique
    - account_id is empty for pre-seeded records nobody has claimed yet
    """

    __tablename__ = "student_profiles"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    account_id: Optional[UUID] = Field(
        default=None, foreign_key="accounts.id", unique=True, index=True
    )

    # Primary identifier, uppercased
    matric_number: str = Field(unique=True, index=True, max_length=64)

    # Operational fields
    college: str = Field(default="", max_length=255)
    department: str = Field(default="", max_length=255)
    course: str = Field(default="", max_length=255)
    gender: Gender = Field(default=Gender.OTHER)
    marital_status: MaritalStatus = Field(default=MaritalStatus.SINGLE)
    passport_url: Optional[str] = Field(default=None, max_length=1024)

    # Protected fields: name
    surname_encrypted: Optional[str] = None
    surname_search_hash: Optional[str] = Field(default=None, max_length=64)
    first_name_encrypted: Optional[str] = None
    first_name_search_hash: Optional[str] = Field(default=None, max_length=64)
    other_name_encrypted: Optional[str] = None
    other_name_search_hash: Optional[str] = Field(default=None, max_length=64)

    # Protected fields: contact
    email_encrypted: Optional[str] = None
    email_search_hash: Optional[str] = Field(
        default=None, unique=True, index=True, max_length=64
    )
    phone_encrypted: Optional[str] = None
    phone_search_hash: Optional[str] = Field(
        default=None, unique=True, index=True, max_length=64
    )

    # Protected fields: government identifiers
    jamb_reg_number_encrypted: Optional[str] = None
    jamb_reg_search_hash: Optional[str] = Field(
        default=None, unique=True, index=True, max_length=64
    )
    nin_encrypted: Optional[str] = None
    nin_search_hash: Optional[str] = Field(default=None, index=True, max_length=64)

    # Protected fields: location
    state_encrypted: Optional[str] = None
    state_search_hash: Optional[str] = Field(default=None, max_length=64)
    lga_encrypted: Optional[str] = None
    lga_search_hash: Optional[str] = Field(default=None, max_length=64)

    created_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime))

    __table_args__ = (Index("idx_student_profile_department", "department"),)
