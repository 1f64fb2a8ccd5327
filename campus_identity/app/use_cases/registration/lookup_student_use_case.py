"""
Lookup Student Use Case

Lets an applicant check whether the institution already holds their record,
so the registration form can be pre-filled instead of typed in by hand.
"""

import logging

from libs.result import Error, Result, Return
from campus_identity.app.services.data_protection import (
    Classification,
    DataProtector,
    ProtectionError,
)
from campus_identity.app.services.unit_of_work import UnitOfWork
from campus_identity.domain.entities import StudentProfile
from .dtos import StudentVerificationData, VerificationResult
from .normalization import upper

logger = logging.getLogger(__name__)


class LookupStudentUseCase:
    """
    Use case for student record lookup.

    Business Rules:
    - Identifier is a matric number or a JAMB registration number
    - A record already bound to an account cannot be registered again
    - A pre-seeded record is returned decrypted for pre-fill
    - No record means the applicant enters everything manually
    """

    def __init__(self, uow: UnitOfWork, protector: DataProtector):
        self.uow = uow
        self.protector = protector

    async def execute(self, identifier: str) -> Result[VerificationResult]:
        """
        Errors:
            - VALIDATION_ERROR: empty identifier
            - ALREADY_EXISTS: record already registered
            - PROTECTION_ERROR: stored fields could not be decrypted
        """
        normalized = upper(identifier)
        if not normalized:
            return Return.err(
                Error(
                    "VALIDATION_ERROR",
                    "Matric number or JAMB registration number is required",
                    {"violations": [{"field": "identifier", "message": "Identifier is required"}]},
                )
            )

        jamb_hash = self.protector.search_hash(normalized, Classification.GOVERNMENT_ID)

        # Rows loaded here are expired once the unit of work exits
        async with self.uow:
            profile = await self.uow.student_profiles.get_by_identifier(normalized, jamb_hash)

            if profile is None:
                return Return.ok(VerificationResult(exists=False, requires_manual_entry=True))

            if profile.account_id is not None:
                return Return.err(
                    Error("ALREADY_EXISTS", "This student has already been registered")
                )

            try:
                data = self._decrypt(profile)
            except ProtectionError:
                logger.exception("Could not decrypt student profile %s", profile.id)
                return Return.err(
                    Error("PROTECTION_ERROR", "Unable to read student record")
                )

        return Return.ok(VerificationResult(exists=True, data=data))

    def _decrypt(self, profile: StudentProfile) -> StudentVerificationData:
        unprotect = self.protector.unprotect
        return StudentVerificationData(
            surname=unprotect(profile.surname_encrypted, Classification.NAME),
            first_name=unprotect(profile.first_name_encrypted, Classification.NAME),
            other_name=unprotect(profile.other_name_encrypted, Classification.NAME) or None,
            gender=profile.gender.value,
            jamb_reg_number=unprotect(
                profile.jamb_reg_number_encrypted, Classification.GOVERNMENT_ID
            ),
            photo=profile.passport_url,
            college=profile.college,
            department=profile.department,
            course=profile.course,
            state=unprotect(profile.state_encrypted, Classification.LOCATION),
            lga=unprotect(profile.lga_encrypted, Classification.LOCATION),
            marital_status=profile.marital_status.value,
            email=unprotect(profile.email_encrypted, Classification.EMAIL),
            phone=unprotect(profile.phone_encrypted, Classification.PHONE),
        )
