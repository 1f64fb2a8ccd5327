"""
Register Student Use Case

Turns a student's identity claim into an inactive Account, a StudentProfile
with protected fields, and a credentials binding, then emails a verification
link.
"""

import asyncio
import logging
import re
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from libs.result import Error, Result, Return
from campus_identity.app.services.audit_sink import AuditSink, record_safely
from campus_identity.app.services.data_protection import (
    Classification,
    DataProtector,
    ProtectedValue,
    ProtectionError,
    mask_email,
    normalize_email,
)
from campus_identity.app.services.notification_gateway import NotificationGateway
from campus_identity.app.services.password_policy import PasswordHasher, PasswordPolicy
from campus_identity.app.services.unit_of_work import UnitOfWork
from campus_identity.app.services.verification_token_manager import VerificationTokenManager
from campus_identity.app.settings import RegistrationSettings
from campus_identity.domain.entities import (
    Account,
    AccountRole,
    AuditAction,
    CredentialBinding,
    StudentProfile,
)
from .normalization import (
    is_valid_email,
    normalize_gender,
    normalize_marital_status,
    sentence_case,
    upper,
)
from .register_student_dto import (
    AccountInfo,
    RegisterStudentCommand,
    RegistrationResponse,
    StudentProfileInfo,
)
from .verification_email import VerificationEmailSender

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = {
    "matric_number": "Matric number is required",
    "surname": "Surname is required",
    "first_name": "First name is required",
    "email": "Email is required",
    "phone": "Phone number is required",
    "password": "Password is required",
}

# Profile column prefix -> classification used for both ciphertext and hash
PROTECTED_FIELDS = {
    "surname": Classification.NAME,
    "first_name": Classification.NAME,
    "other_name": Classification.NAME,
    "email": Classification.EMAIL,
    "phone": Classification.PHONE,
    "jamb_reg_number": Classification.GOVERNMENT_ID,
    "nin": Classification.GOVERNMENT_ID,
    "state": Classification.LOCATION,
    "lga": Classification.LOCATION,
}

ALREADY_EXISTS_MESSAGE = "A student with these details is already registered"


def _search_hash_column(name: str) -> str:
    if name == "jamb_reg_number":
        return "jamb_reg_search_hash"
    return f"{name}_search_hash"


def _violation(field: str, message: str) -> Dict[str, str]:
    return {"field": field, "message": message}


class RegisterStudentUseCase:
    """
    Register Student Use Case

    Command/Response Pattern:
    - Input: RegisterStudentCommand (raw identity claim)
    - Output: Result[RegistrationResponse]

    Business Logic:
    1. Validate every field, collecting all violations
    2. Normalize names, identifiers, gender and marital status
    3. Protect sensitive fields and hash the password concurrently
    4. Reject duplicates by matric number, JAMB number, email or phone
    5. Create Account (inactive), StudentProfile and CredentialBinding atomically
    6. After commit: issue a verification token and email the link
    7. Audit registration and dispatch outcome (best effort)

    A pre-seeded profile with the same matric number and no account is
    claimed instead of duplicated.
    """

    def __init__(
        self,
        uow: UnitOfWork,
        protector: DataProtector,
        hasher: PasswordHasher,
        policy: PasswordPolicy,
        token_manager: VerificationTokenManager,
        gateway: NotificationGateway,
        audit_sink: AuditSink,
        settings: RegistrationSettings,
    ):
        self.uow = uow
        self.protector = protector
        self.hasher = hasher
        self.policy = policy
        self.audit_sink = audit_sink
        self.settings = settings
        self.emails = VerificationEmailSender(uow, token_manager, gateway, settings)

    async def execute(self, command: RegisterStudentCommand) -> Result[RegistrationResponse]:
        """
        Execute student registration

        Errors:
            - VALIDATION_ERROR: details["violations"] lists every problem
            - ALREADY_EXISTS: identity or email already registered
            - PROTECTION_ERROR: field encryption failed
            - REGISTRATION_FAILED: unexpected persistence failure
        """
        violations = self._validate(command)
        if violations:
            return Return.err(
                Error(
                    "VALIDATION_ERROR",
                    "Registration details are invalid",
                    {"violations": violations},
                )
            )

        email = normalize_email(command.email)
        matric_number = upper(command.matric_number)
        plain = self._normalized_fields(command, email)

        try:
            protected, password_hash = await self._protect(plain, command.password)
        except ProtectionError:
            logger.exception("Field protection failed for registration %s", mask_email(email))
            return Return.err(
                Error("PROTECTION_ERROR", "Unable to secure registration details")
            )

        profile_values = self._profile_values(command, matric_number, protected)

        try:
            created = await self._create_records(
                email, plain, password_hash, matric_number, profile_values
            )
        except IntegrityError:
            logger.info("Concurrent duplicate registration for %s", mask_email(email))
            return Return.err(Error("ALREADY_EXISTS", ALREADY_EXISTS_MESSAGE))
        except SQLAlchemyError:
            logger.exception("Registration failed for %s", mask_email(email))
            return Return.err(
                Error("REGISTRATION_FAILED", "Registration could not be completed")
            )

        if created.is_err():
            return Return.err(created.error)
        account, profile, claimed = created.value

        logger.info(
            "Registered student %s (%s)", profile.matric_number, mask_email(account.email)
        )
        await record_safely(
            self.audit_sink,
            AuditAction.STUDENT_REGISTERED.value,
            account_id=account.id,
            subject=account.email,
            metadata={
                "profile_id": str(profile.id),
                "matric_number": profile.matric_number,
                "claimed_seed_record": claimed,
            },
        )

        email_sent = await self._send_verification(account)

        return Return.ok(
            RegistrationResponse(
                account=AccountInfo(
                    id=str(account.id),
                    email=account.email,
                    role=account.role.value,
                    active=account.active,
                ),
                student=StudentProfileInfo(
                    id=str(profile.id),
                    matric_number=profile.matric_number,
                    college=profile.college,
                    department=profile.department,
                    course=profile.course,
                ),
                requires_verification=True,
                verification_email_sent=email_sent,
            )
        )

    def _validate(self, command: RegisterStudentCommand) -> List[Dict[str, str]]:
        violations = []

        for name, message in REQUIRED_FIELDS.items():
            if not (getattr(command, name) or "").strip():
                violations.append(_violation(name, message))

        matric_number = upper(command.matric_number)
        if matric_number and not re.match(self.settings.matric_number_pattern, matric_number):
            violations.append(_violation("matric_number", "Matric number format is invalid"))

        jamb = upper(command.jamb_reg_number)
        if jamb and not re.match(self.settings.jamb_number_pattern, jamb):
            violations.append(
                _violation("jamb_reg_number", "JAMB registration number format is invalid")
            )

        email = normalize_email(command.email)
        if email and not is_valid_email(email):
            violations.append(_violation("email", "Email address is invalid"))

        if command.password:
            check = self.policy.validate(command.password)
            violations.extend(_violation("password", message) for message in check.violations)

        return violations

    @staticmethod
    def _normalized_fields(command: RegisterStudentCommand, email: str) -> Dict[str, str]:
        return {
            "surname": sentence_case(command.surname),
            "first_name": sentence_case(command.first_name),
            "other_name": sentence_case(command.other_name),
            "email": email,
            "phone": (command.phone or "").strip(),
            "jamb_reg_number": upper(command.jamb_reg_number),
            "nin": (command.nin or "").strip(),
            "state": (command.state or "").strip(),
            "lga": (command.lga or "").strip(),
        }

    async def _protect(
        self, plain: Dict[str, str], password: str
    ) -> Tuple[Dict[str, ProtectedValue], str]:
        names = list(PROTECTED_FIELDS)
        results = await asyncio.gather(
            *(
                asyncio.to_thread(self.protector.protect, plain[name], PROTECTED_FIELDS[name])
                for name in names
            ),
            asyncio.to_thread(self.hasher.hash, password),
        )
        return dict(zip(names, results[:-1])), results[-1]

    @staticmethod
    def _profile_values(
        command: RegisterStudentCommand,
        matric_number: str,
        protected: Dict[str, ProtectedValue],
    ) -> Dict[str, Any]:
        values: Dict[str, Any] = {
            "matric_number": matric_number,
            "college": upper(command.college),
            "department": sentence_case(command.department),
            "course": sentence_case(command.course),
            "gender": normalize_gender(command.gender),
            "marital_status": normalize_marital_status(command.marital_status),
            "passport_url": (command.passport_url or "").strip() or None,
        }
        for name, value in protected.items():
            values[f"{name}_encrypted"] = value.ciphertext
            values[_search_hash_column(name)] = value.search_hash
        return values

    async def _create_records(
        self,
        email: str,
        plain: Dict[str, str],
        password_hash: str,
        matric_number: str,
        profile_values: Dict[str, Any],
    ) -> Result[Tuple[Account, StudentProfile, bool]]:
        already_exists = Error("ALREADY_EXISTS", ALREADY_EXISTS_MESSAGE)

        async with self.uow:
            if await self.uow.accounts.get_by_email(email) is not None:
                return Return.err(already_exists)

            matches = await self.uow.student_profiles.find_matching(
                matric_number,
                profile_values["jamb_reg_search_hash"],
                profile_values["email_search_hash"],
                profile_values["phone_search_hash"],
            )
            seed = self._claimable_seed(matches, matric_number)
            if matches and seed is None:
                return Return.err(already_exists)

            name = " ".join(
                part for part in (plain["surname"], plain["first_name"], plain["other_name"]) if part
            )
            account = await self.uow.accounts.create(
                Account(
                    email=email,
                    name=name,
                    role=AccountRole.student,
                    active=False,
                    password_hash=password_hash,
                )
            )

            if seed is not None:
                profile = await self.uow.student_profiles.claim_unbound(
                    seed.id, account.id, profile_values
                )
                if profile is None:
                    return Return.err(already_exists)
            else:
                profile = await self.uow.student_profiles.create(
                    StudentProfile(account_id=account.id, **profile_values)
                )

            await self.uow.credential_bindings.create(
                CredentialBinding(
                    account_id=account.id,
                    type="credentials",
                    provider="credentials",
                    provider_account_id=str(account.id),
                )
            )

            await self.uow.commit()

        return Return.ok((account, profile, seed is not None))

    @staticmethod
    def _claimable_seed(
        matches: List[StudentProfile], matric_number: str
    ) -> Optional[StudentProfile]:
        if len(matches) != 1:
            return None
        match = matches[0]
        if match.account_id is None and match.matric_number == matric_number:
            return match
        return None

    async def _send_verification(self, account: Account) -> bool:
        try:
            token = await self.emails.issue_token(account.email)
        except SQLAlchemyError:
            logger.exception(
                "Verification token not issued for %s", mask_email(account.email)
            )
            sent = False
        else:
            sent = await self.emails.send(account.email, account.name, token)

        action = (
            AuditAction.VERIFICATION_EMAIL_SENT
            if sent
            else AuditAction.VERIFICATION_EMAIL_FAILED
        )
        await record_safely(
            self.audit_sink,
            action.value,
            account_id=account.id,
            subject=account.email,
            metadata={"template": "email-verification"},
        )
        return sent
