from typing import Optional

from fastapi import APIRouter, Depends, Request, status
from pydantic import BaseModel, EmailStr, Field

from campus_identity.api.error import ClientError, raise_for_error
from campus_identity.app.services.audit_sink import AuditSink
from campus_identity.app.services.clock import Clock
from campus_identity.app.services.data_protection import DataProtector
from campus_identity.app.services.link_codec import LinkCodec
from campus_identity.app.services.notification_gateway import NotificationGateway
from campus_identity.app.services.password_policy import PasswordHasher, PasswordPolicy
from campus_identity.app.services.unit_of_work import UnitOfWork
from campus_identity.app.services.verification_token_manager import (
    VerificationTokenManager,
    link_mismatch,
)
from campus_identity.app.settings import RegistrationSettings
from campus_identity.app.use_cases.registration import (
    LookupStudentUseCase,
    RegisterStudentCommand,
    RegisterStudentUseCase,
    RegistrationResponse,
    ResendVerificationResponse,
    ResendVerificationUseCase,
    VerificationResult,
    VerifyEmailCommand,
    VerifyEmailResponse,
    VerifyEmailUseCase,
)
from campus_identity.depends import (
    get_audit_sink,
    get_clock,
    get_data_protector,
    get_link_codec,
    get_notification_gateway,
    get_password_hasher,
    get_password_policy,
    get_settings,
    get_unit_of_work,
    get_verification_token_manager,
)

router = APIRouter(prefix="/registration", tags=["Registration"])


class LookupStudentRequest(BaseModel):
    identifier: str = Field(..., description="Matric number or JAMB registration number")


@router.post(
    "/students/lookup", status_code=status.HTTP_200_OK, response_model=VerificationResult
)
async def lookup_student(
    request: LookupStudentRequest,
    uow: UnitOfWork = Depends(get_unit_of_work),
    protector: DataProtector = Depends(get_data_protector),
):
    """
    Student record lookup

    Returns the stored record for pre-fill, or asks for manual entry.

    Raises:
        - 409 Conflict: Record already registered
        - 422 Unprocessable Entity: Empty identifier
    """
    result = await LookupStudentUseCase(uow, protector).execute(request.identifier)
    if result.is_err():
        raise_for_error(result.error)
    return result.value


class RegisterStudentRequest(BaseModel):
    """
    Registration HTTP request payload

    Fields are checked by the use case so every violation is reported
    together.
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


@router.post(
    "/students", status_code=status.HTTP_201_CREATED, response_model=RegistrationResponse
)
async def register_student(
    request: RegisterStudentRequest,
    uow: UnitOfWork = Depends(get_unit_of_work),
    protector: DataProtector = Depends(get_data_protector),
    hasher: PasswordHasher = Depends(get_password_hasher),
    policy: PasswordPolicy = Depends(get_password_policy),
    token_manager: VerificationTokenManager = Depends(get_verification_token_manager),
    gateway: NotificationGateway = Depends(get_notification_gateway),
    audit_sink: AuditSink = Depends(get_audit_sink),
    settings: RegistrationSettings = Depends(get_settings),
):
    """
    Student Registration

    Creates an inactive account and emails a verification link.

    Raises:
        - 409 Conflict: Student or email already registered
        - 422 Unprocessable Entity: Invalid details (all violations listed)
        - 500 Internal Server Error: Server error
    """
    command = RegisterStudentCommand(**request.model_dump())

    use_case = RegisterStudentUseCase(
        uow, protector, hasher, policy, token_manager, gateway, audit_sink, settings
    )
    result = await use_case.execute(command)

    if result.is_err():
        raise_for_error(result.error)
    return result.value


async def _verify_email(
    command: VerifyEmailCommand,
    uow: UnitOfWork,
    token_manager: VerificationTokenManager,
    codec: LinkCodec,
    gateway: NotificationGateway,
    clock: Clock,
    settings: RegistrationSettings,
) -> VerifyEmailResponse:
    use_case = VerifyEmailUseCase(uow, token_manager, codec, gateway, clock, settings)
    result = await use_case.execute(command)
    if result.is_err():
        raise_for_error(result.error)
    return result.value


@router.get(
    "/verify-email", status_code=status.HTTP_200_OK, response_model=VerifyEmailResponse
)
async def verify_email_link(
    request: Request,
    uow: UnitOfWork = Depends(get_unit_of_work),
    token_manager: VerificationTokenManager = Depends(get_verification_token_manager),
    codec: LinkCodec = Depends(get_link_codec),
    gateway: NotificationGateway = Depends(get_notification_gateway),
    clock: Clock = Depends(get_clock),
    settings: RegistrationSettings = Depends(get_settings),
):
    """
    Email Verification via link (?e=&t=&h=)

    Raises:
        - 400 Bad Request: Invalid, expired, used or tampered link
    """
    params = codec.parse_link_params(request.query_params)
    if params is None:
        raise ClientError(link_mismatch())

    command = VerifyEmailCommand(
        token=params.token,
        encoded_identifier=request.query_params["e"],
        stamp=params.stamp,
    )
    return await _verify_email(command, uow, token_manager, codec, gateway, clock, settings)


class VerifyEmailRequest(BaseModel):
    token: str = Field(..., min_length=1, description="Token (t) from the link")
    e: Optional[str] = Field(default=None, description="Encoded identifier from the link")
    h: Optional[str] = Field(default=None, description="Integrity stamp from the link")


@router.post(
    "/verify-email", status_code=status.HTTP_200_OK, response_model=VerifyEmailResponse
)
async def verify_email(
    request: VerifyEmailRequest,
    uow: UnitOfWork = Depends(get_unit_of_work),
    token_manager: VerificationTokenManager = Depends(get_verification_token_manager),
    codec: LinkCodec = Depends(get_link_codec),
    gateway: NotificationGateway = Depends(get_notification_gateway),
    clock: Clock = Depends(get_clock),
    settings: RegistrationSettings = Depends(get_settings),
):
    """
    Email Verification with the link parameters posted by the frontend

    Raises:
        - 400 Bad Request: Invalid, expired, used or tampered link
    """
    command = VerifyEmailCommand(token=request.token, encoded_identifier=request.e, stamp=request.h)
    return await _verify_email(command, uow, token_manager, codec, gateway, clock, settings)


class ResendVerificationRequest(BaseModel):
    email: EmailStr = Field(..., description="Email address used at registration")


@router.post(
    "/resend-verification",
    status_code=status.HTTP_200_OK,
    response_model=ResendVerificationResponse,
)
async def resend_verification(
    request: ResendVerificationRequest,
    uow: UnitOfWork = Depends(get_unit_of_work),
    token_manager: VerificationTokenManager = Depends(get_verification_token_manager),
    gateway: NotificationGateway = Depends(get_notification_gateway),
    settings: RegistrationSettings = Depends(get_settings),
):
    """
    Resend Verification Email

    Raises:
        - 409 Conflict: Email already verified
        - 429 Too Many Requests: Resend limit reached (Retry-After header)
        - 503 Service Unavailable: Email could not be sent
    """
    use_case = ResendVerificationUseCase(uow, token_manager, gateway, settings)
    result = await use_case.execute(request.email)
    if result.is_err():
        raise_for_error(result.error)
    return result.value
