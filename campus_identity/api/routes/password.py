from typing import Optional

from fastapi import APIRouter, Depends, Request, status
from pydantic import BaseModel, EmailStr, Field

from libs.result import Error
from campus_identity.api.error import ClientError, raise_for_error
from campus_identity.app.services.clock import Clock
from campus_identity.app.services.link_codec import LinkCodec
from campus_identity.app.services.notification_gateway import NotificationGateway
from campus_identity.app.services.password_policy import PasswordHasher, PasswordPolicy
from campus_identity.app.services.password_reset_token_manager import (
    INVALID_RESET_LINK_MESSAGE,
    PasswordResetTokenManager,
)
from campus_identity.app.services.unit_of_work import UnitOfWork
from campus_identity.app.settings import RegistrationSettings
from campus_identity.app.use_cases.password import (
    ConfirmPasswordResetCommand,
    ConfirmPasswordResetResponse,
    ConfirmPasswordResetUseCase,
    PasswordResetLinkResponse,
    RequestPasswordResetResponse,
    RequestPasswordResetUseCase,
    VerifyPasswordResetLinkUseCase,
)
from campus_identity.depends import (
    get_clock,
    get_link_codec,
    get_notification_gateway,
    get_password_hasher,
    get_password_policy,
    get_password_reset_token_manager,
    get_settings,
    get_unit_of_work,
)

router = APIRouter(prefix="/password", tags=["Password"])


class RequestPasswordResetRequest(BaseModel):
    email: EmailStr = Field(..., description="Account email address")


@router.post(
    "/reset-request",
    status_code=status.HTTP_200_OK,
    response_model=RequestPasswordResetResponse,
)
async def request_password_reset(
    request: RequestPasswordResetRequest,
    uow: UnitOfWork = Depends(get_unit_of_work),
    token_manager: PasswordResetTokenManager = Depends(get_password_reset_token_manager),
    gateway: NotificationGateway = Depends(get_notification_gateway),
    clock: Clock = Depends(get_clock),
    settings: RegistrationSettings = Depends(get_settings),
):
    """
    Request Password Reset

    Same response whether or not the email exists.

    Raises:
        - 403 Forbidden: Account not verified yet
        - 503 Service Unavailable: Email could not be sent
    """
    use_case = RequestPasswordResetUseCase(uow, token_manager, gateway, clock, settings)
    result = await use_case.execute(request.email)
    if result.is_err():
        raise_for_error(result.error)
    return result.value


@router.get(
    "/reset/verify", status_code=status.HTTP_200_OK, response_model=PasswordResetLinkResponse
)
async def verify_password_reset_link(
    request: Request,
    uow: UnitOfWork = Depends(get_unit_of_work),
    token_manager: PasswordResetTokenManager = Depends(get_password_reset_token_manager),
    codec: LinkCodec = Depends(get_link_codec),
):
    """
    Check a reset link (?e=&t=&h=) before showing the new-password form

    Raises:
        - 400 Bad Request: Invalid, expired or tampered link
    """
    params = codec.parse_link_params(request.query_params)
    if params is None:
        raise ClientError(Error("LINK_MISMATCH", INVALID_RESET_LINK_MESSAGE))

    use_case = VerifyPasswordResetLinkUseCase(uow, token_manager)
    result = await use_case.execute(params.token, request.query_params["e"])
    if result.is_err():
        raise_for_error(result.error)
    return result.value


class ConfirmPasswordResetRequest(BaseModel):
    token: str = Field(..., min_length=1, description="Token (t) from the reset link")
    e: Optional[str] = Field(default=None, description="Encoded identifier from the link")
    password: str = Field(..., description="New password")
    confirm_password: str = Field(..., description="New password again")


@router.post(
    "/reset", status_code=status.HTTP_200_OK, response_model=ConfirmPasswordResetResponse
)
async def confirm_password_reset(
    request: ConfirmPasswordResetRequest,
    uow: UnitOfWork = Depends(get_unit_of_work),
    token_manager: PasswordResetTokenManager = Depends(get_password_reset_token_manager),
    hasher: PasswordHasher = Depends(get_password_hasher),
    policy: PasswordPolicy = Depends(get_password_policy),
    gateway: NotificationGateway = Depends(get_notification_gateway),
    clock: Clock = Depends(get_clock),
    settings: RegistrationSettings = Depends(get_settings),
):
    """
    Confirm Password Reset

    Raises:
        - 400 Bad Request: Invalid, expired or tampered link
        - 422 Unprocessable Entity: Password policy or confirmation mismatch
    """
    command = ConfirmPasswordResetCommand(
        token=request.token,
        encoded_identifier=request.e,
        password=request.password,
        confirm_password=request.confirm_password,
    )
    use_case = ConfirmPasswordResetUseCase(
        uow, token_manager, hasher, policy, gateway, clock, settings
    )
    result = await use_case.execute(command)
    if result.is_err():
        raise_for_error(result.error)
    return result.value
