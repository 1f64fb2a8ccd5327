from typing import Dict, Optional

from fastapi import status
from libs.result import Error


class ClientError(Exception):
    def __init__(
        self,
        base_error: Error,
        status_code: int = status.HTTP_400_BAD_REQUEST,
        headers: Optional[Dict[str, str]] = None,
    ):
        self.base_error = base_error
        self.status_code = status_code
        self.headers = headers
        super().__init__(base_error.message)


class ServerError(Exception):
    def __init__(self, base_error: Error):
        self.base_error = base_error
        super().__init__(base_error.message)


CLIENT_ERROR_STATUS = {
    "VALIDATION_ERROR": status.HTTP_422_UNPROCESSABLE_ENTITY,
    "ALREADY_EXISTS": status.HTTP_409_CONFLICT,
    "ALREADY_VERIFIED": status.HTTP_409_CONFLICT,
    "EXPIRED_OR_INVALID": status.HTTP_400_BAD_REQUEST,
    "LINK_MISMATCH": status.HTTP_400_BAD_REQUEST,
    "RATE_LIMITED": status.HTTP_429_TOO_MANY_REQUESTS,
    "ACCOUNT_INACTIVE": status.HTTP_403_FORBIDDEN,
    "NOTIFICATION_FAILED": status.HTTP_503_SERVICE_UNAVAILABLE,
}


def raise_for_error(error: Error):
    """Map a use case error onto ClientError / ServerError"""
    status_code = CLIENT_ERROR_STATUS.get(error.code)
    if status_code is None:
        raise ServerError(error)

    headers = None
    if error.code == "RATE_LIMITED":
        headers = {"Retry-After": str(error.details.get("retry_after_seconds", 60))}
    raise ClientError(error, status_code=status_code, headers=headers)
