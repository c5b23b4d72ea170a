"""API error codes and exceptions.

Services raise the exceptions below; vidshare.responses turns them into the
error envelope with the status mapped from the code.
"""

from enum import Enum


class ApiErrorCode(str, Enum):
    """Machine-readable error codes (E_<WHAT>)."""

    E_UNAUTHENTICATED = "E_UNAUTHENTICATED"
    E_INVALID_CREDENTIALS = "E_INVALID_CREDENTIALS"
    E_REFRESH_TOKEN_INVALID = "E_REFRESH_TOKEN_INVALID"

    E_FORBIDDEN = "E_FORBIDDEN"

    E_NOT_FOUND = "E_NOT_FOUND"
    E_USER_NOT_FOUND = "E_USER_NOT_FOUND"
    E_CHANNEL_NOT_FOUND = "E_CHANNEL_NOT_FOUND"
    E_VIDEO_NOT_FOUND = "E_VIDEO_NOT_FOUND"
    E_COMMENT_NOT_FOUND = "E_COMMENT_NOT_FOUND"
    E_TWEET_NOT_FOUND = "E_TWEET_NOT_FOUND"
    E_PLAYLIST_NOT_FOUND = "E_PLAYLIST_NOT_FOUND"

    E_INVALID_REQUEST = "E_INVALID_REQUEST"
    E_FIELD_REQUIRED = "E_FIELD_REQUIRED"
    E_INVALID_ID = "E_INVALID_ID"
    E_USER_EXISTS = "E_USER_EXISTS"
    E_INVALID_PASSWORD = "E_INVALID_PASSWORD"
    E_FILE_REQUIRED = "E_FILE_REQUIRED"
    E_FILE_TOO_LARGE = "E_FILE_TOO_LARGE"

    E_UPLOAD_FAILED = "E_UPLOAD_FAILED"
    E_INTERNAL = "E_INTERNAL"


_CODES_BY_STATUS: dict[int, tuple[ApiErrorCode, ...]] = {
    400: (
        ApiErrorCode.E_INVALID_REQUEST,
        ApiErrorCode.E_FIELD_REQUIRED,
        ApiErrorCode.E_INVALID_ID,
        ApiErrorCode.E_USER_EXISTS,
        ApiErrorCode.E_INVALID_PASSWORD,
        ApiErrorCode.E_FILE_REQUIRED,
        ApiErrorCode.E_FILE_TOO_LARGE,
    ),
    401: (
        ApiErrorCode.E_UNAUTHENTICATED,
        ApiErrorCode.E_INVALID_CREDENTIALS,
        ApiErrorCode.E_REFRESH_TOKEN_INVALID,
    ),
    403: (ApiErrorCode.E_FORBIDDEN,),
    404: (
        ApiErrorCode.E_NOT_FOUND,
        ApiErrorCode.E_USER_NOT_FOUND,
        ApiErrorCode.E_CHANNEL_NOT_FOUND,
        ApiErrorCode.E_VIDEO_NOT_FOUND,
        ApiErrorCode.E_COMMENT_NOT_FOUND,
        ApiErrorCode.E_TWEET_NOT_FOUND,
        ApiErrorCode.E_PLAYLIST_NOT_FOUND,
    ),
    500: (ApiErrorCode.E_UPLOAD_FAILED, ApiErrorCode.E_INTERNAL),
}

ERROR_CODE_TO_STATUS: dict[ApiErrorCode, int] = {
    code: status for status, codes in _CODES_BY_STATUS.items() for code in codes
}


class ApiError(Exception):
    """Base class for errors that map onto an HTTP error envelope.

    Subclasses set default_code/default_message; status_code always follows
    the code actually used.
    """

    default_code = ApiErrorCode.E_INTERNAL
    default_message = "Internal server error"

    def __init__(self, code: ApiErrorCode | None = None, message: str | None = None):
        self.code = code or self.default_code
        self.message = message or self.default_message
        self.status_code = ERROR_CODE_TO_STATUS.get(self.code, 500)
        super().__init__(self.message)


class InvalidRequestError(ApiError):
    default_code = ApiErrorCode.E_INVALID_REQUEST
    default_message = "Invalid request"


class UnauthenticatedError(ApiError):
    default_code = ApiErrorCode.E_UNAUTHENTICATED
    default_message = "Authentication required"


class ForbiddenError(ApiError):
    default_code = ApiErrorCode.E_FORBIDDEN
    default_message = "Forbidden"


class NotFoundError(ApiError):
    default_code = ApiErrorCode.E_NOT_FOUND
    default_message = "Not found"


class UploadError(ApiError):
    """The media host rejected or could not receive an upload."""

    default_code = ApiErrorCode.E_UPLOAD_FAILED
    default_message = "Upload failed"
