"""Domain errors raised by the services and rendered by the API layer."""


class ChatAppError(Exception):
    """Base error carrying the HTTP status and the user-facing message."""

    status_code = 500
    default_message = "Server error."

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class BadRequestError(ChatAppError):
    status_code = 400
    default_message = "Bad request."


class ConflictError(ChatAppError):
    status_code = 409
    default_message = "Conflict."


class NotFoundError(ChatAppError):
    status_code = 404
    default_message = "Not found."


class OtpExpiredError(ChatAppError):
    status_code = 400
    default_message = "OTP expired. Please register again to get a new OTP."


class InvalidOtpError(ChatAppError):
    status_code = 400
    default_message = "Invalid OTP."


class InvalidCredentialsError(ChatAppError):
    status_code = 401
    default_message = "Invalid email or password."


class EmailNotVerifiedError(ChatAppError):
    status_code = 403
    default_message = "Account not email verified."


class NotApprovedError(ChatAppError):
    status_code = 403
    default_message = "Account not approved."


class InternalServerError(ChatAppError):
    status_code = 500
    default_message = "Server error."
