"""Error taxonomy for the auth flows.

``AuthError`` subclasses are expected outcomes of user input: routers turn
them into an error flash and a redirect back to the form. ``InfrastructureError``
covers store and mailer failures and is handled by the app-level exception
handler in ``app.main``.
"""


class AuthError(Exception):
    """A recoverable auth failure carrying the message shown to the user."""

    default_message = "Something went wrong"
    code = "AUTH_ERROR"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class PasswordMismatchError(AuthError):
    default_message = "Password and Confirm Password must be same"
    code = "PASSWORD_MISMATCH"


class InvalidEmailError(AuthError):
    default_message = "Enter a valid email address"
    code = "INVALID_EMAIL"


class EmailTakenError(AuthError):
    default_message = "This email address is taken, Try some other email address"
    code = "EMAIL_TAKEN"


class IncorrectPasswordError(AuthError):
    default_message = "Incorrect Password"
    code = "INCORRECT_PASSWORD"


class UnknownEmailError(AuthError):
    default_message = "There is no account with this email address"
    code = "UNKNOWN_EMAIL"


class InvalidOrExpiredTokenError(AuthError):
    default_message = "Password reset token is invalid or has expired"
    code = "INVALID_OR_EXPIRED_TOKEN"


class MissingFieldError(AuthError):
    code = "MISSING_FIELD"

    def __init__(self, field: str):
        self.field = field
        super().__init__(f"{field.capitalize()} is required")


class InfrastructureError(Exception):
    """Store or mailer failure; not recoverable inside a flow."""

    def __init__(self, message: str, code: str = "INFRASTRUCTURE_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)


class StoreError(InfrastructureError):
    def __init__(self, message: str):
        super().__init__(message, code="STORE_ERROR")


class MailDeliveryError(InfrastructureError):
    def __init__(self, message: str):
        super().__init__(message, code="MAIL_DELIVERY_ERROR")
